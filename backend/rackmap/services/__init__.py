from rackmap.services.occupancy import OccupancyCell, OccupancyMap, UnitCells, build_occupancy
from rackmap.services.placement import Anchor, AnchorCheck, check_anchor, legal_anchors

__all__ = [
    "OccupancyCell", "OccupancyMap", "UnitCells", "build_occupancy",
    "Anchor", "AnchorCheck", "check_anchor", "legal_anchors",
]
