"""
Occupancy builder - turns the mounted assets of a rack into a per-unit,
per-face map of occupied cells.

The owner is repeated on every cell a multi-unit asset spans so that overlap
and highlight checks are a single lookup per cell.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Hashable, Iterator, Optional, Tuple

from rackmap.exceptions import InvalidPlacementRequest
from rackmap.models.rack import FACES, Face, Rack, faces_match_depth, normalize_id, same_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OccupancyCell:
    asset_id: Hashable
    vsize: int
    hsize: int
    highlighted: bool = False
    overlaps: Tuple[Hashable, ...] = ()

    @property
    def blocking(self) -> bool:
        return not self.highlighted


@dataclass
class UnitCells:
    """The three depth slots of one rack unit."""
    front: Optional[OccupancyCell] = None
    interior: Optional[OccupancyCell] = None
    back: Optional[OccupancyCell] = None

    def get(self, face: Face) -> Optional[OccupancyCell]:
        return getattr(self, face.label)

    def set(self, face: Face, cell: OccupancyCell) -> None:
        setattr(self, face.label, cell)

    def items(self) -> Iterator[Tuple[Face, OccupancyCell]]:
        for face in FACES:
            cell = self.get(face)
            if cell is not None:
                yield face, cell


@dataclass
class OccupancyMap:
    size: int
    units: Dict[int, UnitCells] = field(default_factory=dict)

    def cell(self, unit: int, face: Face) -> Optional[OccupancyCell]:
        cells = self.units.get(unit)
        return cells.get(face) if cells else None

    def is_blocked(self, unit: int, face: Face) -> bool:
        cell = self.cell(unit, face)
        return cell is not None and cell.blocking

    def cells(self) -> Iterator[Tuple[int, Face, OccupancyCell]]:
        for unit in sorted(self.units):
            for face, cell in self.units[unit].items():
                yield unit, face, cell

    def _claim(self, unit: int, face: Face, cell: OccupancyCell) -> None:
        cells = self.units.setdefault(unit, UnitCells())
        current = cells.get(face)
        if current is None:
            cells.set(face, cell)
            return
        # A blocking claim keeps the cell so overlaps never read as free
        if current.highlighted and not cell.highlighted:
            winner, loser = cell, current
        else:
            winner, loser = current, cell
        cells.set(face, replace(
            winner,
            highlighted=winner.highlighted and loser.highlighted,
            overlaps=winner.overlaps + (loser.asset_id,) + loser.overlaps,
        ))


def build_occupancy(rack: Rack, highlight_location_id: Optional[Hashable] = None) -> OccupancyMap:
    """Build the occupancy map of a rack.

    Cells owned by an asset whose location_id equals highlight_location_id are
    marked highlighted; a zero or missing highlight id marks nothing. Span
    units outside the rack are dropped, never raised on.
    """
    if rack.size < 1:
        raise InvalidPlacementRequest(f"Rack size must be >= 1, got {rack.size}")

    highlight = normalize_id(highlight_location_id)
    occupancy = OccupancyMap(size=rack.size)
    for asset in rack.assets:
        if not asset.is_placed:
            continue
        if asset.faces is not None and not faces_match_depth(Face(asset.faces), asset.hsize):
            logger.warning(
                "Asset %s: stored faces %#x do not match depth class %d; using stored faces",
                asset.id, int(asset.faces), asset.hsize,
            )
        highlighted = bool(highlight) and same_id(asset.location_id, highlight)
        cell = OccupancyCell(
            asset_id=asset.id,
            vsize=asset.vsize,
            hsize=asset.hsize,
            highlighted=highlighted,
        )
        faces = asset.occupied_faces
        clipped = 0
        for unit in rack.span(asset.position, asset.vsize):
            if not rack.contains(unit):
                clipped += 1
                continue
            for face in FACES:
                if faces & face:
                    occupancy._claim(unit, face, cell)
        if clipped:
            logger.debug(
                "Asset %s at unit %d spans %d unit(s) outside rack of size %d",
                asset.id, asset.position, clipped, rack.size,
            )

    logger.debug("Built occupancy for %d assets: %d units in use", len(rack.assets), len(occupancy.units))
    return occupancy
