"""
Capacity summary for a rack view - used/free units per face.
"""
from dataclasses import dataclass
from typing import Dict

from rackmap.models.rack import FACES, Face, Rack
from rackmap.services.occupancy import OccupancyMap


@dataclass(frozen=True)
class FaceUsage:
    used: int
    free: int


@dataclass(frozen=True)
class RackSummary:
    size: int
    placed_assets: int
    unplaced_assets: int
    faces: Dict[Face, FaceUsage]
    front_utilization_pct: float


def summarize_occupancy(occupancy: OccupancyMap, rack: Rack) -> RackSummary:
    used = {face: 0 for face in FACES}
    for _unit, face, _cell in occupancy.cells():
        used[face] += 1

    placed = sum(1 for a in rack.assets if a.is_placed)
    return RackSummary(
        size=rack.size,
        placed_assets=placed,
        unplaced_assets=len(rack.assets) - placed,
        faces={face: FaceUsage(used=used[face], free=rack.size - used[face]) for face in FACES},
        front_utilization_pct=round(used[Face.FRONT] / rack.size * 100, 1),
    )
