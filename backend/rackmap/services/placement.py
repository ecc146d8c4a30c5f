"""
Placement validator - finds every (unit, face) anchor where a new asset of a
given footprint fits without colliding with mounted equipment.
Cells of the asset being relocated (highlighted cells) count as free.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Hashable, Optional, Set

from rackmap.exceptions import InvalidPlacementRequest
from rackmap.models.rack import FACES, Face, Rack
from rackmap.services.occupancy import OccupancyMap

logger = logging.getLogger(__name__)

# Anchor face -> faces that must be free over the whole span
FACE_GROUPS: Dict[int, Dict[Face, Face]] = {
    1: {
        Face.FRONT: Face.FRONT,
        Face.BACK: Face.BACK,
    },
    2: {
        Face.FRONT: Face.FRONT | Face.INTERIOR,
        Face.BACK: Face.BACK | Face.INTERIOR,
    },
    # Full depth anchors at the front only
    3: {
        Face.FRONT: Face.FRONT | Face.INTERIOR | Face.BACK,
    },
}

OUT_OF_BOUNDS = "out_of_bounds"
BLOCKED = "blocked"
FACE_NOT_ALLOWED = "face_not_allowed"


@dataclass(frozen=True)
class Anchor:
    unit: int
    face: Face
    token: Optional[Hashable] = None


@dataclass(frozen=True)
class AnchorCheck:
    unit: int
    face: Face
    legal: bool
    reason: Optional[str] = None
    token: Optional[Hashable] = None
    blocking_asset_id: Optional[Hashable] = None
    blocking_unit: Optional[int] = None
    blocking_face: Optional[Face] = None


def validate_footprint(rack: Rack, new_vsize: int, new_hsize: int) -> None:
    if rack.size < 1:
        raise InvalidPlacementRequest(f"Rack size must be >= 1, got {rack.size}")
    if new_vsize < 1:
        raise InvalidPlacementRequest(f"Asset height must be >= 1, got {new_vsize}")
    if new_hsize not in FACE_GROUPS:
        raise InvalidPlacementRequest(f"Asset depth must be 1, 2 or 3, got {new_hsize}")


def _evaluate(
    occupancy: OccupancyMap,
    rack: Rack,
    unit: int,
    face: Face,
    new_vsize: int,
    new_hsize: int,
) -> AnchorCheck:
    required = FACE_GROUPS[new_hsize].get(face)
    if required is None:
        return AnchorCheck(unit=unit, face=face, legal=False, reason=FACE_NOT_ALLOWED)

    span = rack.span(unit, new_vsize)
    if not all(rack.contains(u) for u in span):
        return AnchorCheck(unit=unit, face=face, legal=False, reason=OUT_OF_BOUNDS)

    for u in span:
        for test_face in FACES:
            if not required & test_face:
                continue
            cell = occupancy.cell(u, test_face)
            if cell is not None and cell.blocking:
                return AnchorCheck(
                    unit=unit, face=face, legal=False, reason=BLOCKED,
                    blocking_asset_id=cell.asset_id,
                    blocking_unit=u,
                    blocking_face=test_face,
                )

    return AnchorCheck(unit=unit, face=face, legal=True, token=rack.anchor_id(unit, face))


def check_anchor(
    occupancy: OccupancyMap,
    rack: Rack,
    unit: int,
    face: Face,
    new_vsize: int,
    new_hsize: int,
) -> AnchorCheck:
    """Evaluate a single chosen anchor and report why it is rejected."""
    validate_footprint(rack, new_vsize, new_hsize)
    if not rack.contains(unit):
        return AnchorCheck(unit=unit, face=face, legal=False, reason=OUT_OF_BOUNDS)
    return _evaluate(occupancy, rack, unit, face, new_vsize, new_hsize)


def legal_anchors(
    occupancy: OccupancyMap,
    rack: Rack,
    new_vsize: int,
    new_hsize: int,
) -> Set[Anchor]:
    """Return every anchor where a new_vsize x new_hsize asset can start."""
    validate_footprint(rack, new_vsize, new_hsize)

    anchors: Set[Anchor] = set()
    if new_vsize > rack.size:
        logger.debug("Footprint %dU exceeds rack size %d; no anchors", new_vsize, rack.size)
        return anchors

    for unit in range(1, rack.size + 1):
        for face in FACE_GROUPS[new_hsize]:
            result = _evaluate(occupancy, rack, unit, face, new_vsize, new_hsize)
            if result.legal:
                anchors.add(Anchor(unit=unit, face=face, token=result.token))

    logger.debug(
        "Placement %dU depth %d in rack of size %d: %d legal anchors",
        new_vsize, new_hsize, rack.size, len(anchors),
    )
    return anchors
