"""
Rack data-quality audit.

Nothing here raises on bad input: out-of-range positions, face/depth
mismatches and overlapping assets are reported so operators can fix the
records, while the occupancy and placement computations keep working.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Hashable, List, Optional, Tuple

from rackmap.models.rack import FACES, Face, Rack, faces_match_depth

logger = logging.getLogger(__name__)

OUT_OF_RANGE = "out_of_range"
FACE_MISMATCH = "face_mismatch"
OVERLAP = "overlap"
UNPLACED = "unplaced"


@dataclass(frozen=True)
class RackIssue:
    kind: str
    asset_id: Hashable
    message: str
    other_asset_id: Optional[Hashable] = None
    unit: Optional[int] = None
    face: Optional[Face] = None


def check_faces(rack: Rack) -> List[RackIssue]:
    issues = []
    for asset in rack.assets:
        if asset.faces is None or faces_match_depth(Face(asset.faces), asset.hsize):
            continue
        logger.warning(
            "Asset %s: stored faces %#x do not match depth class %d; using stored faces",
            asset.id, int(asset.faces), asset.hsize,
        )
        issues.append(RackIssue(
            kind=FACE_MISMATCH,
            asset_id=asset.id,
            message=f"faces {int(asset.faces):#x} inconsistent with hsize {asset.hsize}",
        ))
    return issues


def audit_rack(rack: Rack) -> List[RackIssue]:
    issues: List[RackIssue] = []
    claims: Dict[Tuple[int, Face], Hashable] = {}

    for asset in rack.assets:
        if not asset.is_placed:
            issues.append(RackIssue(
                kind=UNPLACED, asset_id=asset.id,
                message=f"asset {asset.id} has no position",
            ))
            continue

        span = rack.span(asset.position, asset.vsize)
        outside = [u for u in span if not rack.contains(u)]
        if outside:
            issues.append(RackIssue(
                kind=OUT_OF_RANGE, asset_id=asset.id,
                unit=asset.position,
                message=(
                    f"asset {asset.id} at unit {asset.position} ({asset.vsize}U) "
                    f"reaches unit {outside[-1]} outside 1..{rack.size}"
                ),
            ))

        faces = asset.occupied_faces
        reported = set()
        for unit in span:
            if not rack.contains(unit):
                continue
            for face in FACES:
                if not faces & face:
                    continue
                owner = claims.setdefault((unit, face), asset.id)
                if owner == asset.id or owner in reported:
                    continue
                # One issue per pair of assets, at the first shared cell
                reported.add(owner)
                issues.append(RackIssue(
                    kind=OVERLAP, asset_id=asset.id, other_asset_id=owner,
                    unit=unit, face=face,
                    message=f"asset {asset.id} overlaps asset {owner} at unit {unit} {face.label}",
                ))

    issues.extend(check_faces(rack))

    for issue in issues:
        if issue.kind in (OUT_OF_RANGE, OVERLAP):
            logger.warning("Rack %s: %s", rack.name or "?", issue.message)
    return issues
