"""
Rack API - occupancy maps and legal placement anchors for a rack snapshot.
Every request carries its own rack descriptor; nothing is stored.
"""
import logging
from fastapi import APIRouter, HTTPException, Request, status

from rackmap.config import settings
from rackmap.extensions import limiter
from rackmap.models.rack import Direction, Face, Rack
from rackmap.schemas.location import LocationRecord, ResolvedRackResponse
from rackmap.schemas.rack import (
    AnchorCheckRequest, AnchorCheckResponse, AnchorResponse, AuditResponse,
    FaceUsageResponse, OccupancyCellResponse, OccupancyRequest, OccupancyResponse,
    PlacementRequest, PlacementResponse, RackDescriptor, RackIssueResponse,
    RackRequest, RackSummaryResponse,
)
from rackmap.services.audit import UNPLACED, audit_rack
from rackmap.services.capacity import summarize_occupancy
from rackmap.services.occupancy import OccupancyMap, build_occupancy
from rackmap.services.placement import check_anchor, legal_anchors
from rackmap.services.racks import count_racks, descriptor_from_rack, rack_from_descriptor, resolve_rack

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/racks", tags=["Racks"])


def _load_rack(descriptor: RackDescriptor) -> Rack:
    if descriptor.size > settings.MAX_RACK_SIZE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Rack size {descriptor.size} exceeds maximum of {settings.MAX_RACK_SIZE}",
        )
    return rack_from_descriptor(descriptor)


def _occupancy_response(occupancy: OccupancyMap, rack: Rack) -> OccupancyResponse:
    units = {}
    for unit, face, cell in occupancy.cells():
        units.setdefault(unit, {})[face.label] = OccupancyCellResponse(
            asset_id=cell.asset_id,
            vsize=cell.vsize,
            hsize=cell.hsize,
            highlighted=cell.highlighted,
            overlaps=list(cell.overlaps),
        )
    return OccupancyResponse(size=rack.size, direction=rack.direction.value, units=units)


@router.post("/occupancy", response_model=OccupancyResponse)
async def get_occupancy(payload: OccupancyRequest):
    """Occupied (unit, face) cells of a rack."""
    rack = _load_rack(payload.rack)
    occupancy = build_occupancy(rack, payload.highlight_location_id)
    return _occupancy_response(occupancy, rack)


@router.post("/placements", response_model=PlacementResponse)
@limiter.limit(settings.RATE_LIMIT_PLACEMENT)
async def get_placements(request: Request, payload: PlacementRequest):
    """Every anchor where an asset of the requested footprint can be mounted."""
    rack = _load_rack(payload.rack)
    occupancy = build_occupancy(rack, payload.highlight_location_id)
    anchors = legal_anchors(occupancy, rack, payload.new_vsize, payload.new_hsize)
    ordered = sorted(anchors, key=lambda a: (a.unit, int(a.face)))
    return PlacementResponse(
        new_vsize=payload.new_vsize,
        new_hsize=payload.new_hsize,
        count=len(ordered),
        anchors=[AnchorResponse(unit=a.unit, face=a.face.label, token=a.token) for a in ordered],
    )


@router.post("/placements/check", response_model=AnchorCheckResponse)
@limiter.limit(settings.RATE_LIMIT_PLACEMENT)
async def check_placement(request: Request, payload: AnchorCheckRequest):
    """Validate a single chosen anchor before it is submitted."""
    rack = _load_rack(payload.rack)
    occupancy = build_occupancy(rack, payload.highlight_location_id)
    result = check_anchor(
        occupancy, rack, payload.unit, Face.from_label(payload.face),
        payload.new_vsize, payload.new_hsize,
    )
    if not result.legal:
        logger.info(
            "Rejected anchor unit %d %s for %dU depth %d: %s",
            result.unit, payload.face, payload.new_vsize, payload.new_hsize, result.reason,
        )
    return AnchorCheckResponse(
        unit=result.unit,
        face=result.face.label,
        legal=result.legal,
        reason=result.reason,
        token=result.token,
        blocking_asset_id=result.blocking_asset_id,
        blocking_unit=result.blocking_unit,
        blocking_face=result.blocking_face.label if result.blocking_face else None,
    )


@router.post("/audit", response_model=AuditResponse)
async def audit(payload: RackRequest):
    """Data-quality findings for a rack: out-of-range, overlaps, face mismatches."""
    rack = _load_rack(payload.rack)
    issues = audit_rack(rack)
    return AuditResponse(
        ok=not any(i.kind != UNPLACED for i in issues),
        issues=[
            RackIssueResponse(
                kind=i.kind,
                asset_id=i.asset_id,
                message=i.message,
                other_asset_id=i.other_asset_id,
                unit=i.unit,
                face=i.face.label if i.face else None,
            )
            for i in issues
        ],
    )


@router.post("/summary", response_model=RackSummaryResponse)
async def summary(payload: RackRequest):
    rack = _load_rack(payload.rack)
    result = summarize_occupancy(build_occupancy(rack), rack)
    return RackSummaryResponse(
        size=result.size,
        placed_assets=result.placed_assets,
        unplaced_assets=result.unplaced_assets,
        faces={
            face.label: FaceUsageResponse(used=usage.used, free=usage.free)
            for face, usage in result.faces.items()
        },
        front_utilization_pct=result.front_utilization_pct,
    )


@router.post("/resolve", response_model=ResolvedRackResponse)
async def resolve(payload: LocationRecord):
    """Rack descriptor for a location record, from its type's option schema."""
    rack = resolve_rack(
        payload,
        default_size=settings.RACK_DEFAULT_SIZE,
        default_direction=Direction(settings.RACK_DEFAULT_DIRECTION),
    )
    if rack.size > settings.MAX_RACK_SIZE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Rack size {rack.size} exceeds maximum of {settings.MAX_RACK_SIZE}",
        )
    return ResolvedRackResponse(
        location_id=payload.id,
        rack=descriptor_from_rack(rack),
        rack_count=count_racks(payload),
    )
