from rackmap.schemas.rack import (
    AssetIn, RackDescriptor, OccupancyRequest, PlacementRequest, AnchorCheckRequest, RackRequest,
    OccupancyResponse, PlacementResponse, AnchorCheckResponse, AuditResponse, RackSummaryResponse,
)
from rackmap.schemas.location import LocationRecord, ResolvedRackResponse

__all__ = [
    "AssetIn", "RackDescriptor", "OccupancyRequest", "PlacementRequest", "AnchorCheckRequest", "RackRequest",
    "OccupancyResponse", "PlacementResponse", "AnchorCheckResponse", "AuditResponse", "RackSummaryResponse",
    "LocationRecord", "ResolvedRackResponse",
]
