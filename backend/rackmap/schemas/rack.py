from pydantic import BaseModel, BeforeValidator, Field, field_validator, model_validator
from typing import Annotated, Dict, List, Literal, Optional, Union

from rackmap.models.rack import normalize_id

# Opaque ids as sent by the inventory frontend; "100" and 100 are the same record
Identifier = Annotated[Union[int, str], BeforeValidator(normalize_id)]
FaceName = Literal["front", "interior", "back"]


class AssetIn(BaseModel):
    id: Identifier
    position: int = 0
    vsize: int = Field(1, ge=1)
    hsize: Literal[1, 2, 3] = 1
    faces: Optional[int] = None  # bitset: front=1, interior=2, back=4
    location_id: Optional[Identifier] = None
    label: Optional[str] = None

    @field_validator("faces")
    @classmethod
    def validate_faces(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and not 0 < v <= 0x07:
            raise ValueError(f"Invalid faces bitset: {v}")
        return v


def check_unique_asset_ids(assets: List[AssetIn]) -> None:
    seen = set()
    for asset in assets:
        if asset.id in seen:
            raise ValueError(f"Duplicate asset id: {asset.id}")
        seen.add(asset.id)


class RackDescriptor(BaseModel):
    name: Optional[str] = None
    size: int = Field(..., ge=1)
    direction: Literal["downwards", "upwards"] = "downwards"
    assets: List[AssetIn] = []
    front_positions: Dict[int, Identifier] = {}
    back_positions: Dict[int, Identifier] = {}

    @model_validator(mode="after")
    def unique_asset_ids(self):
        check_unique_asset_ids(self.assets)
        return self


class OccupancyRequest(BaseModel):
    rack: RackDescriptor
    highlight_location_id: Optional[Identifier] = None


class PlacementRequest(BaseModel):
    rack: RackDescriptor
    new_vsize: int = Field(..., ge=1)
    new_hsize: Literal[1, 2, 3]
    highlight_location_id: Optional[Identifier] = None


class AnchorCheckRequest(PlacementRequest):
    unit: int
    face: FaceName


class RackRequest(BaseModel):
    rack: RackDescriptor


class OccupancyCellResponse(BaseModel):
    asset_id: Identifier
    vsize: int
    hsize: int
    highlighted: bool
    overlaps: List[Identifier] = []


class OccupancyResponse(BaseModel):
    size: int
    direction: str
    units: Dict[int, Dict[FaceName, OccupancyCellResponse]]


class AnchorResponse(BaseModel):
    unit: int
    face: FaceName
    token: Optional[Identifier] = None


class PlacementResponse(BaseModel):
    new_vsize: int
    new_hsize: int
    count: int
    anchors: List[AnchorResponse]


class AnchorCheckResponse(BaseModel):
    unit: int
    face: FaceName
    legal: bool
    reason: Optional[str] = None
    token: Optional[Identifier] = None
    blocking_asset_id: Optional[Identifier] = None
    blocking_unit: Optional[int] = None
    blocking_face: Optional[FaceName] = None


class RackIssueResponse(BaseModel):
    kind: str
    asset_id: Identifier
    message: str
    other_asset_id: Optional[Identifier] = None
    unit: Optional[int] = None
    face: Optional[FaceName] = None


class AuditResponse(BaseModel):
    ok: bool
    issues: List[RackIssueResponse]


class FaceUsageResponse(BaseModel):
    used: int
    free: int


class RackSummaryResponse(BaseModel):
    size: int
    placed_assets: int
    unplaced_assets: int
    faces: Dict[FaceName, FaceUsageResponse]
    front_utilization_pct: float
