from pydantic import BaseModel, model_validator
from typing import Dict, List, Optional

from rackmap.schemas.rack import AssetIn, Identifier, RackDescriptor, check_unique_asset_ids


class LocationType(BaseModel):
    id: Identifier
    name: str
    magic: int = 0


class OptionSpec(BaseModel):
    """One entry of the location type's option schema."""
    id: Identifier
    name: str
    defvalue: Optional[str] = None


class OptionValue(BaseModel):
    option_spec_id: Identifier
    value: Optional[str] = None


class LocationRecord(BaseModel):
    id: Identifier
    name: str
    location_type: LocationType
    options: List[OptionValue] = []
    possible_options: List[OptionSpec] = []
    assets: List[AssetIn] = []
    front_positions: Dict[int, Identifier] = {}
    back_positions: Dict[int, Identifier] = {}
    racks: List["LocationRecord"] = []

    @model_validator(mode="after")
    def unique_asset_ids(self):
        check_unique_asset_ids(self.assets)
        return self


class ResolvedRackResponse(BaseModel):
    location_id: Identifier
    rack: RackDescriptor
    rack_count: int = 0
