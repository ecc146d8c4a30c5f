"""
Rack ingestion - turns request descriptors and location records into the
immutable Rack snapshot used by the occupancy and placement services.

A location is a rack when its type carries the MAGIC_RACK bit. Its size and
direction come from the type's option schema (possible_options) defaults,
overridden by the location's own option values.
"""
import logging
from typing import List, Optional, Tuple

from rackmap.exceptions import InvalidPlacementRequest, NotARackError
from rackmap.models.rack import MAGIC_RACK, Asset, Direction, Face, Rack
from rackmap.schemas.location import LocationRecord
from rackmap.schemas.rack import AssetIn, RackDescriptor
from rackmap.services.audit import check_faces

logger = logging.getLogger(__name__)


def asset_from_schema(payload: AssetIn) -> Asset:
    return Asset(
        id=payload.id,
        position=payload.position,
        vsize=payload.vsize,
        hsize=payload.hsize,
        faces=Face(payload.faces) if payload.faces is not None else None,
        location_id=payload.location_id,
        label=payload.label,
    )


def _assets(payloads: List[AssetIn]) -> Tuple[Asset, ...]:
    return tuple(asset_from_schema(a) for a in payloads)


def rack_from_descriptor(descriptor: RackDescriptor) -> Rack:
    return Rack(
        size=descriptor.size,
        direction=Direction(descriptor.direction),
        assets=_assets(descriptor.assets),
        front_positions=descriptor.front_positions,
        back_positions=descriptor.back_positions,
        name=descriptor.name,
    )


def descriptor_from_rack(rack: Rack) -> RackDescriptor:
    return RackDescriptor(
        name=rack.name,
        size=rack.size,
        direction=rack.direction.value,
        assets=[
            AssetIn(
                id=a.id,
                position=a.position,
                vsize=a.vsize,
                hsize=a.hsize,
                faces=int(a.faces) if a.faces is not None else None,
                location_id=a.location_id,
                label=a.label,
            )
            for a in rack.assets
        ],
        front_positions=dict(rack.front_positions),
        back_positions=dict(rack.back_positions),
    )


def is_rack(location: LocationRecord) -> bool:
    return bool(location.location_type.magic & MAGIC_RACK)


def count_racks(location: LocationRecord) -> int:
    """Number of rack locations directly under a location."""
    return sum(1 for child in location.racks if is_rack(child))


def _rack_options(location: LocationRecord) -> Tuple[Optional[str], Optional[str]]:
    size_spec_id = direction_spec_id = None
    size = direction = None
    for spec in location.possible_options:
        if spec.name == "size":
            size_spec_id = spec.id
            size = spec.defvalue
        if spec.name == "direction":
            direction_spec_id = spec.id
            direction = spec.defvalue

    for option in location.options:
        if size_spec_id is not None and option.option_spec_id == size_spec_id:
            size = option.value
        if direction_spec_id is not None and option.option_spec_id == direction_spec_id:
            direction = option.value
    return size, direction


def resolve_rack(
    location: LocationRecord,
    default_size: int,
    default_direction: Direction = Direction.DOWNWARDS,
) -> Rack:
    """Build the Rack for a location record; raises NotARackError otherwise."""
    if not is_rack(location):
        raise NotARackError(
            f"Location {location.id} ({location.location_type.name}) is not a rack"
        )

    raw_size, raw_direction = _rack_options(location)

    size = default_size
    if raw_size not in (None, ""):
        try:
            size = int(raw_size)
        except ValueError:
            logger.warning(
                "Location %s: invalid rack size %r, using default %d",
                location.id, raw_size, default_size,
            )
    if size < 1:
        raise InvalidPlacementRequest(f"Location {location.id}: rack size must be >= 1, got {size}")

    if raw_direction in (None, ""):
        direction = default_direction
    elif raw_direction == Direction.DOWNWARDS.value:
        direction = Direction.DOWNWARDS
    else:
        direction = Direction.UPWARDS

    rack = Rack(
        size=size,
        direction=direction,
        assets=_assets(location.assets),
        front_positions=location.front_positions,
        back_positions=location.back_positions,
        name=location.name,
    )
    check_faces(rack)
    return rack
