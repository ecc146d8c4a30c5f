"""
In-memory rack model - the immutable snapshot every occupancy and placement
computation works on. Built from request schemas or resolved location records.
"""
import enum
from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterable, Mapping, Optional, Tuple, Union

MAGIC_RACK = 0x10


class Face(enum.IntFlag):
    FRONT = 0x01
    INTERIOR = 0x02
    BACK = 0x04

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> "Face":
        try:
            return cls[label.upper()]
        except KeyError:
            raise ValueError(f"Unknown face: {label}")


# Iteration order for faces inside a unit; display only, never semantic
FACES: Tuple[Face, ...] = (Face.FRONT, Face.INTERIOR, Face.BACK)
ALL_FACES = Face.FRONT | Face.INTERIOR | Face.BACK


class Direction(str, enum.Enum):
    DOWNWARDS = "downwards"   # unit 1 at the top
    UPWARDS = "upwards"       # unit 1 at the bottom

    @property
    def step(self) -> int:
        """Unit increment followed by a multi-unit span from its anchor."""
        return -1 if self is Direction.DOWNWARDS else 1


def default_faces(hsize: int) -> Face:
    """Faces implied by a depth class when the record carries none."""
    if hsize == 1:
        return Face.FRONT
    if hsize == 2:
        return Face.FRONT | Face.INTERIOR
    return ALL_FACES


def faces_match_depth(faces: Face, hsize: int) -> bool:
    if hsize == 1:
        return faces in (Face.FRONT, Face.BACK)
    if hsize == 2:
        return faces in (Face.FRONT | Face.INTERIOR, Face.BACK | Face.INTERIOR)
    if hsize == 3:
        return faces == ALL_FACES
    return False


def normalize_id(value):
    """Numeric strings and ints name the same record: "100" == 100."""
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value)
    return value


def same_id(a, b) -> bool:
    return normalize_id(a) == normalize_id(b)


PositionMap = Union[Mapping[int, Hashable], Iterable[Tuple[int, Hashable]]]


def _position_pairs(positions: PositionMap) -> Tuple[Tuple[int, Hashable], ...]:
    items = positions.items() if isinstance(positions, Mapping) else positions
    return tuple(sorted((int(unit), token) for unit, token in items))


def span_units(anchor: int, vsize: int, direction: Direction) -> range:
    """Units covered by a vsize-high footprint anchored at `anchor`."""
    step = direction.step
    return range(anchor, anchor + step * vsize, step)


@dataclass(frozen=True)
class Asset:
    id: Hashable
    position: int
    vsize: int = 1
    hsize: int = 1
    faces: Optional[Face] = None
    location_id: Optional[Hashable] = None
    label: Optional[str] = None

    @property
    def is_placed(self) -> bool:
        return self.position > 0

    @property
    def occupied_faces(self) -> Face:
        """Stored faces are authoritative; fall back to the depth class."""
        if self.faces is not None:
            return Face(self.faces)
        return default_faces(self.hsize)


@dataclass(frozen=True)
class Rack:
    size: int
    direction: Direction = Direction.DOWNWARDS
    assets: Tuple[Asset, ...] = ()
    front_positions: Tuple[Tuple[int, Hashable], ...] = ()
    back_positions: Tuple[Tuple[int, Hashable], ...] = ()
    name: Optional[str] = None
    _front: Dict[int, Hashable] = field(init=False, repr=False, compare=False, hash=False)
    _back: Dict[int, Hashable] = field(init=False, repr=False, compare=False, hash=False)

    def __post_init__(self):
        # Accept mappings or pairs; store sorted pairs so the snapshot stays hashable
        object.__setattr__(self, "assets", tuple(self.assets))
        object.__setattr__(self, "front_positions", _position_pairs(self.front_positions))
        object.__setattr__(self, "back_positions", _position_pairs(self.back_positions))
        object.__setattr__(self, "_front", dict(self.front_positions))
        object.__setattr__(self, "_back", dict(self.back_positions))

    def front_anchor_id(self, unit: int) -> Optional[Hashable]:
        return self._front.get(unit)

    def back_anchor_id(self, unit: int) -> Optional[Hashable]:
        return self._back.get(unit)

    def anchor_id(self, unit: int, face: Face) -> Optional[Hashable]:
        if face == Face.FRONT:
            return self.front_anchor_id(unit)
        if face == Face.BACK:
            return self.back_anchor_id(unit)
        return None

    def contains(self, unit: int) -> bool:
        return 1 <= unit <= self.size

    def span(self, anchor: int, vsize: int) -> range:
        return span_units(anchor, vsize, self.direction)
