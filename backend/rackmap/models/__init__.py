from rackmap.models.rack import (
    ALL_FACES, FACES, MAGIC_RACK, Asset, Direction, Face, Rack,
    default_faces, faces_match_depth, normalize_id, same_id, span_units,
)

__all__ = [
    "ALL_FACES", "FACES", "MAGIC_RACK", "Asset", "Direction", "Face", "Rack",
    "default_faces", "faces_match_depth", "normalize_id", "same_id", "span_units",
]
