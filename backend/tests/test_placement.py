import logging
import random

import pytest

from rackmap.exceptions import InvalidPlacementRequest
from rackmap.models.rack import Asset, Direction, Face, Rack
from rackmap.services.occupancy import OccupancyMap, build_occupancy
from rackmap.services.placement import (
    BLOCKED, FACE_GROUPS, FACE_NOT_ALLOWED, OUT_OF_BOUNDS, Anchor, check_anchor, legal_anchors,
)

from conftest import make_rack


def anchor_set(anchors):
    return {(a.unit, a.face) for a in anchors}


def test_empty_downward_rack_two_unit_shallow():
    rack = make_rack()
    anchors = legal_anchors(build_occupancy(rack), rack, new_vsize=2, new_hsize=1)

    expected = {(n, f) for n in range(2, 11) for f in (Face.FRONT, Face.BACK)}
    assert anchor_set(anchors) == expected
    # Unit 1 would reach unit 0 under downward numbering
    assert (1, Face.FRONT) not in anchor_set(anchors)
    assert Anchor(unit=10, face=Face.FRONT, token="F10") in anchors
    assert Anchor(unit=10, face=Face.BACK, token="B10") in anchors


def test_empty_upward_rack_excludes_top_units():
    rack = make_rack(direction=Direction.UPWARDS)
    anchors = anchor_set(legal_anchors(build_occupancy(rack), rack, new_vsize=3, new_hsize=1))

    assert {n for n, _ in anchors} == set(range(1, 9))


def test_mounted_asset_blocks_its_face_only(rack_with_front_asset):
    rack = rack_with_front_asset
    anchors = anchor_set(legal_anchors(build_occupancy(rack), rack, new_vsize=1, new_hsize=1))

    assert (5, Face.FRONT) not in anchors
    assert (4, Face.FRONT) not in anchors
    assert (6, Face.FRONT) in anchors
    assert (3, Face.FRONT) in anchors
    assert (5, Face.BACK) in anchors
    assert (4, Face.BACK) in anchors


def test_span_crossing_an_asset_is_rejected(rack_with_front_asset):
    rack = rack_with_front_asset
    anchors = anchor_set(legal_anchors(build_occupancy(rack), rack, new_vsize=2, new_hsize=1))

    # 2U at unit 7 covers 7, 6; at unit 6 it would cover 6, 5
    assert (7, Face.FRONT) in anchors
    assert (6, Face.FRONT) not in anchors
    assert (3, Face.FRONT) in anchors


def test_relocating_asset_may_reuse_its_own_cells(rack_with_front_asset):
    rack = rack_with_front_asset
    occupancy = build_occupancy(rack, highlight_location_id=100)

    same_size = anchor_set(legal_anchors(occupancy, rack, new_vsize=2, new_hsize=1))
    assert (5, Face.FRONT) in same_size

    single = anchor_set(legal_anchors(occupancy, rack, new_vsize=1, new_hsize=1))
    assert (5, Face.FRONT) in single
    assert (4, Face.FRONT) in single


def test_medium_depth_needs_interior():
    asset = Asset(id=1, position=3, vsize=1, hsize=1, faces=Face.BACK)
    rack = make_rack(assets=[asset])
    anchors = anchor_set(legal_anchors(build_occupancy(rack), rack, new_vsize=1, new_hsize=2))

    assert (3, Face.FRONT) in anchors
    assert (3, Face.BACK) not in anchors


def test_medium_depth_blocked_by_interior_user():
    asset = Asset(id=1, position=3, vsize=1, hsize=2, faces=Face.FRONT | Face.INTERIOR)
    rack = make_rack(assets=[asset])
    anchors = anchor_set(legal_anchors(build_occupancy(rack), rack, new_vsize=1, new_hsize=2))

    assert (3, Face.FRONT) not in anchors
    assert (3, Face.BACK) not in anchors
    assert (2, Face.BACK) in anchors


def test_full_depth_never_anchors_at_back():
    asset = Asset(id=1, position=3, vsize=1, hsize=1, faces=Face.BACK)
    rack = make_rack(assets=[asset])
    anchors = legal_anchors(build_occupancy(rack), rack, new_vsize=1, new_hsize=3)

    assert all(a.face == Face.FRONT for a in anchors)
    assert (3, Face.FRONT) not in anchor_set(anchors)
    assert len(anchors) == 9


def test_interior_is_never_an_anchor_face():
    rack = make_rack(size=4)
    occupancy = build_occupancy(rack)
    for hsize in FACE_GROUPS:
        anchors = legal_anchors(occupancy, rack, new_vsize=1, new_hsize=hsize)
        assert all(a.face != Face.INTERIOR for a in anchors)


def test_footprint_taller_than_rack_has_no_anchors():
    rack = make_rack(size=4)
    assert legal_anchors(build_occupancy(rack), rack, new_vsize=5, new_hsize=1) == set()


def test_full_rack_returns_empty_set():
    asset = Asset(id=1, position=4, vsize=4, hsize=3)
    rack = make_rack(size=4, assets=[asset])
    assert legal_anchors(build_occupancy(rack), rack, new_vsize=1, new_hsize=1) == set()


def test_missing_tokens_are_reported_as_none():
    rack = make_rack(size=2, with_tokens=False)
    anchors = legal_anchors(build_occupancy(rack), rack, new_vsize=1, new_hsize=1)
    assert len(anchors) == 4
    assert all(a.token is None for a in anchors)


@pytest.mark.parametrize("vsize, hsize", [(0, 1), (-1, 2), (1, 0), (1, 4)])
def test_malformed_footprint_is_rejected(vsize, hsize):
    rack = make_rack()
    with pytest.raises(InvalidPlacementRequest):
        legal_anchors(build_occupancy(rack), rack, new_vsize=vsize, new_hsize=hsize)


def test_zero_size_rack_is_rejected():
    with pytest.raises(InvalidPlacementRequest):
        legal_anchors(OccupancyMap(size=0), Rack(size=0), new_vsize=1, new_hsize=1)


def test_check_anchor_reports_blocking_cell(rack_with_front_asset):
    rack = rack_with_front_asset
    result = check_anchor(build_occupancy(rack), rack, 6, Face.FRONT, new_vsize=2, new_hsize=1)

    assert not result.legal
    assert result.reason == BLOCKED
    assert result.blocking_asset_id == 1
    assert result.blocking_unit == 5
    assert result.blocking_face == Face.FRONT


def test_check_anchor_reasons():
    rack = make_rack()
    occupancy = build_occupancy(rack)

    assert check_anchor(occupancy, rack, 1, Face.FRONT, 2, 1).reason == OUT_OF_BOUNDS
    assert check_anchor(occupancy, rack, 11, Face.FRONT, 1, 1).reason == OUT_OF_BOUNDS
    assert check_anchor(occupancy, rack, 5, Face.INTERIOR, 1, 2).reason == FACE_NOT_ALLOWED
    assert check_anchor(occupancy, rack, 5, Face.BACK, 1, 3).reason == FACE_NOT_ALLOWED

    ok = check_anchor(occupancy, rack, 5, Face.BACK, 1, 2)
    assert ok.legal
    assert ok.reason is None
    assert ok.token == "B5"


def test_existing_overlap_stays_blocking():
    assets = [
        Asset(id="moving", position=5, vsize=1, hsize=1, faces=Face.FRONT, location_id=1),
        Asset(id="fixed", position=5, vsize=1, hsize=1, faces=Face.FRONT, location_id=2),
    ]
    rack = make_rack(assets=assets)
    anchors = anchor_set(legal_anchors(build_occupancy(rack, 1), rack, 1, 1))
    assert (5, Face.FRONT) not in anchors


def _random_rack(rng):
    size = rng.randint(1, 24)
    direction = rng.choice(list(Direction))
    assets = []
    for i in range(rng.randint(0, 8)):
        hsize = rng.randint(1, 3)
        faces = {
            1: rng.choice([Face.FRONT, Face.BACK]),
            2: rng.choice([Face.FRONT | Face.INTERIOR, Face.BACK | Face.INTERIOR]),
            3: Face.FRONT | Face.INTERIOR | Face.BACK,
        }[hsize]
        assets.append(Asset(
            id=i,
            position=rng.randint(-1, size + 1),
            vsize=rng.randint(1, 4),
            hsize=hsize,
            faces=faces,
            location_id=rng.randint(1, 3),
        ))
    return make_rack(size=size, direction=direction, assets=assets)


@pytest.mark.parametrize("seed", range(25))
def test_anchors_never_cover_blocking_cells(seed):
    rng = random.Random(seed)
    rack = _random_rack(rng)
    occupancy = build_occupancy(rack, highlight_location_id=rng.randint(0, 3))
    vsize = rng.randint(1, 5)
    hsize = rng.randint(1, 3)

    anchors = legal_anchors(occupancy, rack, vsize, hsize)

    for anchor in anchors:
        required = FACE_GROUPS[hsize][anchor.face]
        for unit in rack.span(anchor.unit, vsize):
            assert rack.contains(unit)
            for face in (Face.FRONT, Face.INTERIOR, Face.BACK):
                if required & face:
                    cell = occupancy.cell(unit, face)
                    assert cell is None or cell.highlighted
    assert legal_anchors(occupancy, rack, vsize, hsize) == anchors


def test_face_mismatch_is_logged_while_placing(caplog):
    caplog.set_level(logging.WARNING, logger="rackmap.services.occupancy")
    asset = Asset(id="odd", position=4, vsize=1, hsize=1, faces=Face.FRONT | Face.BACK)
    rack = make_rack(assets=[asset])

    anchors = anchor_set(legal_anchors(build_occupancy(rack), rack, 1, 1))

    # Stored faces still win: both faces at unit 4 are taken
    assert (4, Face.FRONT) not in anchors
    assert (4, Face.BACK) not in anchors
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "odd" in warnings[0].getMessage()


def test_consistent_faces_log_no_warning(caplog, rack_with_front_asset):
    caplog.set_level(logging.WARNING, logger="rackmap.services.occupancy")
    build_occupancy(rack_with_front_asset)
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]
