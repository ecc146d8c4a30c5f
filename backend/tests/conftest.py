import pytest
from fastapi.testclient import TestClient

from rackmap.extensions import limiter
from rackmap.main import app
from rackmap.models.rack import Asset, Direction, Face, Rack


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def make_rack(size=10, direction=Direction.DOWNWARDS, assets=(), with_tokens=True):
    front = {n: f"F{n}" for n in range(1, size + 1)} if with_tokens else {}
    back = {n: f"B{n}" for n in range(1, size + 1)} if with_tokens else {}
    return Rack(
        size=size,
        direction=direction,
        assets=tuple(assets),
        front_positions=front,
        back_positions=back,
    )


@pytest.fixture
def rack_with_front_asset():
    """10U downward rack with a 2U shallow front asset at unit 5."""
    asset = Asset(id=1, position=5, vsize=2, hsize=1, faces=Face.FRONT, location_id=100)
    return make_rack(assets=[asset])


def rack_payload(size=10, direction="downwards", assets=None, **extra):
    payload = {"size": size, "direction": direction, "assets": assets or []}
    payload.update(extra)
    return payload
