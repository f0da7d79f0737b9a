import pytest

from api.explorer_api import ExplorerAPI
from fractals.base import FractalSettings, Viewport
from rendering.service import RenderService


@pytest.fixture
def viewport():
    return Viewport(width=300, height=200)


@pytest.fixture
def service():
    svc = RenderService(max_workers=4)
    yield svc
    svc.shutdown()


@pytest.fixture
def explorer():
    """Explorer without automatic renders; navigation only."""
    api = ExplorerAPI(width=300, height=200, auto_render=False,
                      settings=FractalSettings(workers=2))
    yield api
    api.shutdown()
