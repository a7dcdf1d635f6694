import pytest

from magic_lens.adapters.camera.mock_camera import MockCamera
from magic_lens.services.status_store import StatusStore
from tests.fakes import ManualFrameScheduler


@pytest.fixture
def status():
    return StatusStore()


@pytest.fixture
def scheduler():
    return ManualFrameScheduler()


@pytest.fixture
def red_camera(status):
    return MockCamera(status, rgb=(200, 30, 30))
