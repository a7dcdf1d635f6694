import numpy as np
import pytest

from magic_lens.adapters.camera.mock_camera import solid_frame
from magic_lens.adapters.vision.sampler import (
    average_color, average_color_from_frame, center_region,
)
from magic_lens.orchestrator.contracts import RGB


def test_uniform_frame_returns_exact_color():
    frame = solid_frame((200, 30, 30), 640, 480)
    assert average_color_from_frame(frame, 50) == RGB(200.0, 30.0, 30.0)


def test_bgr_frame_is_read_as_rgb():
    frame = np.zeros((100, 100, 3), dtype=np.uint8)
    frame[:, :] = (255, 0, 0)   # pure blue in BGR
    avg = average_color_from_frame(frame, 10)
    assert (avg.r, avg.g, avg.b) == (0, 0, 255)


def test_only_the_center_square_is_sampled():
    frame = np.zeros((480, 640, 3), dtype=np.uint8)
    frame[215:265, 295:345] = 255
    assert average_color_from_frame(frame, 50) == RGB(255.0, 255.0, 255.0)


@pytest.mark.parametrize("w, h", [(0, 480), (640, 0), (0, 0)])
def test_zero_size_frame_returns_none(w, h):
    calls = []
    assert average_color(w, h, lambda *a: calls.append(a), 50) is None
    assert calls == []


def test_empty_pixel_buffer_returns_none():
    assert average_color(640, 480, lambda x, y, w, h: [], 50) is None


def test_missing_frame_returns_none():
    assert average_color_from_frame(None, 50) is None


def test_reader_receives_exactly_the_center_region():
    seen = []

    def reader(x, y, w, h):
        seen.append((x, y, w, h))
        return np.full((h, w, 3), 10)

    average_color(640, 480, reader, 50)
    assert seen == [(295, 215, 50, 50)]


def test_sample_clamped_to_small_frame():
    assert center_region(10, 6, 50) == (2, 0, 6)
    frame = solid_frame((1, 2, 3), 10, 6)
    assert average_color_from_frame(frame, 50) == RGB(1.0, 2.0, 3.0)


def test_odd_dimensions_floor_the_origin():
    assert center_region(641, 481, 50) == (295, 215, 50)


def test_flat_rgba_buffer_ignores_alpha():
    # canvas-style interleaved RGBA, 2x2 region
    buf = [10, 20, 30, 255] * 2 + [30, 40, 50, 0] * 2
    avg = average_color(2, 2, lambda x, y, w, h: buf, 2)
    assert avg == RGB(20.0, 30.0, 40.0)
