"""Center-sample averaging.

`average_color` is frame-agnostic: it only needs the frame size and a
pixel reader `(x, y, w, h) -> pixels`. The reader may return an array of
shape (h, w, C) / (n, C) with C >= 3 channels in R, G, B order, or a flat
RGBA-interleaved buffer (canvas getImageData layout). Alpha is ignored.
"""
import math
from typing import Callable, Optional

import numpy as np

from magic_lens.orchestrator.contracts import RGB

PixelReader = Callable[[int, int, int, int], object]


def center_region(frame_width: int, frame_height: int, sample_size: int) -> tuple[int, int, int]:
    side = max(0, min(sample_size, frame_width, frame_height))
    x = max(0, math.floor(frame_width / 2 - side / 2))
    y = max(0, math.floor(frame_height / 2 - side / 2))
    return x, y, side


def average_color(frame_width: int, frame_height: int, pixel_reader: PixelReader,
                  sample_size: int) -> Optional[RGB]:
    # zero-size frames are normal while the camera warms up
    if not frame_width or not frame_height:
        return None

    x, y, side = center_region(frame_width, frame_height, sample_size)
    if side == 0:
        return None

    pixels = np.asarray(pixel_reader(x, y, side, side), dtype=np.float64)
    if pixels.size == 0:
        return None
    if pixels.ndim == 1:
        pixels = pixels[: pixels.size - pixels.size % 4].reshape(-1, 4)
    else:
        pixels = pixels.reshape(-1, pixels.shape[-1])
    if pixels.shape[0] == 0 or pixels.shape[1] < 3:
        return None

    r, g, b = pixels[:, :3].mean(axis=0)
    return RGB(r=float(r), g=float(g), b=float(b))


def frame_pixel_reader(frame_bgr: np.ndarray) -> PixelReader:
    """Pixel reader over an OpenCV BGR frame, yielding RGB."""
    def read(x: int, y: int, w: int, h: int):
        return frame_bgr[y:y + h, x:x + w, 2::-1]
    return read


def average_color_from_frame(frame_bgr: Optional[np.ndarray], sample_size: int) -> Optional[RGB]:
    if frame_bgr is None or frame_bgr.ndim != 3:
        return None
    height, width = frame_bgr.shape[:2]
    return average_color(width, height, frame_pixel_reader(frame_bgr), sample_size)
