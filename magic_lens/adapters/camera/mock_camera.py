"""Mock camera: serves solid-color frames, or a scripted frame sequence."""
import numpy as np

from magic_lens.adapters.camera.base import CameraAdapter


def solid_frame(rgb: tuple[int, int, int], width: int = 640, height: int = 480) -> np.ndarray:
    frame = np.empty((height, width, 3), dtype=np.uint8)
    frame[:, :] = (rgb[2], rgb[1], rgb[0])
    return frame


class MockCamera(CameraAdapter):
    def __init__(self, status_store, rgb: tuple[int, int, int] = (128, 128, 128),
                 frames: list | None = None, width: int = 640, height: int = 480):
        self.status = status_store
        self._frame = solid_frame(rgb, width, height)
        # scripted frames are served first (None = camera still warming up)
        self._script = list(frames or [])
        self.released = 0
        self.reads = 0

    def set_color(self, rgb: tuple[int, int, int]):
        h, w = self._frame.shape[:2]
        self._frame = solid_frame(rgb, w, h)

    def read_frame(self):
        self.reads += 1
        if self._script:
            return self._script.pop(0)
        return self._frame

    def release(self):
        self.released += 1
