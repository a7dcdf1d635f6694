"""
Live webcam frames for the detection loop (BGR numpy arrays).
The device opens on the first read and closes on release(); CAMERA_INDEX picks it.
"""
import cv2

from magic_lens import config
from magic_lens.adapters.camera.base import CameraAdapter


class CV2Camera(CameraAdapter):
    def __init__(self, status_store, index: int | None = None,
                 width: int = 1280, height: int = 720):
        self.status = status_store
        self._index = index if index is not None else config.CAMERA_INDEX
        self._width = width
        self._height = height
        self._cap = None

    def _open(self):
        if self._cap is None or not self._cap.isOpened():
            self._cap = cv2.VideoCapture(self._index)
            if not self._cap.isOpened():
                self.status.log(f"cv2_camera: failed to open device {self._index}")
                return
            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, self._width)
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self._height)
            self.status.log(f"cv2_camera: opened device {self._index}")

    def read_frame(self):
        self._open()
        if self._cap is None or not self._cap.isOpened():
            return None
        ret, frame = self._cap.read()
        if not ret or frame is None:
            return None
        return frame

    def release(self):
        if self._cap is not None and self._cap.isOpened():
            self._cap.release()
            self.status.log("cv2_camera: released")
        self._cap = None
