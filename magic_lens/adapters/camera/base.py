from abc import ABC, abstractmethod


class CameraAdapter(ABC):
    @abstractmethod
    def read_frame(self):
        """Grab the current frame as a BGR ndarray (HxWx3), or None while warming up."""
        ...

    def release(self):
        """Drop the capture handle. Reopened lazily by the next read_frame()."""
