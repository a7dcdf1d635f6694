from abc import ABC, abstractmethod

from magic_lens.orchestrator.contracts import Detection


class DetectorModel(ABC):
    @abstractmethod
    def detect(self, frame) -> list[Detection]:
        """Classify one BGR frame. Returns every candidate with its score (0..1)."""
        ...
