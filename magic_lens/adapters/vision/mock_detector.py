from magic_lens.adapters.vision.base import DetectorModel
from magic_lens.orchestrator.contracts import Detection


class MockDetector(DetectorModel):
    """Returns the same scripted detections for every frame."""

    def __init__(self, status_store, detections: list[tuple[str, float]] | None = None):
        self.status = status_store
        self.detections = [Detection(class_name=c, score=s) for c, s in (detections or [])]
        self.calls = 0

    def detect(self, frame) -> list[Detection]:
        self.calls += 1
        return list(self.detections)
