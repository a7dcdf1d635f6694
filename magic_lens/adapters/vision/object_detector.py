"""
Lazy, memoized wrapper around the object classification capability.

The underlying model is expensive to load and safe to reuse across
challenges, so it is loaded at most once per process. Callers that arrive
while a load is in flight join that load instead of starting another.
"""
import asyncio
from typing import Callable, Optional

from magic_lens import config
from magic_lens.adapters.vision.base import DetectorModel
from magic_lens.adapters.vision.colors import normalize_label
from magic_lens.orchestrator.contracts import Detection
from magic_lens.orchestrator.errors import ModelLoadError

OBJECT_CONFIDENCE_THRESHOLD = 0.6


def label_matches(class_name: str, target: str) -> bool:
    label = normalize_label(class_name)
    target = normalize_label(target)
    if not label or not target:
        return False
    # "apple" vs "red apple": containment either way counts
    return label == target or target in label or label in target


def matches_target(detections: list[Detection], target: str,
                   threshold: float = OBJECT_CONFIDENCE_THRESHOLD) -> bool:
    return any(
        d.score >= threshold and label_matches(d.class_name, target)
        for d in detections
    )


class ObjectDetector:
    def __init__(self, status_store, loader: Callable[[], DetectorModel]):
        self.status = status_store
        self._loader = loader
        self._model: Optional[DetectorModel] = None
        self._pending: Optional[asyncio.Future] = None
        # at most one model.detect call in flight across all sessions
        self._infer_lock = asyncio.Lock()
        self.load_count = 0

    @property
    def is_loading(self) -> bool:
        return self._pending is not None

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    async def ensure_loaded(self) -> DetectorModel:
        if self._model is not None:
            return self._model
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._load())
        # shield: one caller being cancelled must not abort the shared load
        return await asyncio.shield(self._pending)

    async def _load(self) -> DetectorModel:
        self.load_count += 1
        self.status.log("object_detector: loading model...")
        try:
            model = await asyncio.to_thread(self._loader)
        except Exception as e:
            self.status.log(f"object_detector: load failed {type(e).__name__}: {e}")
            raise ModelLoadError(f"detection model failed to load: {e}") from e
        finally:
            self._pending = None
        self._model = model
        self.status.log(f"object_detector: ready ({type(model).__name__})")
        return model

    async def detect(self, frame) -> list[Detection]:
        model = await self.ensure_loaded()
        async with self._infer_lock:
            return await asyncio.to_thread(model.detect, frame)


_shared: Optional[ObjectDetector] = None


def _default_loader(status_store) -> Callable[[], DetectorModel]:
    # DETECTOR_ADAPTER: dnn | mock  (default: dnn)
    adapter = config.DETECTOR_ADAPTER
    if adapter == "mock":
        from magic_lens.adapters.vision.mock_detector import MockDetector
        return lambda: MockDetector(status_store)
    from magic_lens.adapters.vision.dnn_detector import DnnDetector
    return lambda: DnnDetector(status_store)


def shared_detector(status_store) -> ObjectDetector:
    """Process-wide detector; the loaded model outlives individual sessions."""
    global _shared
    if _shared is None:
        _shared = ObjectDetector(status_store, loader=_default_loader(status_store))
        status_store.log(f"object_detector: adapter={config.DETECTOR_ADAPTER}")
    return _shared
