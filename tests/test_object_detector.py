import asyncio
import threading
import time

import numpy as np
import pytest

from magic_lens.adapters.vision.mock_detector import MockDetector
from magic_lens.adapters.vision.object_detector import (
    ObjectDetector, label_matches, matches_target,
)
from magic_lens.orchestrator.contracts import Detection
from magic_lens.orchestrator.errors import ModelLoadError


class SlowLoader:
    def __init__(self, status, fail_times: int = 0):
        self.status = status
        self.fail_times = fail_times
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self):
        with self._lock:
            self.calls += 1
            calls = self.calls
        time.sleep(0.05)
        if calls <= self.fail_times:
            raise RuntimeError("weights corrupt")
        return MockDetector(self.status, [("cup", 0.9)])


async def test_concurrent_loads_share_one_instance(status):
    loader = SlowLoader(status)
    detector = ObjectDetector(status, loader)

    models = await asyncio.gather(*(detector.ensure_loaded() for _ in range(5)))

    assert loader.calls == 1
    assert detector.load_count == 1
    assert all(m is models[0] for m in models)
    assert await detector.ensure_loaded() is models[0]


async def test_is_loading_while_in_flight(status):
    detector = ObjectDetector(status, SlowLoader(status))
    task = asyncio.ensure_future(detector.ensure_loaded())
    await asyncio.sleep(0)
    assert detector.is_loading
    await task
    assert not detector.is_loading
    assert detector.is_loaded


async def test_load_failure_raises_and_can_retry(status):
    loader = SlowLoader(status, fail_times=1)
    detector = ObjectDetector(status, loader)

    results = await asyncio.gather(
        detector.ensure_loaded(), detector.ensure_loaded(), return_exceptions=True
    )
    assert all(isinstance(r, ModelLoadError) for r in results)
    assert loader.calls == 1
    assert not detector.is_loading

    model = await detector.ensure_loaded()
    assert isinstance(model, MockDetector)
    assert loader.calls == 2


async def test_detect_loads_then_runs_model(status):
    detector = ObjectDetector(status, lambda: MockDetector(status, [("cup", 0.8)]))
    out = await detector.detect(np.zeros((4, 4, 3), dtype=np.uint8))
    assert out == [Detection("cup", 0.8)]


@pytest.mark.parametrize("label, target", [
    ("apple", "apple"),
    ("apple", "red apple"),
    ("teddy bear", "bear"),
    ("Cell Phone", "cell phone "),
])
def test_loose_label_matching(label, target):
    assert label_matches(label, target)


@pytest.mark.parametrize("label, target", [
    ("cup", "apple"),
    ("", "apple"),
    ("apple", ""),
])
def test_label_mismatch(label, target):
    assert not label_matches(label, target)


def test_threshold_applies_before_label_match():
    dets = [Detection("apple", 0.59), Detection("person", 0.99)]
    assert not matches_target(dets, "apple")
    assert matches_target(dets + [Detection("apple", 0.6)], "apple")
    assert matches_target(dets, "apple", threshold=0.5)


class CountingModel:
    """Records how many detect() calls overlap."""

    def __init__(self):
        self.active = 0
        self.peak = 0
        self._lock = threading.Lock()

    def detect(self, frame):
        with self._lock:
            self.active += 1
            self.peak = max(self.peak, self.active)
        time.sleep(0.03)
        with self._lock:
            self.active -= 1
        return [Detection("cup", 0.9)]


async def test_inference_calls_never_overlap(status):
    model = CountingModel()
    detector = ObjectDetector(status, lambda: model)
    frame = np.zeros((4, 4, 3), dtype=np.uint8)

    # a late tick from a stopped game and the first tick of the next one
    results = await asyncio.gather(*(detector.detect(frame) for _ in range(3)))

    assert model.peak == 1
    assert all(r == [Detection("cup", 0.9)] for r in results)
