"""
OpenCV DNN object classifier (SSD MobileNet, COCO labels).

Loads a TensorFlow frozen graph + pbtxt via cv2.dnn and reports every
detection's class name and score. Spatial boxes are dropped: the game only
asks "is the target in view", never "where".

Model files come from DETECTOR_MODEL_PATH / DETECTOR_CONFIG_PATH
(see config.py). No GPU needed, roughly 30-60ms per frame on a laptop CPU.
"""
from pathlib import Path

import cv2
import numpy as np

from magic_lens import config
from magic_lens.adapters.vision.base import DetectorModel
from magic_lens.orchestrator.contracts import Detection

# TF object-detection COCO ids (1-based, with gaps)
COCO_LABELS: dict[int, str] = {
    1: "person", 2: "bicycle", 3: "car", 4: "motorcycle", 5: "airplane",
    6: "bus", 7: "train", 8: "truck", 9: "boat", 10: "traffic light",
    11: "fire hydrant", 13: "stop sign", 14: "parking meter", 15: "bench",
    16: "bird", 17: "cat", 18: "dog", 19: "horse", 20: "sheep", 21: "cow",
    22: "elephant", 23: "bear", 24: "zebra", 25: "giraffe", 27: "backpack",
    28: "umbrella", 31: "handbag", 32: "tie", 33: "suitcase", 34: "frisbee",
    35: "skis", 36: "snowboard", 37: "sports ball", 38: "kite",
    39: "baseball bat", 40: "baseball glove", 41: "skateboard",
    42: "surfboard", 43: "tennis racket", 44: "bottle", 46: "wine glass",
    47: "cup", 48: "fork", 49: "knife", 50: "spoon", 51: "bowl",
    52: "banana", 53: "apple", 54: "sandwich", 55: "orange", 56: "broccoli",
    57: "carrot", 58: "hot dog", 59: "pizza", 60: "donut", 61: "cake",
    62: "chair", 63: "couch", 64: "potted plant", 65: "bed",
    67: "dining table", 70: "toilet", 72: "tv", 73: "laptop", 74: "mouse",
    75: "remote", 76: "keyboard", 77: "cell phone", 78: "microwave",
    79: "oven", 80: "toaster", 81: "sink", 82: "refrigerator", 84: "book",
    85: "clock", 86: "vase", 87: "scissors", 88: "teddy bear",
    89: "hair drier", 90: "toothbrush",
}

# Keep weak candidates too; the session applies its own confidence threshold
MIN_REPORT_SCORE = 0.2


class DnnDetector(DetectorModel):
    def __init__(self, status_store, model_path: Path | None = None,
                 config_path: Path | None = None, input_size: int | None = None):
        self.status = status_store
        self.model_path = Path(model_path or config.DETECTOR_MODEL_PATH)
        self.config_path = Path(config_path or config.DETECTOR_CONFIG_PATH)
        self.input_size = input_size or config.DETECTOR_INPUT_SIZE
        if not self.model_path.is_file() or not self.config_path.is_file():
            raise FileNotFoundError(
                f"detector weights missing: {self.model_path} / {self.config_path}"
            )
        self._net = cv2.dnn.readNetFromTensorflow(str(self.model_path), str(self.config_path))
        self.status.log(f"dnn_detector: loaded {self.model_path.name}")

    def detect(self, frame) -> list[Detection]:
        if frame is None or frame.size == 0:
            return []
        blob = cv2.dnn.blobFromImage(
            frame, size=(self.input_size, self.input_size), swapRB=True, crop=False
        )
        self._net.setInput(blob)
        out = self._net.forward()
        # out: [1, 1, N, 7] -> (image_id, class_id, score, x1, y1, x2, y2)
        rows = np.asarray(out).reshape(-1, 7)
        detections = []
        for row in rows:
            score = float(row[2])
            if score < MIN_REPORT_SCORE:
                continue
            label = COCO_LABELS.get(int(row[1]))
            if label is None:
                continue
            detections.append(Detection(class_name=label, score=score))
        detections.sort(key=lambda d: d.score, reverse=True)
        return detections
