import os
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent

load_dotenv(BASE_DIR.parent / ".env", override=False)
load_dotenv(BASE_DIR / ".env", override=False)

# Backend
API_BASE_URL = os.getenv("API_BASE_URL", "http://127.0.0.1:8787").rstrip("/")
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8787"))
DB_PATH = Path(os.getenv("DB_PATH", "magic_lens.db"))
HTTP_TIMEOUT_S = float(os.getenv("HTTP_TIMEOUT_S", "10"))

# Local identity (stands in for browser localStorage)
USER_ID_FILE = Path(os.getenv("USER_ID_FILE", str(Path.home() / ".magic-lens" / "user_id")))

# Camera + detection loop
CAMERA_INDEX = int(os.getenv("CAMERA_INDEX", "0"))
CENTER_SAMPLE_SIZE = int(os.getenv("CENTER_SAMPLE_SIZE", "50"))
OBJECT_CONFIDENCE_THRESHOLD = float(os.getenv("OBJECT_CONFIDENCE_THRESHOLD", "0.6"))
FRAME_INTERVAL_S = float(os.getenv("FRAME_INTERVAL_S", str(1 / 30)))

# Object detector: dnn | mock
DETECTOR_ADAPTER = os.getenv("DETECTOR_ADAPTER", "dnn").lower()
DETECTOR_MODEL_PATH = BASE_DIR / os.getenv("DETECTOR_MODEL_PATH", "weights/frozen_inference_graph.pb")
DETECTOR_CONFIG_PATH = BASE_DIR / os.getenv("DETECTOR_CONFIG_PATH", "weights/ssd_mobilenet_v2_coco.pbtxt")
DETECTOR_INPUT_SIZE = int(os.getenv("DETECTOR_INPUT_SIZE", "300"))

# Audio
AUDIO_ENABLED = os.getenv("AUDIO_ENABLED", "1") not in ("0", "false", "False", "")
SUCCESS_AUDIO_PATH = os.getenv("SUCCESS_AUDIO_PATH", str(BASE_DIR / "adapters" / "audio" / "assets" / "success.mp3"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
