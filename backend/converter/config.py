"""Application configuration. Loads from environment and .env file."""
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
# Load .env from cwd, then backend/.env, then project root .env
load_dotenv()
load_dotenv(BASE_DIR / ".env")
load_dotenv(BASE_DIR.parent / ".env")

STATIC_DIR = Path(__file__).resolve().parent / "static"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("converter")

# Accepted uploads (checked against the part's declared content type)
ALLOWED_MIME_TYPES = frozenset({"image/jpeg", "image/png", "image/webp", "image/avif"})

# Output formats, in archive order
OUTPUT_FORMATS = ["jpeg", "webp", "avif"]

# Encoding options (env overrides)
DEFAULT_QUALITY = int(os.getenv("DEFAULT_QUALITY", "80"))
MIN_QUALITY = 0
MAX_QUALITY = 100
WEBP_METHOD = int(os.getenv("WEBP_METHOD", "4"))

# Limits (env). The payload ceiling applies to the whole multipart body.
MAX_PAYLOAD_MB = int(os.getenv("MAX_PAYLOAD_MB", "500"))
MAX_PAYLOAD_BYTES = MAX_PAYLOAD_MB * 1024 * 1024
# 0 = no limit on the number of files in one request
MAX_FILES_PER_UPLOAD = int(os.getenv("MAX_FILES_PER_UPLOAD", "0"))

# Multipart field names and download name
UPLOAD_FIELD = "files"
ARCHIVE_FILENAME = os.getenv("ARCHIVE_FILENAME", "images.zip")

# Failure policies
#   ENCODE_FAILURE_POLICY: skip (drop the failing file/format, report a warning) | abort (fail the batch)
#   NAME_COLLISION_POLICY: rename (photo-1.jpeg, photo-2.jpeg, ...) | reject (fail the batch)
ENCODE_FAILURE_POLICIES = ("skip", "abort")
NAME_COLLISION_POLICIES = ("rename", "reject")


def _policy(name: str, allowed: tuple[str, ...]) -> str:
    value = os.getenv(name, allowed[0]).strip().lower()
    if value not in allowed:
        logger.warning("Invalid %s=%r, using %s", name, value, allowed[0])
        return allowed[0]
    return value


ENCODE_FAILURE_POLICY = _policy("ENCODE_FAILURE_POLICY", ENCODE_FAILURE_POLICIES)
NAME_COLLISION_POLICY = _policy("NAME_COLLISION_POLICY", NAME_COLLISION_POLICIES)

# Server (for uvicorn)
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
# CORS: comma-separated origins, e.g. "http://localhost:5173,http://127.0.0.1:5173"
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",") if o.strip()]
