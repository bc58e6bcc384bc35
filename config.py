from __future__ import annotations
import os
from typing import Optional

from dotenv import load_dotenv
load_dotenv()

# -----------------------------
# Config defaults
# -----------------------------
HOST = os.getenv("COLOR_GAMES_HOST", "127.0.0.1")
PORT = int(os.getenv("COLOR_GAMES_PORT", "8000"))
BASE_URL = os.getenv("COLOR_GAMES_BASE_URL", f"http://{HOST}:{PORT}")
LOG_LEVEL = os.getenv("COLOR_GAMES_LOG_LEVEL", "INFO").upper()

def _optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return int(raw)

# Fixed seed makes generated rounds reproducible (demos, debugging).
SEED = _optional_int("COLOR_GAMES_SEED")
