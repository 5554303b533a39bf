"""
Application settings read from environment variables.

``load_dotenv`` runs first so a local ``.env`` file next to the backend
can provide them.  Every field has a default that works for a local
run: the seed document in ``backend/data/seed.json`` is copied to
``backend/data/data.json`` and served from there.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv()

BACKEND_DIR = Path(__file__).resolve().parent
DEFAULT_SEED_FILE = BACKEND_DIR / "data" / "seed.json"
DEFAULT_DATA_FILE = BACKEND_DIR / "data" / "data.json"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass
class Settings:
    """Settings snapshot; values are read when the instance is created."""

    project_name: str = field(default_factory=lambda: os.getenv("PROJECT_NAME", "SafetyNet Alerts API"))
    data_file: Path = field(default_factory=lambda: Path(os.getenv("DATA_FILE", str(DEFAULT_DATA_FILE))))
    seed_file: Path = field(default_factory=lambda: Path(os.getenv("SEED_FILE", str(DEFAULT_SEED_FILE))))
    # copy the seed over the working file on every start; when false the seed is only used if the working file is missing
    reset_on_startup: bool = field(default_factory=lambda: _env_flag("RESET_ON_STARTUP", "true"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_file: str = field(default_factory=lambda: os.getenv("LOG_FILE", ""))
    allowed_origins: List[str] = field(
        default_factory=lambda: _env_list("ALLOWED_ORIGINS", "http://localhost:5173,http://localhost:5174")
    )

    @property
    def demo_mode(self) -> bool:
        """True only when DEMO_MODE is explicitly 'true' (case-insensitive). Read on every call."""
        return os.environ.get("DEMO_MODE", "").lower() == "true"
