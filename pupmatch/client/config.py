from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class ClientConfig:
    base_url: str = os.getenv("PUPMATCH_API_URL", "http://localhost:8000")
    timeout: float = float(os.getenv("PUPMATCH_API_TIMEOUT", "10.0"))


DEFAULT_CLIENT_CONFIG = ClientConfig()
