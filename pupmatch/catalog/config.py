from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_PACKAGE_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass(frozen=True)
class CatalogConfig:
    """
    Location of the breed catalog and puppy listing datasets.
    """

    data_dir: Path = Path(os.getenv("PUPMATCH_DATA_DIR", str(_PACKAGE_DATA_DIR)))
    breeds_filename: str = "breeds.csv"
    puppies_filename: str = "puppies.csv"

    @property
    def breeds_path(self) -> Path:
        return self.data_dir / self.breeds_filename

    @property
    def puppies_path(self) -> Path:
        return self.data_dir / self.puppies_filename


DEFAULT_CATALOG_CONFIG = CatalogConfig()
