from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

MAX_NOTES_PER_REQUEST = 100


class AppConfig(BaseModel):
    notes_dir: Path = Field(default=Path("notes"))
    notes_file: Optional[Path] = Field(default=None)
    max_notes: int = Field(default=MAX_NOTES_PER_REQUEST, ge=1, le=MAX_NOTES_PER_REQUEST)
    transcript_path: Optional[Path] = Field(default=None)
    log_level: str = Field(default="WARNING")

    @property
    def notes_dir_resolved(self) -> Path:
        return self.notes_dir.resolve()


def load_config(path: Optional[Path] = None) -> AppConfig:
    """
    Load configuration from a YAML file.

    If `path` is None, looks for `config.yaml` in the current working directory.
    Also loads environment variables from a `.env` file if present; the
    `STUDY_NOTES_DIR` variable overrides `notes_dir`.
    """
    load_dotenv()

    if path is None:
        path = Path("config.yaml")

    raw: dict = {}
    if path.exists():
        with path.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    env_notes_dir = os.getenv("STUDY_NOTES_DIR")
    if env_notes_dir:
        raw["notes_dir"] = env_notes_dir

    try:
        cfg = AppConfig(**raw)
    except ValidationError as e:
        raise SystemExit(f"Invalid configuration in {path}:\n{e}") from e

    return cfg


__all__ = ["AppConfig", "MAX_NOTES_PER_REQUEST", "load_config"]
