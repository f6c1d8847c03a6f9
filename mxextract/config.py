# Config
"""
Configuration for the mxextract model extraction engine.

Values are read from the environment (and a local .env file) once, when
the settings singleton is first requested.
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from mxextract.utils.errors import ConfigurationError

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"{name} must be a boolean", {"value": raw})


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer", {"value": raw})


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    # Logging
    log_level = "INFO"
    dev_mode = False
    log_file_path: Optional[Path] = None

    # Output
    output_file = Path("app-logic.json")
    json_indent = 2
    schema_version = "1.0"
    project_name: Optional[str] = None

    # Extraction scope
    flow_document_types = ["Microflows$Microflow"]
    excluded_modules: List[str] = []

    def __init__(self) -> None:
        self.log_level = os.getenv("MXEXTRACT_LOG_LEVEL", self.log_level).upper()
        self.dev_mode = _env_bool("MXEXTRACT_DEV_MODE", self.dev_mode)

        log_file = os.getenv("MXEXTRACT_LOG_FILE")
        self.log_file_path = Path(log_file) if log_file else None

        self.output_file = Path(os.getenv("MXEXTRACT_OUTPUT_FILE", str(self.output_file)))
        self.json_indent = _env_int("MXEXTRACT_JSON_INDENT", self.json_indent)
        if self.json_indent < 0:
            raise ConfigurationError("MXEXTRACT_JSON_INDENT must not be negative")

        self.project_name = os.getenv("MXEXTRACT_PROJECT_NAME") or None
        self.flow_document_types = _env_list(
            "MXEXTRACT_FLOW_DOCUMENT_TYPES", self.flow_document_types
        )
        self.excluded_modules = _env_list("MXEXTRACT_EXCLUDED_MODULES", self.excluded_modules)

    def get_log_file_path(self) -> Optional[Path]:
        if self.log_file_path is None:
            return None
        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        return self.log_file_path

# Singleton instance
_settings = None

def get_settings():
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings
    _settings = None
