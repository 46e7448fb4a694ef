"""Configuration loading for the quiz bank pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .constants import ACTION_LOG_RESERVED_ROWS, ADMIN_CODES, DEFAULT_SET, FALLBACK_ADMIN_CODE


def _resolve_path(raw_path: str, base_dir: Path) -> str:
    if raw_path == ":memory:":
        return raw_path
    path = Path(raw_path).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)


@dataclass
class PathsConfig:
    """Filesystem locations used by the pipeline."""

    sqlite_path: str = "data/quiz_bank.db"


@dataclass
class StorageConfig:
    """Which tabular store backs the tables: memory, sqlite or sheets."""

    backend: str = "sqlite"


@dataclass
class SheetsConfig:
    """Google Sheets and Drive access."""

    spreadsheet_id: Optional[str] = None
    service_account_path: Optional[str] = None
    manage_sharing: bool = False


@dataclass
class ParsingConfig:
    """Transcript parsing settings."""

    default_set: str = DEFAULT_SET
    admin_codes: Dict[str, str] = field(default_factory=lambda: dict(ADMIN_CODES))
    fallback_admin_code: str = FALLBACK_ADMIN_CODE
    similarity_threshold: float = 0.8
    write_question_bank: bool = True


@dataclass
class ActionLogConfig:
    """Admin action log layout and attribution."""

    reserved_rows: int = ACTION_LOG_RESERVED_ROWS
    actor: Optional[str] = None


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class AppConfig:
    """Top-level app configuration."""

    paths: PathsConfig = field(default_factory=PathsConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    sheets: SheetsConfig = field(default_factory=SheetsConfig)
    parsing: ParsingConfig = field(default_factory=ParsingConfig)
    action_log: ActionLogConfig = field(default_factory=ActionLogConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_dir: Optional[Path] = None) -> "AppConfig":
        """Build config from a dictionary."""
        base = Path.cwd() if base_dir is None else base_dir

        paths_data = data.get("paths", {})
        paths = PathsConfig(
            sqlite_path=_resolve_path(paths_data.get("sqlite_path", "data/quiz_bank.db"), base),
        )

        sheets_data = dict(data.get("sheets", {}))
        if sheets_data.get("service_account_path"):
            sheets_data["service_account_path"] = _resolve_path(sheets_data["service_account_path"], base)

        parsing_data = dict(data.get("parsing", {}))
        if "admin_codes" in parsing_data:
            parsing_data["admin_codes"] = {str(k): str(v) for k, v in (parsing_data["admin_codes"] or {}).items()}

        return cls(
            paths=paths,
            storage=StorageConfig(**data.get("storage", {})),
            sheets=SheetsConfig(**sheets_data),
            parsing=ParsingConfig(**parsing_data),
            action_log=ActionLogConfig(**data.get("action_log", {})),
            logging=LoggingConfig(**data.get("logging", {})),
        )

    @classmethod
    def from_yaml(cls, path: str) -> "AppConfig":
        """Load config from YAML."""
        config_path = Path(path).resolve()
        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        return cls.from_dict(data, base_dir=config_path.parent)
