from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any


CONFIG_SCHEMA_VERSION = 1

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigError(RuntimeError):
    pass


@dataclass
class ReplConfig:
    schema_version: int = CONFIG_SCHEMA_VERSION

    # None means "<config dir>/history".
    history_file: str | None = None
    history_enabled: bool = True
    # Number input-buffer lines from 1 (amend-line, show-input).
    base_one: bool = True
    # Editor command for `edit`; falls back to $VISUAL / $EDITOR / vi.
    editor: str | None = None
    show_banners: bool = False
    log_level: str = "WARNING"


def config_dir() -> Path:
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg_config_home) if xdg_config_home else (Path.home() / ".config")
    return base / "nestrepl"


def config_path(*, base_dir: Path | None = None) -> Path:
    return (base_dir or config_dir()) / "config.json"


def default_history_path(*, base_dir: Path | None = None) -> Path:
    return (base_dir or config_dir()) / "history"


def history_path(config: ReplConfig) -> Path:
    if config.history_file:
        return Path(config.history_file).expanduser()
    return default_history_path()


def load_config(*, path: Path | None = None) -> ReplConfig:
    p = path or config_path()
    if not p.exists():
        return ReplConfig()

    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except Exception as exc:
        raise ConfigError(f"Failed to read config file: {p}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file must contain a JSON object: {p}")

    version = raw.get("schema_version", 0)
    if version not in {0, CONFIG_SCHEMA_VERSION}:
        raise ConfigError(f"Unsupported config schema_version={version!r} in {p}")

    history_file = raw.get("history_file")
    if history_file is not None and not isinstance(history_file, str):
        history_file = None
    if isinstance(history_file, str) and not history_file.strip():
        history_file = None

    history_enabled = raw.get("history_enabled", True)
    if not isinstance(history_enabled, bool):
        history_enabled = True

    base_one = raw.get("base_one", True)
    if not isinstance(base_one, bool):
        base_one = True

    editor = raw.get("editor")
    if editor is not None and not isinstance(editor, str):
        editor = None
    if isinstance(editor, str):
        editor = editor.strip() or None

    show_banners = raw.get("show_banners", False)
    if not isinstance(show_banners, bool):
        show_banners = False

    log_level = raw.get("log_level", "WARNING")
    if not isinstance(log_level, str) or log_level.upper() not in _LOG_LEVELS:
        logging.getLogger(__name__).warning("ignoring invalid log_level %r in %s", log_level, p)
        log_level = "WARNING"

    return ReplConfig(
        schema_version=CONFIG_SCHEMA_VERSION,
        history_file=history_file,
        history_enabled=history_enabled,
        base_one=base_one,
        editor=editor,
        show_banners=show_banners,
        log_level=log_level.upper(),
    )


def save_config(config: ReplConfig, *, path: Path | None = None) -> None:
    p = path or config_path()
    p.parent.mkdir(parents=True, exist_ok=True)

    payload: dict[str, Any] = asdict(config)
    payload["schema_version"] = CONFIG_SCHEMA_VERSION

    encoded = json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n"

    tmp_dir = str(p.parent)
    tmp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=tmp_dir,
            delete=False,
            prefix=".config.",
            suffix=".tmp",
        ) as f:
            f.write(encoded)
            tmp_path = Path(f.name)
        tmp_path.replace(p)
    finally:
        if tmp_path is not None:
            try:
                tmp_path.unlink(missing_ok=True)
            except Exception:
                pass
