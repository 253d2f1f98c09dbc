"""`nestrepl` — nestable Python REPL with meta-commands and shared history.

This is the CLI entrypoint. Run from source with:
  `python -m apps.cli.main --help`
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import asdict, replace
from pathlib import Path
from typing import Sequence

from apps.cli.config import ConfigError, ReplConfig, config_path, history_path, load_config, save_config
from nestrepl import EngineConfig, SessionEngine
from nestrepl.engine.adapters import ExternalEditor
from nestrepl.engine.repl import BANNER_HOOKS
from nestrepl.output import print_json

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="nestrepl", description="Nestable Python REPL")
    p.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Config file (default: {config_path()})",
    )
    p.add_argument("--history-file", help="History file shared by all sessions (default: from config)")
    p.add_argument("--no-history", action="store_true", help="Do not load or save input history")
    p.add_argument("--editor", help="Editor command for `edit` (default: $VISUAL / $EDITOR)")
    p.add_argument(
        "--log-level",
        type=str.upper,
        choices=_LOG_LEVELS,
        help="Logging level (default: from config, WARNING)",
    )
    p.add_argument("--banners", action="store_true", default=None, help="Announce session start/end")
    p.add_argument(
        "--zero-based",
        action="store_true",
        help="Number input-buffer lines from 0 in amend-line/show-input",
    )

    sub = p.add_subparsers(dest="command")
    config_p = sub.add_parser("config", help="Show the effective configuration")
    config_p.add_argument("--save", action="store_true", help="Persist the effective configuration")
    return p


def _effective_config(args: argparse.Namespace) -> ReplConfig:
    config = load_config(path=args.config)
    overrides: dict[str, object] = {}
    if args.history_file:
        overrides["history_file"] = args.history_file
    if args.no_history:
        overrides["history_enabled"] = False
    if args.editor:
        overrides["editor"] = args.editor
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.banners:
        overrides["show_banners"] = True
    if args.zero_based:
        overrides["base_one"] = False
    return replace(config, **overrides)


def run_repl(config: ReplConfig) -> int:
    engine_config = EngineConfig(
        history_file=history_path(config),
        history_enabled=config.history_enabled,
        base_one=config.base_one,
        hooks=BANNER_HOOKS if config.show_banners else {},
    )
    engine = SessionEngine(editor=ExternalEditor(config.editor), config=engine_config)
    engine.start()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = _effective_config(args)
    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )

    command = args.command
    if command is None:
        return run_repl(config)
    if command == "config":
        if args.save:
            save_config(config, path=args.config)
        payload = asdict(config)
        payload["effective_history_file"] = str(history_path(config))
        print_json(payload)
        return 0
    parser.error(f"Unknown command: {command!r}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
