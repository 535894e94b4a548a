from __future__ import annotations

import argparse
import locale
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Iterable, NoReturn

from .cli import add_conversion_arguments, build_settings, resolve_prompt_path
from .config import AppConfig, get_default_config_path
from .engine import TranscriptConverter
from .errors import TranscriptToolError
from .openrouter_client import OpenRouterClient
from .prompts import load_system_prompt
from .rewriter import TranscriptRewriter
from .token_utils import build_token_counter, configure_token_counter

logger = logging.getLogger(__name__)


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="transcript-md",
        description="Rewrite raw speech transcripts into polished markdown via an OpenRouter model.",
    )
    add_conversion_arguments(parser)
    return parser


def load_config(path_override: Path | None) -> AppConfig:
    return AppConfig(path_override or get_default_config_path())


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def configure_collation() -> None:
    # File names without digits are ordered with the user's collation rules.
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as exc:
        logger.warning("Locale collation unavailable, using code point order: %s", exc)


def main(argv: Iterable[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    config = load_config(getattr(args, "config", None))
    configure_logging(args.log_level or config.get("log_level") or "WARNING")
    if config.load_warning:
        _console_log("warning", config.load_warning)
    configure_collation()
    try:
        settings = build_settings(args, config)
        system_prompt = load_system_prompt(resolve_prompt_path(args, config))
    except (ValueError, TranscriptToolError) as exc:
        _console_log("error", str(exc))
        return 1
    configure_token_counter(build_token_counter(settings.model))
    rewriter = TranscriptRewriter(OpenRouterClient(settings), system_prompt)
    converter = TranscriptConverter(rewriter.rewrite, log_callback=_console_log)
    try:
        report = converter.convert(args.input_path, args.output_file)
    except TranscriptToolError as exc:
        _console_log("error", f"Error during conversion process: {exc}")
        return 1
    summary = report.to_dict()["summary"]
    _console_log(
        "success",
        f"Conversion completed successfully! {summary['total_files']} file(s) in "
        f"{summary['duration_seconds']}s.",
    )
    return 0


def _console_log(level: str, message: str) -> None:
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    stream = sys.stdout
    if level.lower() == "success":
        prefix = "[OK]"
    elif level.lower() == "warning":
        prefix = "[WARN]"
        stream = sys.stderr
    elif level.lower() == "error":
        prefix = "[ERR]"
        stream = sys.stderr
    else:
        prefix = "[INFO]"
    print(f"{prefix} [{timestamp}] {message}", file=stream)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
