from __future__ import annotations

import argparse
from argparse import ArgumentParser
from pathlib import Path
from typing import Optional

from .config import AppConfig
from .openrouter_client import OpenRouterSettings, validate_settings


def add_conversion_arguments(parser: ArgumentParser) -> None:
    parser.add_argument("input_path", type=Path, help="Transcript file or directory of .txt/.text/.transcript files.")
    parser.add_argument("output_file", type=Path, help="Markdown file to write (overwritten if it exists).")
    parser.add_argument("--base-url", default=None, help="Override the completion service base URL.")
    parser.add_argument("--model", default=None, help="Override the model identifier.")
    parser.add_argument("--api-key", default=None, help="API key (defaults to OPENROUTER_API_KEY or config).")
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds.")
    parser.add_argument("--temperature", type=float, default=None, help="Sampling temperature sent with each request.")
    parser.add_argument("--prompt-file", type=Path, default=None, help="Replace the bundled rewrite instructions.")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.json (user profile by default).")
    parser.add_argument("--log-level", default=None, help="Logging level for library diagnostics.")


def build_settings(args: argparse.Namespace, config: AppConfig) -> OpenRouterSettings:
    base_url = args.base_url or config.get("base_url") or ""
    model = args.model or config.get("model") or ""
    api_key = args.api_key or config.get("api_key") or ""
    ok, message = validate_settings(base_url, model, api_key)
    if not ok:
        raise ValueError(message)
    timeout = args.timeout if args.timeout is not None else config.get("timeout")
    if timeout is not None and timeout <= 0:
        timeout = None
    temperature = args.temperature if args.temperature is not None else config.get("temperature")
    return OpenRouterSettings(
        base_url=base_url,
        model=model,
        api_key=api_key,
        timeout=timeout,
        temperature=temperature,
    )


def resolve_prompt_path(args: argparse.Namespace, config: AppConfig) -> Optional[Path]:
    if args.prompt_file:
        return args.prompt_file
    stored = config.get("prompt_file")
    return Path(stored).expanduser() if stored else None
