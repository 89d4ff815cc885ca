"""Command-line interface for the news_digest application."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import pprint
from pathlib import Path
from typing import List, Optional

from .app import GENERATE_COMMAND, SUMMARIZE_URL_COMMAND, NewsDigestApp
from .commands import CommandContext, ConsoleNotifier
from .config import parse_app_config, parse_env_config
from .editor import MarkdownFileEditor
from .summaries import mask_secret

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Summarise RSS feeds into a daily Markdown digest."
    )
    parser.add_argument(
        "--config",
        default="configs/config.xml",
        help="Path to the main configuration XML file.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g. DEBUG, INFO, WARNING). Overrides config.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Optional path to a log file. Overrides config.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("generate", help="Generate today's news summary.")

    summarize = subparsers.add_parser(
        "summarize", help="Summarise the URL on a note line and insert it below."
    )
    summarize.add_argument("note", help="Markdown note to insert the summary into.")
    summarize.add_argument(
        "--line",
        type=int,
        default=0,
        help="Zero-based cursor line; the summary goes on the following line.",
    )
    summarize.add_argument(
        "--selection",
        default=None,
        help="Selected text containing the URL. Defaults to the cursor line.",
    )

    menu = subparsers.add_parser("menu", help="List commands available for a selection.")
    menu.add_argument("--selection", default="", help="Currently selected text.")

    settings = subparsers.add_parser("settings", help="Show or change settings.")
    settings_sub = settings.add_subparsers(dest="settings_command", required=True)
    settings_sub.add_parser("show", help="Print the current settings.")
    setter = settings_sub.add_parser("set", help="Change one or more settings.")
    setter.add_argument("--feeds-file", metavar="PATH", help="Feed list, one per line.")
    setter.add_argument("--max-items", help="Number of recent articles per feed.")
    setter.add_argument("--model", help="Completion model identifier.")
    setter.add_argument("--api-key", help="API key for the completion service.")
    setter.add_argument("--prompt-file", metavar="PATH", help="Digest prompt text.")

    return parser


def configure_logging(level_name: str, log_file: Optional[str] = None) -> None:
    """Initialise logging according to options."""
    log_level = getattr(logging, level_name.upper(), None)
    if not isinstance(log_level, int):
        raise ValueError(f"Unsupported log level: {level_name}")

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(log_level)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    if log_file:
        log_path = Path(log_file)
        if log_path.parent and not log_path.parent.exists():
            log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        logger.debug(
            "Logger initialised with level %s and file output to %s",
            level_name.upper(),
            log_path,
        )
    else:
        logger.debug(
            "Logger initialised with console output at level %s", level_name.upper()
        )

    # Quiet noisy loggers
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))


def _print_settings(app: NewsDigestApp) -> None:
    settings = dataclasses.asdict(app.settings)
    settings["api_key"] = mask_secret(settings["api_key"])
    print(pprint.pformat(settings))


def _apply_settings(app: NewsDigestApp, args: argparse.Namespace) -> None:
    store = app.store
    if args.feeds_file:
        store.set_feeds(Path(args.feeds_file).read_text(encoding="utf-8"))
    if args.max_items is not None:
        store.set_max_items(args.max_items)
    if args.model is not None:
        store.set_model(args.model)
    if args.api_key is not None:
        store.set_api_key(args.api_key)
    if args.prompt_file:
        store.set_prompt(Path(args.prompt_file).read_text(encoding="utf-8").strip())


def run_command(app: NewsDigestApp, args: argparse.Namespace) -> int:
    if args.command == "generate":
        handle = app.registry.invoke(GENERATE_COMMAND)
        print(handle.path)
        return 0

    if args.command == "summarize":
        editor = MarkdownFileEditor(args.note, line=args.line, selection=args.selection)
        context = CommandContext(selection=editor.get_selection(), editor=editor)
        inserted = app.registry.invoke(SUMMARIZE_URL_COMMAND, context)
        return 0 if inserted else 1

    if args.command == "menu":
        context = CommandContext(selection=args.selection)
        for command in app.registry.available(context):
            print(f"{command.command_id}\t{command.name}")
        return 0

    if args.settings_command == "set":
        _apply_settings(app, args)
    _print_settings(app)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_config = parse_app_config(args.config)

        if app_config.env_file:
            env_vars = parse_env_config(app_config.env_file)
            os.environ.update(env_vars)

        # CLI overrides config
        log_level = args.log_level or app_config.logging.level
        log_file = args.log_file or app_config.logging.file

        configure_logging(log_level, log_file)

        config_dict = dataclasses.asdict(app_config)
        config_dict["settings"]["api_key"] = mask_secret(
            config_dict["settings"]["api_key"]
        )
        logger.info("Active Configuration:\n%s", pprint.pformat(config_dict))

        app = NewsDigestApp(app_config, ConsoleNotifier(), config_path=args.config)
        return run_command(app, args)
    except ValueError as exc:
        parser.error(str(exc))
    except (RuntimeError, OSError) as exc:
        logger.error("%s", exc)
        return 1
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error during execution.")
        return 1
