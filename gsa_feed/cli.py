"""Command-line interface for the gsa_feed application."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import pprint
from pathlib import Path
from typing import List, Optional

from . import db
from .config import apply_credential_overrides, parse_app_config, parse_env_config
from .models import (
    FEED_ACTION_ADD,
    FEED_ACTIONS,
    FEED_TYPE_FULL,
    FEED_TYPE_INCREMENTAL,
    FEED_TYPES,
)
from .runner import MODE_ENTITY, MODE_PURGE, MODE_PUSH, RunConfig, execute
from .validation import validate_feed

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Push site content to a Google Search Appliance feed."
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

    push_all = subparsers.add_parser(
        "push-all", help="Push every whitelisted entity as one feed."
    )
    push_all.add_argument(
        "--feed-type",
        choices=FEED_TYPES,
        default=FEED_TYPE_FULL,
        help="Feed type to push (default: full).",
    )
    push_all.add_argument(
        "--dry-run",
        action="store_true",
        help="Build the feed and print it without pushing.",
    )
    push_all.add_argument(
        "--output",
        metavar="PATH",
        help="Also write the generated feed XML to PATH.",
    )

    push_entity = subparsers.add_parser(
        "push-entity", help="Push a single entity from the content store by id."
    )
    push_entity.add_argument("entity_id", type=int, help="Id of the entity to push.")
    push_entity.add_argument(
        "--action",
        choices=FEED_ACTIONS,
        default=FEED_ACTION_ADD,
        help="Record action (default: add).",
    )
    push_entity.add_argument(
        "--feed-type",
        choices=FEED_TYPES,
        default=FEED_TYPE_INCREMENTAL,
        help="Feed type to push (default: incremental).",
    )
    push_entity.add_argument("--dry-run", action="store_true")

    purge = subparsers.add_parser(
        "purge", help="Delete the whole data source by pushing an empty full feed."
    )
    purge.add_argument("--dry-run", action="store_true")

    validate = subparsers.add_parser(
        "validate", help="Validate a feed XML file against the gsafeed DTD."
    )
    validate.add_argument("file", help="Feed XML file to validate.")
    validate.add_argument(
        "--dtd",
        default=None,
        help="DTD to validate against (defaults to the bundled copy).",
    )

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


def _run_validate(args: argparse.Namespace) -> int:
    xml_text = Path(args.file).read_text(encoding="utf-8")
    errors = validate_feed(xml_text, args.dtd)
    if errors:
        for error in errors:
            print(error)
        return 1
    print(f"{args.file} is valid.")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "validate":
            configure_logging(args.log_level or "INFO", args.log_file)
            return _run_validate(args)

        app_config = parse_app_config(args.config)

        if app_config.env_file:
            env_vars = parse_env_config(app_config.env_file)
            os.environ.update(env_vars)
        app_config = apply_credential_overrides(app_config)

        # CLI overrides config
        log_level = args.log_level or app_config.logging.level
        log_file = args.log_file or app_config.logging.file

        configure_logging(log_level, log_file)

        if args.command == "purge":
            config = RunConfig(mode=MODE_PURGE, dry_run=args.dry_run)
        elif args.command == "push-entity":
            config = RunConfig(
                mode=MODE_ENTITY,
                feed_type=args.feed_type,
                action=args.action,
                dry_run=args.dry_run,
                entity_id=args.entity_id,
            )
        else:
            config = RunConfig(
                mode=MODE_PUSH,
                feed_type=args.feed_type,
                dry_run=args.dry_run,
                output_path=args.output,
            )

        config_dict = dataclasses.asdict(app_config)
        if config_dict["push"].get("password"):
            config_dict["push"]["password"] = "***MASKED***"
        if config_dict["database"].get("connection_string"):
            config_dict["database"]["connection_string"] = "***MASKED***"
        logger.info("Active Configuration:\n%s", pprint.pformat(config_dict))

        session_factory = None
        if config.mode in (MODE_PUSH, MODE_ENTITY):
            engine = db.init_engine(app_config.database.connection_string)
            if engine:
                session_factory = db.get_session_factory(engine)

        result = execute(config, app_config, session_factory=session_factory)
    except ValueError as exc:
        parser.error(str(exc))
    except (RuntimeError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        return 1
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error during execution.")
        return 1

    if config.dry_run:
        print(result.output_text)
    return 0
