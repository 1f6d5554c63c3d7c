"""CLI entrypoints for portfolio updater commands."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from .config import load_config
from .content.sanitizer import normalize_content
from .errors import ServiceError
from .logging import configure_logging
from .orchestrator import ContentOrchestrator


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="portfolio-updater",
        description="Update a portfolio content.json through a language model and GitHub commits.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a .portfolio.yml file (environment variables take precedence).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write detailed logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="0.0.0.0", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    chat_parser = subparsers.add_parser(
        "chat",
        help="Generate and commit a content update from a free-text request.",
    )
    _add_verbose_option(chat_parser, suppress_default=True)
    chat_parser.add_argument("prompt", help="Free-text description of the change.")

    setup_parser = subparsers.add_parser(
        "setup",
        help="Seed the repository with the initial site files (runs once).",
    )
    _add_verbose_option(setup_parser, suppress_default=True)

    validate_parser = subparsers.add_parser(
        "validate",
        help="Check a local content.json and print its canonical form.",
    )
    _add_verbose_option(validate_parser, suppress_default=True)
    validate_parser.add_argument("path", type=Path, help="Path to the content document.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for portfolio updater commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "validate":
        try:
            document = json.loads(args.path.read_text(encoding="utf-8"))
            canonical = normalize_content(document)
        except (OSError, json.JSONDecodeError) as exc:
            parser.exit(1, f"Unable to read {args.path}: {exc}\n")
        except ServiceError as exc:
            parser.exit(1, f"{args.path} is invalid: {exc.message}\n")
        print(canonical)
        return

    try:
        config = load_config(args.config)
    except ServiceError as exc:
        parser.exit(1, f"{exc.message}\n")

    if args.command == "serve":  # pragma: no cover - integration path
        from .service import run_service

        run_service(host=args.host, port=args.port, config=config)
        return

    orchestrator = ContentOrchestrator(config)
    if args.command == "chat":
        try:
            outcome = orchestrator.run_update(args.prompt)
        except ServiceError as exc:
            parser.exit(1, f"Update failed: {exc.message}\nRun with --verbose for more details.\n")
        print(f"Committed {', '.join(outcome.files)} to {outcome.repository}@{outcome.branch}")
        print(outcome.commit.url)
    elif args.command == "setup":
        try:
            setup_outcome = orchestrator.run_setup(config.setup_key)
        except ServiceError as exc:
            parser.exit(1, f"Setup failed: {exc.message}\n")
        if setup_outcome.commit is None:
            print("Setup already completed. No changes applied.")
        else:
            print(f"Seeded {len(setup_outcome.files)} files into {setup_outcome.repository}@{setup_outcome.branch}")
            print(setup_outcome.commit.url)


if __name__ == "__main__":  # pragma: no cover
    main()
