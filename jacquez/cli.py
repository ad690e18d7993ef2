"""CLI entrypoints for jacquez commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .action import run_action
from .config import load_config
from .errors import JacquezError
from .github.client import GitHubClient
from .guidelines.resolver import GuidelineResolver
from .logging import configure_logging


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
    parser.add_argument("-v", "--verbose", **kwargs)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jacquez",
        description="Check pull requests against a repository's contributing guidelines.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check",
        help="Analyse the pull request described by the GitHub Actions event.",
    )
    _add_verbose_option(check_parser, suppress_default=True)

    guidelines_parser = subparsers.add_parser(
        "guidelines",
        help="Print the resolved contributing guidelines for a repository.",
    )
    _add_verbose_option(guidelines_parser, suppress_default=True)
    guidelines_parser.add_argument("repository", help="Repository as OWNER/REPO.")
    guidelines_parser.add_argument(
        "--config",
        default=".",
        help="Directory containing .jacquez.yml (defaults to current directory).",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the webhook service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="0.0.0.0", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def _split_repository(value: str) -> tuple[str, str]:
    owner, sep, repo = value.partition("/")
    if not sep or not owner or not repo or "/" in repo:
        raise ValueError(f"Expected OWNER/REPO, got {value!r}")
    return owner, repo


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for jacquez commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    if args.command == "check":
        code = run_action(verbose=bool(args.verbose))
        if code:
            parser.exit(code)
    elif args.command == "guidelines":
        try:
            owner, repo = _split_repository(args.repository)
        except ValueError as exc:
            parser.exit(2, f"{exc}\n")
        try:
            config = load_config(Path(args.config))
            document = GuidelineResolver(GitHubClient(config.github_token)).resolve(owner, repo)
        except JacquezError as exc:
            parser.exit(1, f"jacquez guidelines failed: {exc}\nRun with --verbose for more details.\n")
        if document is None:
            parser.exit(1, f"No contributing guidelines found for {owner}/{repo}\n")
        print(f"# Sources: {', '.join(document.source_paths)}")
        print(document.content)
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
