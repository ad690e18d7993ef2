"""GitHub Actions entrypoint: analyse the triggering pull request."""

from __future__ import annotations

import json
import os
import uuid
from pathlib import Path
from typing import Callable, Dict, Mapping

from .config import JacquezConfig, apply_action_inputs, load_config
from .errors import JacquezError
from .logging import configure_logging, get_logger
from .orchestrator import Orchestrator, PullRequest

ACTION_INPUTS = (
    "github-token",
    "anthropic-api-key",
    "ai-model",
    "max-tokens",
    "enable-detailed-logging",
    "fail-on-violations",
    "skip-drafts",
    "post-review-comments",
)

logger = get_logger("action")


def get_input(name: str, env: Mapping[str, str]) -> str:
    """Read an action input the way the runner exports it (``INPUT_<NAME>``)."""
    key = f"INPUT_{name.replace(' ', '_').upper()}"
    return env.get(key, "").strip()


def read_inputs(env: Mapping[str, str]) -> Dict[str, str]:
    return {name: get_input(name, env) for name in ACTION_INPUTS}


def write_outputs(outputs: Mapping[str, str], output_path: str | None) -> None:
    """Append outputs to the ``$GITHUB_OUTPUT`` file."""
    if not output_path:
        for name, value in outputs.items():
            logger.info("Output %s=%s", name, value)
        return
    with open(output_path, "a", encoding="utf-8") as handle:
        for name, value in outputs.items():
            if "\n" in value:
                delimiter = f"ghadelimiter_{uuid.uuid4()}"
                handle.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
            else:
                handle.write(f"{name}={value}\n")


def _fail(message: str) -> int:
    logger.error("%s", message)
    print(f"::error::{message}")
    return 1


def run_action(
    env: Mapping[str, str] | None = None,
    *,
    verbose: bool = False,
    orchestrator_factory: Callable[[JacquezConfig], Orchestrator] = Orchestrator.from_config,
) -> int:
    """Run one analysis for the event in ``GITHUB_EVENT_PATH`` and return the exit code."""
    environ = os.environ if env is None else env
    try:
        config = load_config(Path(environ.get("GITHUB_WORKSPACE") or "."), env=environ)
    except JacquezError as exc:
        return _fail(f"Action failed: {exc}")
    apply_action_inputs(config, read_inputs(environ))
    configure_logging(verbose=verbose or config.detailed_logging)

    event_path = environ.get("GITHUB_EVENT_PATH")
    if not event_path:
        return _fail("GITHUB_EVENT_PATH is not set")
    try:
        payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        return _fail(f"Could not read event payload: {exc}")
    if not isinstance(payload, dict) or "pull_request" not in payload:
        return _fail("This action can only be run on pull_request events")

    try:
        pr = PullRequest.from_event(payload)
    except ValueError as exc:
        return _fail(str(exc))
    logger.info("Starting Jacquez PR analysis for %s/%s#%d", pr.owner, pr.repo, pr.number)

    try:
        outcome = orchestrator_factory(config).run_pull_request(pr)
    except JacquezError as exc:
        return _fail(f"Action failed: {exc}")

    write_outputs(outcome.outputs(), environ.get("GITHUB_OUTPUT"))

    if outcome.violations_found and config.review.fail_on_violations:
        return _fail(
            f"Found {outcome.violation_count} contributing guideline violation(s). "
            "See the check run for details."
        )
    if outcome.violations_found:
        message = (
            f"Found {outcome.violation_count} contributing guideline violation(s), "
            "but not failing due to configuration."
        )
        logger.warning("%s", message)
        print(f"::warning::{message}")
    elif outcome.status == "ok":
        logger.info("No violations found, PR follows contributing guidelines!")
    return 0


__all__ = ["get_input", "read_inputs", "run_action", "write_outputs"]
