"""Detection of new controller methods that lack matching specs."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Pattern, Sequence, Tuple

from ..errors import GitHubError
from ..github.client import GitHubClient
from ..logging import get_logger
from ..models import ChangedFile

logger = get_logger("analysis.specs")


@dataclass(frozen=True)
class _Framework:
    name: str
    file_pattern: Pattern[str]
    method_pattern: Pattern[str]


_FRAMEWORKS: Tuple[_Framework, ...] = (
    _Framework(
        "rails",
        re.compile(r"_controller\.rb$"),
        re.compile(r"^\+.*def\s+([a-zA-Z_][a-zA-Z0-9_]*)", re.MULTILINE),
    ),
    _Framework(
        "express",
        re.compile(r"\.(js|ts)$"),
        re.compile(
            r"^\+.*router\.(get|post|put|delete|patch)\s*\(\s*['\"`]([^'\"`]+)['\"`]",
            re.MULTILINE,
        ),
    ),
    _Framework(
        "django",
        re.compile(r"views\.py$"),
        re.compile(r"^\+.*def\s+([a-zA-Z_][a-zA-Z0-9_]*)\s*\([^)]*request", re.MULTILINE),
    ),
    _Framework(
        "aspnet",
        re.compile(r"Controller\.cs$"),
        re.compile(
            r"^\+.*\[Http(Get|Post|Put|Delete|Patch)\][\s\S]*?public.*?\s+([a-zA-Z_][a-zA-Z0-9_]*)\s*\(",
            re.MULTILINE,
        ),
    ),
)


@dataclass
class ControllerMethods:
    """New methods added to a single controller-like file."""

    file: str
    methods: List[str] = field(default_factory=list)


def guidelines_require_specs(guidelines: str) -> bool:
    lowered = guidelines.lower()
    return "spec" in lowered or "test" in lowered


def detect_new_controller_methods(files: Iterable[ChangedFile]) -> List[ControllerMethods]:
    detected: List[ControllerMethods] = []
    for changed in files:
        if changed.status not in {"added", "modified"} or not changed.patch:
            continue
        framework = _framework_for(changed.filename)
        if framework is None:
            continue
        methods: List[str] = []
        for match in framework.method_pattern.finditer(changed.patch):
            if framework.name == "express":
                methods.append(f"{match.group(1).upper()} {match.group(2)}")
            elif framework.name == "aspnet":
                methods.append(f"{match.group(1)} {match.group(2)}")
            else:
                methods.append(match.group(1))
        if methods:
            detected.append(ControllerMethods(file=changed.filename, methods=methods))
    return detected


def generate_test_paths(controller_file: str) -> List[str]:
    base_name = re.sub(r"\.(rb|js|ts|py|cs)$", "", controller_file)
    file_name = base_name.rsplit("/", 1)[-1]

    if controller_file.endswith("_controller.rb"):
        spec_name = file_name.replace("_controller", "_controller_spec")
        return [
            f"spec/controllers/{spec_name}.rb",
            f"spec/{spec_name}.rb",
            f"test/controllers/{file_name}_test.rb",
        ]
    if controller_file.endswith((".js", ".ts")):
        ext = "ts" if controller_file.endswith(".ts") else "js"
        return [
            f"{base_name}.test.{ext}",
            f"{base_name}.spec.{ext}",
            f"__tests__/{file_name}.test.{ext}",
            f"test/{file_name}.test.{ext}",
        ]
    if controller_file.endswith("views.py"):
        return [
            f"test_{file_name}.py",
            f"tests/test_{file_name}.py",
            f"{base_name}_test.py",
        ]
    if controller_file.endswith("Controller.cs"):
        test_name = file_name.replace("Controller", "ControllerTests")
        return [f"{base_name}Tests.cs", f"Tests/{test_name}.cs"]
    return []


def has_spec_for_method(test_content: str, method: str) -> bool:
    lowered = test_content.lower()
    name = re.escape(method.lower())
    patterns = (
        rf"describe.*{name}",
        rf"it.*{name}",
        rf"test.*{name}",
        rf"def.*test.*{name}",
        rf"\"{name}\"",
        rf"'{name}'",
        rf"`{name}`",
    )
    return any(re.search(pattern, lowered) for pattern in patterns)


def find_missing_specs(
    client: GitHubClient, owner: str, repo: str, controller: ControllerMethods
) -> List[str]:
    """Return the controller's methods for which no candidate test file has a spec."""
    missing = list(controller.methods)
    for test_path in generate_test_paths(controller.file):
        if not missing:
            break
        try:
            content = client.fetch_file_content(owner, repo, test_path)
        except GitHubError as exc:
            logger.debug("Could not read %s: %s", test_path, exc)
            continue
        if not content:
            continue
        missing = [method for method in missing if not has_spec_for_method(content, method)]
    return missing


def build_codebase_analysis(
    client: GitHubClient,
    owner: str,
    repo: str,
    files: Sequence[ChangedFile],
) -> str:
    """Summarise new controller methods without specs, or ``""`` when there are none."""
    lines: List[str] = []
    for controller in detect_new_controller_methods(files):
        missing = find_missing_specs(client, owner, repo, controller)
        if missing:
            lines.append(f"- {controller.file}: {', '.join(missing)}")
    if not lines:
        return ""
    logger.info("Found %d file(s) with controller methods missing specs", len(lines))
    return (
        "Codebase Analysis: New controller methods detected without corresponding specs:\n"
        + "\n".join(lines)
    )


def _framework_for(filename: str) -> Optional[_Framework]:
    for framework in _FRAMEWORKS:
        if framework.file_pattern.search(filename):
            return framework
    return None


__all__ = [
    "ControllerMethods",
    "build_codebase_analysis",
    "detect_new_controller_methods",
    "find_missing_specs",
    "generate_test_paths",
    "guidelines_require_specs",
    "has_spec_for_method",
]
