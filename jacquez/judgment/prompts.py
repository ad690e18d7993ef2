"""Prompt text and templates for guideline judgments."""

from __future__ import annotations

from typing import Any, Dict

from jinja2 import DictLoader, Environment, StrictUndefined

DESCRIPTION_SYSTEM_PROMPT = """You are a GitHub bot that enforces contributing guidelines. Only comment when there are clear, specific violations that prevent proper review.

ONLY comment for these specific violations:
- Issues missing required "What" and "Why" sections
- Pull requests without "Closes #123" or "Fixes #456" references to existing issues
- Pull requests with UI changes missing before/after screenshots/videos
- New controller methods missing required specs (when guidelines specify spec requirements)
- Submissions that are clearly incomplete or unreadable

DO NOT comment for:
- Minor style, grammar, or formatting issues
- Casual but professional language
- Single punctuation marks (?, !, etc.)
- Submissions that mostly follow guidelines

Response format (JSON):
- comment_needed: boolean (true only for clear violations)
- comment: string (1-2 sentences max, direct and actionable)
- reasoning: string (brief explanation)

If no comment is needed you may answer with NO_COMMENT_NEEDED instead.
If commenting, be direct and specific about what's missing without patronizing language."""

FILE_SYSTEM_PROMPT = """You are a code reviewer that enforces contributing guidelines. Analyze the changed code lines and identify violations of the contributing guidelines.

Only flag clear violations such as:
- Missing required documentation
- Violating naming conventions
- Missing tests when required
- Security issues mentioned in guidelines
- Code style violations explicitly mentioned in guidelines

Return a JSON array where each element has:
- position: number (the bracketed index of the changed line, e.g. 0 for [0])
- comment: string (brief explanation of the violation and how to fix it)

If no violations are found, return an empty array: []"""

_TEMPLATES = {
    "guidelines.j2": "Contributing guidelines:\n{{ guidelines }}",
    "submission.j2": (
        "{% if thread_context %}\n{{ thread_context }}\n\n{% endif %}"
        "{% if codebase_analysis %}\n{{ codebase_analysis }}\n\n{% endif %}"
        "Submission type: {{ submission_type }}\n"
        "Submission content:\n"
        "{{ content }}"
    ),
    "file_changes.j2": (
        "File: {{ filename }}\n"
        "Changed lines:\n"
        "{% for record in records %}"
        "[{{ loop.index0 }}] Line {{ record.new_file_line }}: {{ record.line }}\n"
        "{% endfor %}"
    ),
    "comment_thread.j2": (
        "Previous comments in this thread:\n\n"
        "{% for comment in comments %}"
        "Comment {{ loop.index }} by @{{ comment.author }} ({{ comment.created_at }}):\n"
        "{{ comment.body }}"
        "{% if not loop.last %}\n\n---\n\n{% endif %}"
        "{% endfor %}"
    ),
}

_ENV = Environment(
    loader=DictLoader(_TEMPLATES),
    autoescape=False,
    undefined=StrictUndefined,
    keep_trailing_newline=False,
)


def render(template_name: str, **context: Any) -> str:
    return _ENV.get_template(template_name).render(**context)


def render_guidelines(guidelines: str) -> str:
    return render("guidelines.j2", guidelines=guidelines)


def render_comment_thread(comments: list[Dict[str, Any]]) -> str:
    if not comments:
        return "No previous comments in this thread."
    return render("comment_thread.j2", comments=comments)


__all__ = [
    "DESCRIPTION_SYSTEM_PROMPT",
    "FILE_SYSTEM_PROMPT",
    "render",
    "render_comment_thread",
    "render_guidelines",
]
