"""Configuration loading for jacquez (.jacquez.yml plus environment overrides)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".jacquez.yml"

DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_MAX_TOKENS = 300
DEFAULT_CACHE_TTL = 300.0
DEFAULT_MIN_COMMENT_LENGTH = 3


@dataclass
class LLMConfig:
    """Judgment model settings."""

    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    request_timeout: Optional[float] = 60.0


@dataclass
class CacheConfig:
    """Guideline cache settings."""

    enabled: bool = True
    ttl_seconds: float = DEFAULT_CACHE_TTL


@dataclass
class ReviewConfig:
    """Controls what the bot posts back to GitHub."""

    fail_on_violations: bool = False
    skip_drafts: bool = True
    post_review_comments: bool = False
    min_comment_length: int = DEFAULT_MIN_COMMENT_LENGTH
    check_name: str = "Jacquez - Contributing Guidelines"


@dataclass
class JacquezConfig:
    """Represents the settings defined in .jacquez.yml and the environment."""

    root: Path
    llm: LLMConfig = field(default_factory=LLMConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    review: ReviewConfig = field(default_factory=ReviewConfig)
    github_token: Optional[str] = None
    webhook_secret: Optional[str] = None
    detailed_logging: bool = False
    skip_keywords: List[str] = field(default_factory=lambda: ["aside"])


def load_config(
    config_path: Path | None = None, *, env: Mapping[str, str] | None = None
) -> JacquezConfig:
    """Load configuration from disk, then apply environment overrides."""
    environ = os.environ if env is None else env
    config_file = _resolve_config_path(config_path or Path.cwd())
    config = JacquezConfig(root=config_file.parent.resolve())

    if config_file.exists():
        data = _read_config(config_file)
        if not isinstance(data, dict):
            raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")
        _apply_file(config, data)

    _apply_env(config, environ)
    return config


def _apply_file(config: JacquezConfig, data: Dict[str, Any]) -> None:
    llm_data = _as_dict(data.get("llm"))
    if llm_data:
        config.llm.model = _as_str(llm_data.get("model")) or config.llm.model
        config.llm.max_tokens = _as_int(llm_data.get("max_tokens")) or config.llm.max_tokens
        config.llm.base_url = _as_str(llm_data.get("base_url"))
        config.llm.api_key = _as_str(llm_data.get("api_key"))
        timeout = _as_float(llm_data.get("request_timeout"))
        if timeout is not None:
            config.llm.request_timeout = timeout

    cache_data = _as_dict(data.get("cache"))
    if cache_data:
        enabled = _as_bool(cache_data.get("enabled"))
        if enabled is not None:
            config.cache.enabled = enabled
        ttl = _as_float(cache_data.get("ttl_seconds"))
        if ttl is not None:
            config.cache.ttl_seconds = ttl

    review_data = _as_dict(data.get("review"))
    if review_data:
        for name in ("fail_on_violations", "skip_drafts", "post_review_comments"):
            value = _as_bool(review_data.get(name))
            if value is not None:
                setattr(config.review, name, value)
        min_length = _as_int(review_data.get("min_comment_length"))
        if min_length is not None:
            config.review.min_comment_length = min_length
        check_name = _as_str(review_data.get("check_name"))
        if check_name:
            config.review.check_name = check_name

    detailed = _as_bool(data.get("detailed_logging"))
    if detailed is not None:
        config.detailed_logging = detailed
    if "skip_keywords" in data:
        config.skip_keywords = _as_str_list(data.get("skip_keywords"))


def _apply_env(config: JacquezConfig, env: Mapping[str, str]) -> None:
    model = env.get("AI_MODEL")
    if model:
        config.llm.model = model
    max_tokens = _as_int(env.get("MAX_TOKENS"))
    if max_tokens:
        config.llm.max_tokens = max_tokens
    api_key = env.get("ANTHROPIC_API_KEY")
    if api_key:
        config.llm.api_key = api_key
    base_url = env.get("ANTHROPIC_BASE_URL")
    if base_url:
        config.llm.base_url = base_url

    ttl = _as_float(env.get("CACHE_TIMEOUT"))
    if ttl is not None:
        config.cache.ttl_seconds = ttl
    enabled = _as_bool(env.get("ENABLE_CACHING"))
    if enabled is not None:
        config.cache.enabled = enabled

    min_length = _as_int(env.get("MIN_COMMENT_LENGTH"))
    if min_length is not None:
        config.review.min_comment_length = min_length
    detailed = _as_bool(env.get("ENABLE_DETAILED_LOGGING"))
    if detailed is not None:
        config.detailed_logging = detailed

    token = env.get("GITHUB_TOKEN")
    if token:
        config.github_token = token
    secret = env.get("GH_WEBHOOK_SECRET")
    if secret:
        config.webhook_secret = secret


def apply_action_inputs(config: JacquezConfig, inputs: Mapping[str, str]) -> JacquezConfig:
    """Overlay GitHub Action inputs (``github-token``, ``ai-model`` ...) onto ``config``.

    Empty inputs are treated as unset.
    """
    token = inputs.get("github-token")
    if token:
        config.github_token = token
    api_key = inputs.get("anthropic-api-key")
    if api_key:
        config.llm.api_key = api_key
    model = inputs.get("ai-model")
    if model:
        config.llm.model = model
    max_tokens = _as_int(inputs.get("max-tokens"))
    if max_tokens:
        config.llm.max_tokens = max_tokens
    detailed = _as_bool(inputs.get("enable-detailed-logging"))
    if detailed is not None:
        config.detailed_logging = detailed
    fail = _as_bool(inputs.get("fail-on-violations"))
    if fail is not None:
        config.review.fail_on_violations = fail
    skip_drafts = _as_bool(inputs.get("skip-drafts"))
    if skip_drafts is not None:
        config.review.skip_drafts = skip_drafts
    post_review = _as_bool(inputs.get("post-review-comments"))
    if post_review is not None:
        config.review.post_review_comments = post_review
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CacheConfig",
    "ConfigError",
    "JacquezConfig",
    "LLMConfig",
    "ReviewConfig",
    "apply_action_inputs",
    "load_config",
]
