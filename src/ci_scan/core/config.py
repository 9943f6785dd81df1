"""Configuration loading and validation."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


def _split_csv(v: Any) -> Any:
    if isinstance(v, str):
        return [item.strip() for item in v.split(",") if item.strip()]
    return v


class AutoApprovalPolicy(BaseModel):
    """Which changed files may be signed off automatically.

    Extensions are compared case-sensitively against the text after the
    last dot of the file's basename, without the dot.
    """
    enabled: bool = False
    allowed_extensions: FrozenSet[str] = Field(default_factory=frozenset)

    class Config:
        frozen = True

    @field_validator('allowed_extensions', mode='before')
    @classmethod
    def parse_extensions(cls, v: Any) -> Any:
        return _split_csv(v)


class LintConfig(BaseModel):
    """Syntax linter settings."""
    enabled: bool = True
    executable: str = "php"
    file_extensions: List[str] = Field(default_factory=lambda: ["php"])
    timeout: int = 60  # per file

    class Config:
        frozen = True

    @field_validator('file_extensions', mode='before')
    @classmethod
    def parse_extensions(cls, v: Any) -> Any:
        return _split_csv(v)


class StyleConfig(BaseModel):
    """Coding-standard checker settings."""
    enabled: bool = True
    executable: str = "phpcs"
    standard: str = "WordPress-VIP-Go"
    severity: Optional[int] = None  # phpcs --severity
    file_extensions: List[str] = Field(default_factory=lambda: ["php", "js", "twig"])
    timeout: int = 600

    class Config:
        frozen = True

    @field_validator('file_extensions', mode='before')
    @classmethod
    def parse_extensions(cls, v: Any) -> Any:
        return _split_csv(v)

    @field_validator('severity')
    @classmethod
    def validate_severity(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and not 1 <= v <= 10:
            raise ValueError(f"severity must be between 1 and 10, got {v}")
        return v


class GitHubConfig(BaseModel):
    """GitHub repository access."""
    token: Optional[str] = None
    owner: Optional[str] = None
    repo: Optional[str] = None

    class Config:
        frozen = True

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


class ScanConfig(BaseSettings):
    """Immutable settings for a single commit scan."""
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    lint: LintConfig = Field(default_factory=LintConfig)
    style: StyleConfig = Field(default_factory=StyleConfig)
    autoapprove: AutoApprovalPolicy = Field(default_factory=AutoApprovalPolicy)

    # No writes to GitHub when set
    dry_run: bool = False
    # Run analyzers concurrently
    parallel: bool = False
    local_git_repo: Optional[Path] = None
    # Explicit PR numbers; discovered from GitHub when empty
    pull_requests: List[int] = Field(default_factory=list)
    output: Optional[Path] = None
    log_level: str = "INFO"
    log_dir: Optional[Path] = None
    log_json: bool = False

    class Config:
        env_prefix = "CI_SCAN_"
        env_nested_delimiter = "__"
        env_file = ".env"
        extra = "ignore"
        frozen = True

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"log_level must be a standard logging level, got '{v}'")
        return level

    @field_validator('pull_requests')
    @classmethod
    def validate_pull_requests(cls, v: List[int]) -> List[int]:
        for number in v:
            if number < 1:
                raise ValueError(f"pull request numbers must be positive, got {number}")
        return v


# Module-level mtime-based config cache: path -> (raw_data, file_mtime)
_config_cache: Dict[str, tuple] = {}


def _get_cached_or_load(resolved_path: Path, loader):
    """Return cached data if file mtime unchanged, else reload."""
    key = str(resolved_path)
    try:
        current_mtime = resolved_path.stat().st_mtime
    except FileNotFoundError:
        _config_cache.pop(key, None)
        return None

    cached = _config_cache.get(key)
    if cached is not None:
        cached_result, cached_mtime = cached
        if cached_mtime == current_mtime:
            return cached_result

    result = loader(resolved_path)
    _config_cache[key] = (result, current_mtime)
    return result


def _load_data_from_file(config_path: Path) -> Dict[str, Any]:
    """Internal loader for raw config data (no caching)."""
    with open(config_path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping at the top level")
    return _expand_env_vars(data)


def clear_config_cache() -> None:
    """Clear the module-level config cache. Useful for tests."""
    _config_cache.clear()


def load_config(
    config_path: Optional[Path] = Path("ci-scan.yaml"),
    overrides: Optional[Dict[str, Any]] = None,
) -> ScanConfig:
    """Load scan configuration from YAML, then apply overrides.

    Overrides (typically CLI flags) are merged over the file values; nested
    sections are merged key by key. A missing file falls back to defaults.

    Raises:
        pydantic.ValidationError: If the merged values are invalid
    """
    data: Dict[str, Any] = {}
    if config_path is not None:
        if config_path.exists():
            loaded = _get_cached_or_load(config_path.resolve(), _load_data_from_file)
            data = dict(loaded or {})
        else:
            logger.debug(f"Config file not found: {config_path}. Using default configuration.")

    return ScanConfig(**_deep_merge(data, overrides or {}))


def _deep_merge(base: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _expand_env_vars(data: Any, _path: str = "") -> Any:
    """Recursively expand ``${VAR}`` references in config data.

    Args:
        data: Config data to process
        _path: Internal tracking for error messages (e.g., "github.token")
    """
    if isinstance(data, dict):
        return {k: _expand_env_vars(v, f"{_path}.{k}" if _path else k) for k, v in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item, f"{_path}[{i}]") for i, item in enumerate(data)]
    elif isinstance(data, str) and data.startswith("${") and data.endswith("}"):
        env_var = data[2:-1]
        value = os.environ.get(env_var)
        if value is None:
            logger.warning(
                f"Environment variable '{env_var}' not set (referenced at config path: {_path or 'root'}). "
                f"The literal string '{data}' will be used, which may cause errors."
            )
            return data
        return value
    return data
