"""YAML policy file + env var config loading with pydantic-settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger()

_DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def _load_yaml_policy(path: Path) -> dict[str, Any]:
    """Load a YAML policy file, returning empty dict when it does not exist."""
    if not path.exists():
        logger.warning("policy_file_not_found", path=str(path))
        return {}
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"policy file {path} must contain a mapping")
    return data


class CSPSettings(BaseSettings):
    """Policy configuration from env vars; directive sources come from ``policy_file``."""

    model_config = SettingsConfigDict(
        env_prefix="CSP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Constructor seeds
    base_uri: str = "none"
    default_source: str = "self"
    block_less_secure: bool = True
    upgrade_insecure_requests: bool = False

    # Reporting
    report_uri: str = ""
    report_only: bool = False
    report_dir: str = ""  # empty disables report storage
    report_filename_format: str = "csp-report-%Y%m%d.json"

    policy_file: str = str(_DEFAULTS_PATH)

    log_level: str = "info"
    log_json: bool = True


_settings: CSPSettings | None = None

# Cache loaded policy file
_policy: dict[str, Any] | None = None


def get_settings() -> CSPSettings:
    """Get or create the singleton settings instance."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def load_settings() -> CSPSettings:
    """Load settings from env vars (env vars override model defaults)."""
    global _settings
    _settings = CSPSettings()
    logger.info("config_loaded", policy_file=_settings.policy_file, report_only=_settings.report_only)
    return _settings


def get_policy_file(settings: CSPSettings | None = None) -> dict[str, Any]:
    """Return the parsed policy file, caching after first load."""
    global _policy
    if _policy is None:
        settings = settings or get_settings()
        _policy = _load_yaml_policy(Path(settings.policy_file))
    return _policy


def reset_policy_cache() -> None:
    """Reset the policy file cache (for testing and reloads)."""
    global _policy
    _policy = None
