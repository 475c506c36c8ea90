"""
Runtime settings for the scraper

Defaults live on the dataclass, ``config/settings.yaml`` overrides them,
``SCRAPER_*`` environment variables override the file and keyword
arguments passed to :func:`load_settings` win over everything.
"""
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "settings.yaml"
ENV_PREFIX = "SCRAPER_"

# Hard cap for a single navigation attempt
MAX_NAVIGATION_TIMEOUT_MS = 120000

@dataclass(frozen=True)
class ScraperSettings:
    """All tunables of one scraper instance"""

    headless: bool = True
    log_level: str = "INFO"

    # Site
    site_domain: str = "polymarket.com"
    canonical_origin: str = "https://polymarket.com"
    record_path_marker: str = "/event/"
    positions_tab_indicator: str = "tab=positions"
    style_markers: Tuple[str, ...] = ("flex-1", "cursor-pointer")
    min_styled_anchors: int = 5

    # Navigation
    navigation_timeout_ms: int = MAX_NAVIGATION_TIMEOUT_MS
    best_effort_settle_ms: int = 5000
    post_navigation_settle_ms: int = 3000
    anchor_poll_attempts: int = 5
    anchor_poll_interval_ms: int = 2000
    content_selector_timeout_ms: int = 10000

    # Scrolling
    scroll_step_px: int = 500
    scroll_delay_ms: int = 300
    scroll_load_wait_ms: int = 500
    max_scrolls: int = 50
    stable_threshold: int = 3
    bottom_settle_ms: int = 1000
    top_settle_ms: int = 500
    render_settle_ms: int = 2000

    # Invocation
    overall_timeout_s: float = 300.0
    max_concurrency: int = 3
    max_profiles: int = 3

    def __post_init__(self):
        if self.navigation_timeout_ms > MAX_NAVIGATION_TIMEOUT_MS:
            logger.warning(
                f"navigation_timeout_ms={self.navigation_timeout_ms} exceeds the "
                f"{MAX_NAVIGATION_TIMEOUT_MS}ms cap, clamping"
            )
            object.__setattr__(self, 'navigation_timeout_ms', MAX_NAVIGATION_TIMEOUT_MS)

        for name in ('navigation_timeout_ms', 'max_scrolls', 'stable_threshold',
                     'max_concurrency', 'max_profiles', 'scroll_step_px'):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")

        if self.overall_timeout_s <= 0:
            raise ValueError(f"overall_timeout_s must be positive, got {self.overall_timeout_s}")

        if not self.canonical_origin.startswith(('http://', 'https://')):
            raise ValueError(f"canonical_origin must be an absolute URL, got {self.canonical_origin!r}")

def _coerce(value: Any, default: Any) -> Any:
    """Convert a raw YAML/env value to the type of the field default"""
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in ('1', 'true', 'yes', 'on')
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    if isinstance(default, tuple):
        if isinstance(value, (list, tuple)):
            return tuple(str(v) for v in value)
        return tuple(part.strip() for part in str(value).split(',') if part.strip())
    return str(value)

def _read_yaml(path: Path) -> Dict[str, Any]:
    with open(path, 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f) or {}
    return config.get('settings', {}) or {}

def _read_env() -> Dict[str, str]:
    values = {}
    for f in fields(ScraperSettings):
        raw = os.environ.get(ENV_PREFIX + f.name.upper())
        if raw is not None:
            values[f.name] = raw
    return values

def load_settings(path: Optional[str] = None, **overrides) -> ScraperSettings:
    """
    Build settings from the YAML file, the environment and keyword overrides

    Args:
        path: YAML file to read; defaults to the bundled settings.yaml.
            A missing explicit path is an error, a missing default is not.
        overrides: field values that win over file and environment

    Returns:
        ScraperSettings
    """
    load_dotenv()

    defaults = ScraperSettings()
    known = {f.name for f in fields(ScraperSettings)}
    merged: Dict[str, Any] = {}

    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if config_path.exists():
        merged.update(_read_yaml(config_path))
        logger.debug(f"Loaded settings from {config_path}")
    elif path:
        raise FileNotFoundError(f"Settings file not found: {config_path}")

    merged.update(_read_env())
    merged.update({k: v for k, v in overrides.items() if v is not None})

    unknown = set(merged) - known
    if unknown:
        logger.warning(f"Ignoring unknown settings: {sorted(unknown)}")

    values = {
        name: _coerce(value, getattr(defaults, name))
        for name, value in merged.items()
        if name in known
    }
    return replace(defaults, **values)
