from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Literal

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (compatible; UsabilityAgent/1.0; +https://validator.w3.org/services)"
)
PAGESPEED_ENDPOINT = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"
NU_VALIDATOR_URL = "https://validator.w3.org/nu/"


@dataclass(frozen=True)
class Settings:
    pagespeed_api_key: str | None = None
    pagespeed_endpoint: str = PAGESPEED_ENDPOINT
    pagespeed_strategy: str = "mobile"
    html_validator: Literal["nu", "local"] = "nu"
    nu_validator_url: str = NU_VALIDATOR_URL
    collector_timeout_ms: int = 30000
    user_agent: str = DEFAULT_USER_AGENT
    cors_origins: tuple[str, ...] = ("http://localhost:3000",)
    log_level: str = "info"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    try:
        return max(1000, int(raw)) if raw else default
    except ValueError:
        return default


def _cors_origins() -> tuple[str, ...]:
    raw = os.getenv("USABILITY_CORS_ORIGINS", "").strip()
    if not raw:
        return ("http://localhost:3000",)
    return tuple(o.strip() for o in raw.split(",") if o.strip())


def load_settings() -> Settings:
    """Read settings from the environment (call after load_dotenv)."""
    validator = os.getenv("HTML_VALIDATOR", "nu").strip().lower()
    return Settings(
        pagespeed_api_key=os.getenv("PAGESPEED_API_KEY") or None,
        pagespeed_endpoint=os.getenv("PAGESPEED_ENDPOINT", PAGESPEED_ENDPOINT),
        pagespeed_strategy=os.getenv("PAGESPEED_STRATEGY", "mobile"),
        html_validator="local" if validator == "local" else "nu",
        nu_validator_url=os.getenv("NU_VALIDATOR_URL", NU_VALIDATOR_URL),
        collector_timeout_ms=_env_int("COLLECTOR_TIMEOUT_MS", 30000),
        user_agent=os.getenv("USABILITY_USER_AGENT", DEFAULT_USER_AGENT),
        cors_origins=_cors_origins(),
        log_level=os.getenv("LOG_LEVEL", "info"),
    )


def configure_logging(level: str = "info") -> logging.Logger:
    lvl = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(lvl, int):
        lvl = logging.INFO

    logger = logging.getLogger("usability_agent")
    logger.setLevel(lvl)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        logger.addHandler(handler)
    return logger
