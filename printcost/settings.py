import logging
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_TIMEOUT_S = 60.0
DEFAULT_HEADER_LINES = 200


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    deep_scan_timeout_s: float = DEFAULT_TIMEOUT_S
    header_lines: int = DEFAULT_HEADER_LINES
    log_level: str = "INFO"


def load_settings(environ=None):
    """Read settings from the environment (``os.environ`` by default)."""
    env = os.environ if environ is None else environ
    return Settings(
        api_key=env.get("GEMINI_API_KEY") or env.get("API_KEY") or None,
        model=env.get("PRINTCOST_GEMINI_MODEL", DEFAULT_MODEL),
        deep_scan_timeout_s=float(env.get("PRINTCOST_DEEP_SCAN_TIMEOUT", DEFAULT_TIMEOUT_S)),
        header_lines=int(env.get("PRINTCOST_HEADER_LINES", DEFAULT_HEADER_LINES)),
        log_level=env.get("PRINTCOST_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(settings):
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
