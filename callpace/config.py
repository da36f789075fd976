"""Library defaults and logging setup.

Defaults can be overridden through environment variables:

- CALLPACE_DEFAULT_WAIT_MS: wait used by the decorator forms (default 100).
- CALLPACE_NEGATIVE_WAIT: "clamp" or "reject" for negative waits.
- CALLPACE_LOG_LEVEL: level used by setup_logging (default INFO).
"""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

NEGATIVE_WAIT_POLICIES = ("clamp", "reject")
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def _load_default_wait() -> float:
    raw = os.getenv("CALLPACE_DEFAULT_WAIT_MS")
    if raw:
        try:
            value = float(raw)
        except ValueError:
            return 100.0
        if value >= 0:
            return value
    return 100.0


def _load_negative_wait() -> str:
    raw = os.getenv("CALLPACE_NEGATIVE_WAIT", "clamp").strip().lower()
    return raw if raw in NEGATIVE_WAIT_POLICIES else "clamp"


@dataclass
class PaceConfig:
    """Process-wide defaults for throttled and debounced wrappers."""

    default_wait_ms: float = 100.0
    negative_wait: str = "clamp"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "PaceConfig":
        """Build a config from CALLPACE_* environment variables."""
        return cls(
            default_wait_ms=_load_default_wait(),
            negative_wait=_load_negative_wait(),
            log_level=os.getenv("CALLPACE_LOG_LEVEL", "INFO").upper(),
        )


default_config = PaceConfig.from_env()


def resolve_wait(wait_ms: float, config: PaceConfig | None = None) -> float:
    """Apply the negative-wait policy to a wait in milliseconds.

    Args:
        wait_ms: Requested wait.
        config: Config to consult (default: module default_config).

    Returns:
        The wait to use, never negative.

    Raises:
        ValueError: If wait_ms is negative and the policy is "reject".
    """
    cfg = config or default_config
    wait_ms = float(wait_ms)
    if wait_ms >= 0:
        return wait_ms
    if cfg.negative_wait == "reject":
        raise ValueError(f"wait_ms must be non-negative, got {wait_ms}")
    logger.warning("Negative wait %.1fms clamped to 0", wait_ms)
    return 0.0


def setup_logging(debug: bool = False, config: PaceConfig | None = None) -> None:
    """Configure root logging for scripts that use the library."""
    cfg = config or default_config
    level = logging.DEBUG if debug else getattr(logging, cfg.log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
    )
