import logging
import math
from dataclasses import dataclass, replace
from numbers import Real
from typing import Any, List, Optional, Tuple

_LOG = logging.getLogger("virtscroll.core")

DEFAULT_KEEPS = 30
DEFAULT_ESTIMATE_SIZE = 50.0

PARAM_NAMES = ("keeps", "buffer", "estimate_size", "slot_header_size", "slot_footer_size", "unique_ids")


@dataclass
class VirtualConfig:
    """
    Tuning knobs of a virtual list.

    - keeps: number of items kept mounted (> 0)
    - buffer: overscan items per edge, None means a third of keeps
    - estimate_size: size assumed for items that were never measured (> 0)
    - slot_header_size / slot_footer_size: fixed regions before/after the list (>= 0)
    """

    keeps: int = DEFAULT_KEEPS
    buffer: Optional[int] = None
    estimate_size: float = DEFAULT_ESTIMATE_SIZE
    slot_header_size: float = 0.0
    slot_footer_size: float = 0.0

    @property
    def span(self) -> int:
        """Number of items the window holds when enough items exist."""
        return self.keeps + 2 * (self.buffer or 0)


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def normalize_param(key: str, value: Any, config: Optional[VirtualConfig] = None) -> Tuple[Any, Optional[str]]:
    """Return (safe_value, issue) for one config field. Unknown keys raise KeyError."""
    if key == "keeps":
        if not _is_number(value) or value < 1:
            return 1, f"keeps must be a positive integer, got {value!r}; using 1"
        return int(value), None

    if key == "buffer":
        if value is None:
            keeps = config.keeps if config is not None else DEFAULT_KEEPS
            return keeps // 3, None
        if not _is_number(value) or value < 0:
            return 0, f"buffer must be >= 0, got {value!r}; using 0"
        return int(value), None

    if key == "estimate_size":
        if not _is_number(value) or value <= 0:
            return DEFAULT_ESTIMATE_SIZE, f"estimate_size must be > 0, got {value!r}; using {DEFAULT_ESTIMATE_SIZE}"
        return float(value), None

    if key in ("slot_header_size", "slot_footer_size"):
        if not _is_number(value) or value < 0:
            return 0.0, f"{key} must be >= 0, got {value!r}; using 0"
        return float(value), None

    if key == "unique_ids":
        return value, None

    raise KeyError(f"Unknown parameter {key!r}. Use one of {', '.join(PARAM_NAMES)}.")


def normalize_config(config: Optional[VirtualConfig] = None) -> Tuple[VirtualConfig, List[str]]:
    """Validate every field. Bad values are clamped, never raised; issues describe what changed."""
    config = config if config is not None else VirtualConfig()
    issues: List[str] = []

    keeps, issue = normalize_param("keeps", config.keeps)
    if issue:
        issues.append(issue)
    normalized = replace(config, keeps=keeps)

    for key in ("buffer", "estimate_size", "slot_header_size", "slot_footer_size"):
        value, issue = normalize_param(key, getattr(config, key), normalized)
        if issue:
            issues.append(issue)
        normalized = replace(normalized, **{key: value})

    for issue in issues:
        _LOG.warning("Config: %s", issue)
    return normalized, issues
