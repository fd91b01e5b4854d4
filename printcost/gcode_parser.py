"""Local parser for slicer metadata in G-code comments.

Slicers disagree on how they report print time and filament usage, so each
quantity is matched against an ordered list of pattern descriptors. The first
descriptor that yields a value on a comment line wins for that quantity.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class GcodeExtraction:
    print_time_seconds: Optional[int] = None
    filament_weight_g: Optional[float] = None
    filament_length_mm: Optional[float] = None

    def is_empty(self):
        return (
            self.print_time_seconds is None
            and self.filament_weight_g is None
            and self.filament_length_mm is None
        )


@dataclass(frozen=True)
class Pattern:
    name: str
    regex: re.Pattern
    extract: Callable[[re.Match], Optional[float]]
    # Time totals of zero are treated as "no match" unless this is set
    accept_zero: bool = True

    def value_from(self, line):
        match = self.regex.search(line)
        if not match:
            return None
        value = self.extract(match)
        if value is None or (value == 0 and not self.accept_zero):
            return None
        return value


def _int(group):
    return int(group) if group else 0


def _dhms(match):
    d, h, m, s = (_int(g) for g in match.groups())
    return d * 86400 + h * 3600 + m * 60 + s


def _hms(match):
    h, m, s = (_int(g) for g in match.groups())
    return h * 3600 + m * 60 + s


def _grams(match):
    return float(match.group(1))


def _length_mm(value, unit):
    length = float(value)
    return length * 1000 if unit.lower() == "m" else length


WEIGHT_PATTERNS = [
    Pattern(
        "filament_weight",
        re.compile(
            r"(?:total |used )?filament (?:used|weight|cost)\s*(?:\(g\)|\[g\])?\s*[:=]\s*"
            r"(\d+(?:\.\d*)?)(?![\d.])\s*g?(?!\s*mm?\b)",
            re.IGNORECASE,
        ),
        _grams,
    ),
    Pattern(
        "filament_used_g",
        re.compile(r"filament_used_g\s*=\s*(\d+\.?\d*)", re.IGNORECASE),
        _grams,
    ),
]

TIME_PATTERNS = [
    # Bambu Studio, unambiguous so it goes first
    Pattern(
        "bambu_total_estimated",
        re.compile(
            r"total estimated time:\s*(?:(\d+)\s*h)?\s*(?:(\d+)\s*m)?\s*(?:(\d+)\s*s)?",
            re.IGNORECASE,
        ),
        _hms,
        accept_zero=False,
    ),
    Pattern(
        "dhms_with_label",
        re.compile(
            r"(?:build|print|estimated printing) time(?:.+)[:=]\s*"
            r"(?:(\d+)\s*d)?\s*(?:(\d+)\s*h)?\s*(?:(\d+)\s*m)?\s*(?:(\d+)\s*s)?",
            re.IGNORECASE,
        ),
        _dhms,
        accept_zero=False,
    ),
    Pattern(
        "dhms",
        re.compile(
            r"(?:build|print|estimated printing) time\s*[:=]?\s*"
            r"(?:(\d+)d)?\s*(?:(\d+)h)?\s*(?:(\d+)m)?\s*(?:(\d+)s)?",
            re.IGNORECASE,
        ),
        _dhms,
        accept_zero=False,
    ),
    Pattern(
        "hh_mm_ss",
        re.compile(r"estimated print time\s*:\s*(\d{2}):(\d{2}):(\d{2})", re.IGNORECASE),
        _hms,
    ),
    # Cura
    Pattern(
        "raw_seconds",
        re.compile(r"^;TIME:(\d+)", re.IGNORECASE),
        lambda match: int(match.group(1)),
    ),
]

LENGTH_PATTERNS = [
    Pattern(
        "filament_used_length",
        re.compile(r"filament used\s*[:=]\s*(\d+\.?\d*)\s*(mm|m)\b", re.IGNORECASE),
        lambda match: _length_mm(match.group(1), match.group(2)),
    ),
    Pattern(
        "filament_used_m",
        re.compile(r"filament_used_m\s*=\s*(\d+\.?\d*)", re.IGNORECASE),
        lambda match: _length_mm(match.group(1), "m"),
    ),
    # PrusaSlicer: "; filament used [mm] = 1234.5"
    Pattern(
        "filament_used_bracketed",
        re.compile(r"filament used\s*\[(mm|m)\]\s*[:=]\s*(\d+\.?\d*)", re.IGNORECASE),
        lambda match: _length_mm(match.group(2), match.group(1)),
    ),
]

FIELDS = (
    ("filament_weight_g", WEIGHT_PATTERNS),
    ("print_time_seconds", TIME_PATTERNS),
    ("filament_length_mm", LENGTH_PATTERNS),
)


def _first_value(patterns, line):
    for pattern in patterns:
        value = pattern.value_from(line)
        if value is not None:
            return pattern, value
    return None, None


def parse_gcode(gcode):
    """Extract print time, filament weight and filament length from comments."""
    result = GcodeExtraction()

    for line in gcode.splitlines():
        if not line.startswith(";"):
            continue

        for field_name, patterns in FIELDS:
            if getattr(result, field_name) is not None:
                continue
            pattern, value = _first_value(patterns, line)
            if pattern is None:
                continue
            setattr(result, field_name, value)
            logger.debug(
                "Found %s=%s with pattern %r on line %r",
                field_name, value, pattern.name, line.strip(),
            )

    if result.filament_weight_g is None:
        logger.warning("Local parser could not find filament weight comment.")
    if result.print_time_seconds is None:
        logger.warning("Local parser could not find print time comment.")

    return result
