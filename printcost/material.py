import math
from dataclasses import dataclass

# PLA
FILAMENT_DENSITY_G_CM3 = 1.24
DEFAULT_FILAMENT_DIAMETER_MM = 1.75


@dataclass
class NormalizedResult:
    weight_g: float
    hours: int
    minutes: int
    seconds: int


def weight_from_length(length_mm, diameter_mm=DEFAULT_FILAMENT_DIAMETER_MM,
                       density=FILAMENT_DENSITY_G_CM3):
    """Calculate filament weight in grams from an extruded length."""
    # Volume = pi * r^2 * length
    radius_mm = diameter_mm / 2.0
    volume_mm3 = math.pi * radius_mm ** 2 * length_mm
    volume_cm3 = volume_mm3 / 1000.0
    return volume_cm3 * density


def resolve_weight(extraction, previous_weight, diameter_mm):
    if extraction.filament_weight_g is not None and extraction.filament_weight_g > 0:
        return extraction.filament_weight_g
    if extraction.filament_length_mm is not None and extraction.filament_length_mm > 0:
        return weight_from_length(extraction.filament_length_mm, diameter_mm)
    return previous_weight


def split_duration(total_seconds):
    """Split seconds into (hours, minutes, seconds); ``None`` gives zeros."""
    if total_seconds is None:
        return 0, 0, 0
    total_seconds = int(total_seconds)
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    return hours, minutes, seconds


def normalize(extraction, previous_weight, diameter_mm):
    hours, minutes, seconds = split_duration(extraction.print_time_seconds)
    return NormalizedResult(
        weight_g=resolve_weight(extraction, previous_weight, diameter_mm),
        hours=hours,
        minutes=minutes,
        seconds=seconds,
    )
