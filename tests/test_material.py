import math

import pytest

from printcost.gcode_parser import GcodeExtraction
from printcost.material import (
    FILAMENT_DENSITY_G_CM3,
    normalize,
    resolve_weight,
    split_duration,
    weight_from_length,
)


def test_weight_from_length_worked_example():
    # 1 m of 1.75 mm filament is about 2.405 cm3
    volume_cm3 = math.pi * 0.875 ** 2 * 1000 / 1000
    assert volume_cm3 == pytest.approx(2.4053, abs=1e-4)
    assert weight_from_length(1000, 1.75) == pytest.approx(volume_cm3 * FILAMENT_DENSITY_G_CM3)
    assert weight_from_length(1000, 1.75) == pytest.approx(2.9826, abs=1e-4)


def test_weight_present_takes_precedence():
    extraction = GcodeExtraction(filament_weight_g=12.0, filament_length_mm=5000.0)
    assert resolve_weight(extraction, previous_weight=50, diameter_mm=1.75) == 12.0


def test_zero_weight_falls_back_to_length():
    extraction = GcodeExtraction(filament_weight_g=0.0, filament_length_mm=1000.0)
    assert resolve_weight(extraction, 50, 1.75) == pytest.approx(weight_from_length(1000, 1.75))


def test_length_uses_configured_diameter():
    extraction = GcodeExtraction(filament_length_mm=1000.0)
    assert resolve_weight(extraction, 50, 2.85) == pytest.approx(
        math.pi * 1.425 ** 2 * FILAMENT_DENSITY_G_CM3
    )


def test_nothing_found_keeps_previous_weight():
    assert resolve_weight(GcodeExtraction(print_time_seconds=10), 42.5, 1.75) == 42.5


@pytest.mark.parametrize("total, expected", [
    (7200, (2, 0, 0)),
    (3725, (1, 2, 5)),
    (59, (0, 0, 59)),
    (0, (0, 0, 0)),
    (None, (0, 0, 0)),
])
def test_split_duration(total, expected):
    assert split_duration(total) == expected


def test_normalize_combines_weight_and_time():
    result = normalize(GcodeExtraction(print_time_seconds=5400, filament_weight_g=3.5), 50, 1.75)
    assert (result.weight_g, result.hours, result.minutes, result.seconds) == (3.5, 1, 30, 0)
