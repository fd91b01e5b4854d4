"""Tests for the local G-code comment parser."""

import pytest

from printcost.gcode_parser import GcodeExtraction, parse_gcode


@pytest.mark.parametrize("line, expected", [
    ("; filament used [g] = 12.34", 12.34),
    ("; total filament used [g] = 8.5", 8.5),
    ("; total filament weight: 15.5g", 15.5),
    ("; Filament weight (g): 20", 20.0),
    ("; used filament cost = 3.2", 3.2),
    ("; filament cost = 0.25 money", 0.25),
    ("; filament_used_g = 7.25", 7.25),
])
def test_parse_weight_formats(line, expected):
    result = parse_gcode(f"{line}\nG28\n")
    assert result.filament_weight_g == pytest.approx(expected)


@pytest.mark.parametrize("line", [
    "; total estimated time: 1h 30m",
    "; estimated printing time (normal mode) = 1h 30m 0s",
    "; print time: 1h30m",
    "; estimated print time: 01:30:00",
    ";TIME:5400",
])
def test_time_shapes_agree(line):
    assert parse_gcode(line).print_time_seconds == 5400


def test_parse_days():
    result = parse_gcode("; estimated printing time (normal mode) = 1d 2h 3m 4s\n")
    assert result.print_time_seconds == 86400 + 2 * 3600 + 3 * 60 + 4


def test_bambu_total_time_wins_over_model_time():
    line = "; model printing time: 1h 2m 3s; total estimated time: 1h 10m 5s"
    assert parse_gcode(line).print_time_seconds == 3600 + 10 * 60 + 5


def test_zero_total_falls_through_to_later_line():
    gcode = "; total estimated time: 0h 0m 0s\n;TIME:600\n"
    assert parse_gcode(gcode).print_time_seconds == 600


def test_zero_total_falls_through_to_next_family_on_same_line():
    line = "; total estimated time: 0h 0m 0s; print time = 2h"
    assert parse_gcode(line).print_time_seconds == 7200


def test_weight_followed_by_length_unit_is_rejected():
    assert parse_gcode("; filament used = 3.5 mm").filament_weight_g is None


def test_zero_total_is_not_a_match():
    assert parse_gcode("; build time: 0h 0m 0s\n").print_time_seconds is None


@pytest.mark.parametrize("line", [";TIME:0", "; estimated print time: 00:00:00"])
def test_raw_seconds_and_clock_forms_accept_zero(line):
    assert parse_gcode(line).print_time_seconds == 0


@pytest.mark.parametrize("line, expected_mm", [
    ("; filament used = 12.5m", 12500.0),
    ("; filament used: 1234.5mm", 1234.5),
    ("; filament_used_m = 2.5", 2500.0),
    ("; filament used [mm] = 1500.25", 1500.25),
])
def test_parse_length_normalized_to_mm(line, expected_mm):
    assert parse_gcode(line).filament_length_mm == pytest.approx(expected_mm)


def test_cura_length_is_not_read_as_weight():
    result = parse_gcode(";FLAVOR:Marlin\n;TIME:3661\n;Filament used: 1.23456m\n")
    assert result.filament_weight_g is None
    assert result.filament_length_mm == pytest.approx(1234.56)
    assert result.print_time_seconds == 3661


def test_only_comment_lines_are_parsed():
    gcode = "G1 X10 ; filament used [g] = 5\n  ;TIME:100\nM104 S200\n"
    assert parse_gcode(gcode).is_empty()


def test_first_match_wins():
    gcode = "; filament used [g] = 10\n; filament used [g] = 99\n;TIME:60\n;TIME:120\n"
    result = parse_gcode(gcode)
    assert result.filament_weight_g == 10
    assert result.print_time_seconds == 60


def test_quantities_come_from_different_lines():
    gcode = "\n".join([
        "; generated by PrusaSlicer 2.7.1",
        "G28",
        "; filament used [mm] = 3021.55",
        "; filament used [cm3] = 7.27",
        "; total filament used [g] = 9.02",
        "; estimated printing time (normal mode) = 2h 5m 13s",
    ])
    result = parse_gcode(gcode)
    assert result == GcodeExtraction(
        print_time_seconds=2 * 3600 + 5 * 60 + 13,
        filament_weight_g=9.02,
        filament_length_mm=3021.55,
    )


def test_windows_line_endings():
    result = parse_gcode(";TIME:7200\r\n; filament used [g] = 4.5\r\n")
    assert result.print_time_seconds == 7200
    assert result.filament_weight_g == 4.5


def test_no_comments_gives_empty_extraction():
    result = parse_gcode("G28\nG1 X0 Y0\n")
    assert result == GcodeExtraction()
    assert result.is_empty()


def test_parse_is_idempotent():
    gcode = "; total estimated time: 2h 3m\n; filament used = 4.5m\n"
    assert parse_gcode(gcode) == parse_gcode(gcode)
