"""Two-step G-code analysis: local comment parse, then an optional AI deep scan.

State machine::

    idle -> parsing -> succeeded
                    -> deep_scanning -> succeeded | failed
                    -> failed

Only one analysis is expected in flight at a time; the GUI disables its
analyze button until the worker reports a terminal state.
"""

import enum
import logging
import os
from dataclasses import dataclass, replace
from typing import Optional

from printcost.errors import (
    AnalysisError,
    DeepScanError,
    ExtractionEmpty,
    InputRejected,
    RemoteServiceFailure,
    UnexpectedFailure,
)
from printcost.gcode_parser import GcodeExtraction, parse_gcode
from printcost.material import NormalizedResult, normalize

logger = logging.getLogger(__name__)

GCODE_EXTENSION = ".gcode"


class AnalysisState(enum.Enum):
    IDLE = "idle"
    PARSING = "parsing"
    DEEP_SCANNING = "deep_scanning"
    FAILED = "failed"
    SUCCEEDED = "succeeded"

    @property
    def is_terminal(self):
        return self in (AnalysisState.FAILED, AnalysisState.SUCCEEDED)


class AnalysisMethod(enum.Enum):
    LOCAL = "local"
    AI = "ai"


@dataclass
class AnalysisOutcome:
    state: AnalysisState = AnalysisState.IDLE
    method: Optional[AnalysisMethod] = None
    extraction: Optional[GcodeExtraction] = None
    result: Optional[NormalizedResult] = None
    error: Optional[AnalysisError] = None


def is_gcode_file(path):
    return os.path.basename(path).lower().endswith(GCODE_EXTENSION)


def job_name(path):
    name = os.path.basename(path)
    if name.lower().endswith(GCODE_EXTENSION):
        name = name[:-len(GCODE_EXTENSION)]
    return name


def needs_deep_scan(extraction):
    """Escalate whenever print time or filament weight is missing."""
    return extraction.print_time_seconds is None or extraction.filament_weight_g is None


def merge_extractions(local, remote):
    """Remote values override local ones field by field; absent remote values keep local."""
    return GcodeExtraction(
        print_time_seconds=(
            remote.print_time_seconds if remote.print_time_seconds is not None
            else local.print_time_seconds
        ),
        filament_weight_g=(
            remote.filament_weight_g if remote.filament_weight_g is not None
            else local.filament_weight_g
        ),
        filament_length_mm=(
            remote.filament_length_mm if remote.filament_length_mm is not None
            else local.filament_length_mm
        ),
    )


def read_gcode(path):
    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        return f.read()


class GcodeAnalyzer:
    """Runs one analysis per call and applies the result to ``cost_input``.

    ``deep_scanner`` is any callable taking the G-code text and returning a
    ``GcodeExtraction``; it must raise ``DeepScanError`` on failure.
    ``on_status`` is called with each ``AnalysisState`` the analysis enters.
    """

    def __init__(self, cost_input, deep_scanner, on_status=None):
        self.cost_input = cost_input
        self.deep_scanner = deep_scanner
        self.on_status = on_status
        self.outcome = AnalysisOutcome()

    @property
    def state(self):
        return self.outcome.state

    def _enter(self, state, **changes):
        self.outcome = replace(self.outcome, state=state, **changes)
        logger.info("G-code analysis state: %s", state.value)
        if self.on_status is not None:
            self.on_status(state)

    def _fail(self, error):
        logger.error("G-code analysis failed: %s", error)
        self._enter(AnalysisState.FAILED, error=error)
        return self.outcome

    def analyze(self, path):
        if not is_gcode_file(path):
            raise InputRejected()

        self.outcome = AnalysisOutcome()
        self._enter(AnalysisState.PARSING)

        try:
            gcode = read_gcode(path)
            extraction = parse_gcode(gcode)
        except Exception:
            logger.exception("Failed to read or parse %s", path)
            return self._fail(UnexpectedFailure())

        try:
            return self._finish(path, gcode, extraction)
        except Exception:
            logger.exception("G-code analysis of %s failed unexpectedly", path)
            return self._fail(UnexpectedFailure())

    def _finish(self, path, gcode, extraction):
        method = AnalysisMethod.LOCAL
        if needs_deep_scan(extraction):
            self._enter(AnalysisState.DEEP_SCANNING, extraction=extraction)
            try:
                remote = self.deep_scanner(gcode)
            except DeepScanError as e:
                return self._fail(RemoteServiceFailure(f"The AI deep scan failed: {e}"))
            extraction = merge_extractions(extraction, remote)
            method = AnalysisMethod.AI

        self.outcome = replace(self.outcome, method=method, extraction=extraction)
        if extraction.is_empty():
            return self._fail(ExtractionEmpty())

        result = normalize(
            extraction,
            previous_weight=self.cost_input.filament_weight,
            diameter_mm=self.cost_input.filament_diameter,
        )
        self.apply(path, result)
        self._enter(AnalysisState.SUCCEEDED, result=result)
        return self.outcome

    def apply(self, path, result):
        data = self.cost_input
        data.print_name = job_name(path)
        data.filament_weight = result.weight_g
        data.print_time_hours = result.hours
        data.print_time_minutes = result.minutes
        data.print_time_seconds = result.seconds
