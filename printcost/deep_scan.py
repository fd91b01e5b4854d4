"""AI deep scan of G-code headers using Google Gemini.

Only used when the local comment parser comes up short. The request carries
the first lines of the file and asks for a JSON object constrained by
``RESPONSE_SCHEMA``.
"""

import json
import logging
import math

from google import genai
from google.genai import types

from printcost.errors import DeepScanError
from printcost.gcode_parser import GcodeExtraction
from printcost.settings import load_settings

logger = logging.getLogger(__name__)

RESPONSE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "printTimeSeconds": types.Schema(
            type=types.Type.NUMBER,
            description="The total print time in seconds.",
            nullable=True,
        ),
        "filamentWeightG": types.Schema(
            type=types.Type.NUMBER,
            description="The weight of the filament used in grams.",
            nullable=True,
        ),
        "filamentLengthMm": types.Schema(
            type=types.Type.NUMBER,
            description="The length of the filament used in millimeters.",
            nullable=True,
        ),
    },
)

PROMPT_TEMPLATE = """
Analyze the following 3D printer G-code file header and extract values from its comments.

G-code Header:
---
{header}
---

Return a JSON object with:
1. printTimeSeconds: the total estimated print time in seconds. Look for comments such as
   "print time" or "estimated printing time" and handle formats like "1d 12h 30m 5s".
2. filamentWeightG: the total filament weight in grams. Look for comments such as
   "filament weight" or "filament used [g]".
3. filamentLengthMm: the total filament length in millimeters. Look for "filament used" or
   "filament length" and convert meters to millimeters.

Use null for any value that is not present in the header.
"""


def gcode_header(gcode, max_lines):
    return "\n".join(gcode.split("\n")[:max_lines])


def _non_negative(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def extraction_from_response(payload):
    """Build a GcodeExtraction from the decoded JSON response."""
    if not isinstance(payload, dict):
        raise DeepScanError("AI response is not a JSON object")

    seconds = _non_negative(payload.get("printTimeSeconds"))
    weight = _non_negative(payload.get("filamentWeightG"))
    length = _non_negative(payload.get("filamentLengthMm"))
    return GcodeExtraction(
        print_time_seconds=int(round(seconds)) if seconds is not None else None,
        filament_weight_g=float(weight) if weight is not None else None,
        filament_length_mm=float(length) if length is not None else None,
    )


class DeepScanner:
    """Callable that sends a G-code header to Gemini and parses the answer."""

    def __init__(self, settings=None, client=None):
        self.settings = settings or load_settings()
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not self.settings.api_key:
                raise DeepScanError("No Gemini API key configured (set GEMINI_API_KEY)")
            self._client = genai.Client(
                api_key=self.settings.api_key,
                http_options=types.HttpOptions(
                    timeout=int(self.settings.deep_scan_timeout_s * 1000)
                ),
            )
        return self._client

    def __call__(self, gcode):
        prompt = PROMPT_TEMPLATE.format(
            header=gcode_header(gcode, self.settings.header_lines)
        )
        logger.info("Requesting G-code analysis from %s", self.settings.model)

        try:
            response = self.client.models.generate_content(
                model=self.settings.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=RESPONSE_SCHEMA,
                    temperature=0.1,
                ),
            )
            text = (response.text or "").strip()
            logger.debug("Received AI analysis: %s", text)
            payload = json.loads(text)
        except DeepScanError:
            raise
        except Exception as e:
            logger.error("Gemini request for G-code analysis failed: %s", e)
            raise DeepScanError(f"The AI service failed to analyze the G-code file: {e}") from e

        return extraction_from_response(payload)
