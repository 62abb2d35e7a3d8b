# autograder/services/banding.py
"""
Raw score -> band conversion.

Two conversions are available, selected by ``settings.BAND_CONVERSION``:

- ``half_raw`` (default): ``band = raw_score / 2``. This is the behaviour
  existing grades were produced with and is kept as the contract; it is not an
  official IELTS conversion.
- ``ielts_table``: the published-style lookup tables for a 40-question test
  (listening, academic reading, general training reading).
"""
import math
from typing import Optional

from autograder.core.config import settings
from autograder.core.exceptions import ConfigurationError

# (min_raw, max_raw, band), inclusive ranges
LISTENING_BANDS = [
    (39, 40, 9.0),
    (37, 38, 8.5),
    (35, 36, 8.0),
    (32, 34, 7.5),
    (30, 31, 7.0),
    (26, 29, 6.5),
    (23, 25, 6.0),
    (18, 22, 5.5),
    (16, 17, 5.0),
    (13, 15, 4.5),
    (11, 12, 4.0),
    (8, 10, 3.5),
    (6, 7, 3.0),
    (4, 5, 2.5),
    (0, 3, 0.0),
]

READING_ACADEMIC_BANDS = [
    (39, 40, 9.0),
    (37, 38, 8.5),
    (35, 36, 8.0),
    (33, 34, 7.5),
    (30, 32, 7.0),
    (27, 29, 6.5),
    (23, 26, 6.0),
    (19, 22, 5.5),
    (15, 18, 5.0),
    (13, 14, 4.5),
    (10, 12, 4.0),
    (8, 9, 3.5),
    (6, 7, 3.0),
    (4, 5, 2.5),
    (0, 3, 0.0),
]

READING_GENERAL_BANDS = [
    (40, 40, 9.0),
    (39, 39, 8.5),
    (37, 38, 8.0),
    (36, 36, 7.5),
    (34, 35, 7.0),
    (32, 33, 6.5),
    (30, 31, 6.0),
    (27, 29, 5.5),
    (23, 26, 5.0),
    (19, 22, 4.5),
    (15, 18, 4.0),
    (12, 14, 3.5),
    (9, 11, 3.0),
    (6, 8, 2.5),
    (0, 5, 0.0),
]

MAX_RAW_SCORE = 40


def _clamp_raw_score(raw_score: float) -> int:
    if not math.isfinite(raw_score):
        return 0
    return min(MAX_RAW_SCORE, max(0, math.floor(raw_score)))


def _table_band(assignment_type: str, raw_score: float, reading_module: str) -> float:
    if assignment_type == "listening":
        table = LISTENING_BANDS
    elif reading_module == "general":
        table = READING_GENERAL_BANDS
    else:
        table = READING_ACADEMIC_BANDS

    normalized = _clamp_raw_score(raw_score)
    for low, high, band in table:
        if low <= normalized <= high:
            return band
    return 0.0


def get_band_for_raw_score(
    assignment_type: str,
    raw_score: float,
    *,
    conversion: Optional[str] = None,
    reading_module: Optional[str] = None,
) -> float:
    conversion = conversion or settings.BAND_CONVERSION
    if conversion == "half_raw":
        return raw_score / 2
    if conversion == "ielts_table":
        return _table_band(
            assignment_type, raw_score, reading_module or settings.READING_MODULE
        )
    raise ConfigurationError(f"unknown band conversion {conversion!r}")
