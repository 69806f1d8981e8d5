"""
CMI Translator

Maps the loosely-typed CMI payload a SCORM runtime posts during a session
onto the canonical CMIData record, and derives the unified completion and
success statuses from either data model:

- SCORM 1.2 reports a single ``lesson_status``
- SCORM 2004 reports ``completion_status`` and ``success_status``

Nothing here raises on bad input. Unrecognized or malformed fields are
dropped so a tracking call with partial data is never rejected.
"""

import math
import re
from typing import Any, Mapping, Optional

from ..models.scorm import CMIData, CMIScore, CMITime, TrackingFields

SCALAR_FIELDS = (
    "student_id",
    "student_name",
    "lesson_location",
    "lesson_status",
    "entry",
    "exit",
    "suspend_data",
    "launch_data",
    "comments",
    "comments_from_lms",
    "completion_status",
    "success_status",
)

SCORE_FIELDS = ("raw", "min", "max", "scaled")
TIME_FIELDS = ("session_time", "total_time")

# signed 32-bit, the portable range of an INTEGER column
MAX_STORED_SECONDS = 2**31 - 1
MIN_STORED_SECONDS = -(2**31)

_LEADING_INT = re.compile(r"^\s*[+-]?\d+")
_LEADING_FLOAT = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _present(value: Any) -> bool:
    return value is not None and value != ""


def _scalar(value: Any) -> Optional[str]:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return None
    return value if isinstance(value, str) else str(value)


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _nested_or_flat(data: Mapping[str, Any], group: str, key: str, flat_key: str) -> Any:
    nested = data.get(group)
    if isinstance(nested, Mapping) and _present(nested.get(key)):
        return nested[key]
    return data.get(flat_key)


def parse_cmi(raw: Any) -> CMIData:
    """
    Build a CMIData record from a raw tracking payload

    Args:
        raw: Payload as posted by the runtime; any shape is accepted

    Returns:
        CMIData holding only the fields that were present. ``score`` and
        ``time`` read the nested form first and fall back to the flat
        ``score_raw`` / ``session_time`` style keys.
    """
    if not isinstance(raw, Mapping):
        return CMIData()

    fields: dict = {}
    for name in SCALAR_FIELDS:
        if _present(raw.get(name)):
            value = _scalar(raw[name])
            if value is not None:
                fields[name] = value

    score = {
        key: _number(_nested_or_flat(raw, "score", key, f"score_{key}"))
        for key in SCORE_FIELDS
    }
    if isinstance(raw.get("score"), Mapping) or any(v is not None for v in score.values()):
        fields["score"] = CMIScore(**score)

    time = {}
    for key in TIME_FIELDS:
        value = _nested_or_flat(raw, "time", key, key)
        time[key] = _scalar(value) if _present(value) else None
    if isinstance(raw.get("time"), Mapping) or any(v is not None for v in time.values()):
        fields["time"] = CMITime(**time)

    for name in ("interactions", "objectives"):
        if isinstance(raw.get(name), list):
            fields[name] = raw[name]

    return CMIData(**fields)


def extract_completion_status(cmi: CMIData) -> Optional[str]:
    """Unified completion status; ``failed`` carries no completion signal."""
    if cmi.completion_status:
        return cmi.completion_status

    status = cmi.lesson_status
    if status in ("passed", "completed"):
        return "completed"
    if status in ("incomplete", "browsed"):
        return "incomplete"
    if status == "not attempted":
        return "not attempted"
    return None


def extract_success_status(cmi: CMIData) -> Optional[str]:
    if cmi.success_status:
        return cmi.success_status

    if cmi.lesson_status == "passed":
        return "passed"
    if cmi.lesson_status == "failed":
        return "failed"
    return None


def _leading(pattern: re.Pattern, text: str, cast) -> float:
    match = pattern.match(text)
    if not match:
        return 0
    try:
        value = cast(match.group(0))
    except ValueError:
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return value


def parse_duration_to_seconds(text: Optional[str]) -> int:
    """
    Convert an ``HH:MM:SS[.frac]`` duration to whole seconds.

    Each field is read on its own and counts as 0 when unparseable, so
    "aa:02:03" is 123. Any other number of fields gives 0. SCORM 2004
    ISO-8601 durations (``PT1H2M3S``) are not understood and also give 0.
    """
    if not text or not isinstance(text, str):
        return 0

    parts = text.split(":")
    if len(parts) != 3:
        return 0

    hours = _leading(_LEADING_INT, parts[0], int)
    minutes = _leading(_LEADING_INT, parts[1], int)
    seconds = _leading(_LEADING_FLOAT, parts[2], float)

    return hours * 3600 + minutes * 60 + math.floor(seconds)


def _column_seconds(text: Optional[str]) -> Optional[int]:
    """Duration for an INTEGER column; None when absent, clamped to range."""
    if not text:
        return None
    return max(MIN_STORED_SECONDS, min(MAX_STORED_SECONDS, parse_duration_to_seconds(text)))


def _decimal_string(value: float) -> str:
    return str(int(value)) if value.is_integer() else str(value)


def build_tracking_fields(cmi: CMIData) -> TrackingFields:
    """Project a CMI record onto the persisted tracking columns."""
    score = cmi.score or CMIScore()
    time = cmi.time or CMITime()

    return TrackingFields(
        completionStatus=extract_completion_status(cmi),
        successStatus=extract_success_status(cmi),
        scoreScaled=_decimal_string(score.scaled) if score.scaled is not None else None,
        scoreRaw=score.raw,
        scoreMin=score.min,
        scoreMax=score.max,
        sessionTime=_column_seconds(time.session_time),
        totalTime=_column_seconds(time.total_time),
        location=cmi.lesson_location,
        suspendData=cmi.suspend_data,
    )
