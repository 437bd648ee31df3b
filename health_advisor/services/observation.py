"""
Input normalization for stool observations.

Client payloads arrive duck-typed: colors carry either ``health_status`` or
``status``, history entries carry either ``type`` or ``bristolType``, and the
profile uses several spellings. Everything is normalized here, once, into the
frozen dataclasses below. Only the Bristol type is validated strictly; every
other field degrades to "absent" instead of raising.
"""

import math
from dataclasses import dataclass
from typing import Any, Optional

BRISTOL_TYPES = (1, 2, 3, 4, 5, 6, 7)


@dataclass(frozen=True)
class ColorReading:
    """One entry of a color-analysis summary."""

    color: str
    status: str = "Normal"
    percentage: float = 0.0
    description: str = ""


@dataclass(frozen=True)
class VolumeReading:
    volume_class: str
    volume_score: Optional[float] = None


@dataclass(frozen=True)
class UserProfile:
    """Free-form personalization context. Never validated."""

    age: Optional[str] = None
    gender: Optional[str] = None
    diet: Optional[str] = None
    exercise: Optional[str] = None
    conditions: Optional[str] = None
    allergies: Optional[str] = None


@dataclass(frozen=True)
class Observation:
    """Canonical internal form of one advice request."""

    bristol_type: int
    colors: tuple[ColorReading, ...] = ()
    volume: Optional[VolumeReading] = None
    user_profile: Optional[UserProfile] = None
    previous_types: tuple[int, ...] = ()
    # Presence flags for confidence scoring
    has_color_payload: bool = False
    has_volume_class: bool = False


def parse_bristol_type(value: Any) -> int:
    """
    Validate a Bristol type from client input.

    Accepts ints, integral floats (``4.0``) and digit strings (``"4"``).

    Raises:
        InvalidBristolTypeError: missing, non-integral or outside 1-7
    """
    if value is None or isinstance(value, bool):
        raise InvalidBristolTypeError("Please provide valid Bristol type (1-7)")

    if isinstance(value, str):
        value = value.strip()
        if not value.isdecimal():
            raise InvalidBristolTypeError("Please provide valid Bristol type (1-7)")
        try:
            value = int(value)
        except ValueError as e:
            # Digit strings past the int conversion limit
            raise InvalidBristolTypeError("Please provide valid Bristol type (1-7)") from e
    elif isinstance(value, float):
        if not value.is_integer():
            raise InvalidBristolTypeError("Please provide valid Bristol type (1-7)")
        value = int(value)
    elif not isinstance(value, int):
        raise InvalidBristolTypeError("Please provide valid Bristol type (1-7)")

    if value not in BRISTOL_TYPES:
        raise InvalidBristolTypeError("Please provide valid Bristol type (1-7)")
    return value


def _coerce_bristol_type(value: Any) -> Optional[int]:
    try:
        return parse_bristol_type(value)
    except InvalidBristolTypeError:
        return None


def _coerce_percentage(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int):
        # float() overflows on huge ints
        return float(max(0, min(100, value)))
    try:
        pct = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if pct != pct:  # NaN
        return 0.0
    return max(0.0, min(100.0, pct))


def _coerce_score(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        score = float(value)
    except OverflowError:
        return None
    return score if math.isfinite(score) else None


def _clean_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def canonical_color_name(name: Any) -> str:
    """Title-case a color name so table lookups are case-insensitive."""
    return " ".join(part.capitalize() for part in str(name).split())


def normalize_color_analysis(color_analysis: Any) -> tuple[ColorReading, ...]:
    """
    Project ``{"summary": {color: {...}}}`` into ColorReadings.

    ``health_status`` takes precedence over ``status``. Entries that are not
    mappings are skipped. Mapping order is preserved.
    """
    if not isinstance(color_analysis, dict):
        return ()
    summary = color_analysis.get("summary")
    if not isinstance(summary, dict):
        return ()

    readings = []
    for name, info in summary.items():
        if not isinstance(info, dict):
            continue
        color = canonical_color_name(name)
        if not color:
            continue
        status = _clean_str(info.get("health_status")) or _clean_str(info.get("status"))
        readings.append(
            ColorReading(
                color=color,
                status=status.capitalize() if status else "Normal",
                percentage=_coerce_percentage(info.get("percentage")),
                description=_clean_str(info.get("description")) or "",
            )
        )
    return tuple(readings)


def normalize_volume_analysis(volume_analysis: Any) -> Optional[VolumeReading]:
    if not isinstance(volume_analysis, dict):
        return None
    volume_class = _clean_str(volume_analysis.get("overall_volume_class"))
    if not volume_class:
        return None

    return VolumeReading(
        volume_class=volume_class.lower(),
        volume_score=_coerce_score(volume_analysis.get("volume_score")),
    )


def normalize_user_profile(user_profile: Any) -> Optional[UserProfile]:
    """
    Accepts ``diet``/``dietType``, ``exercise``/``exerciseFrequency`` and
    ``conditions``/``medicalConditions``.
    """
    if not isinstance(user_profile, dict):
        return None

    def pick(*keys):
        for key in keys:
            value = _clean_str(user_profile.get(key))
            if value is not None:
                return value
        return None

    return UserProfile(
        age=pick("age"),
        gender=pick("gender"),
        diet=pick("diet", "dietType"),
        exercise=pick("exercise", "exerciseFrequency"),
        conditions=pick("conditions", "medicalConditions"),
        allergies=pick("allergies"),
    )


def normalize_previous_records(previous_records: Any) -> tuple[int, ...]:
    """Extract Bristol types (``type`` or ``bristolType``), oldest first."""
    if not isinstance(previous_records, (list, tuple)):
        return ()

    types = []
    for record in previous_records:
        if not isinstance(record, dict):
            continue
        raw = record.get("type")
        if raw is None:
            raw = record.get("bristolType")
        bristol_type = _coerce_bristol_type(raw)
        if bristol_type is not None:
            types.append(bristol_type)
    return tuple(types)


def parse_observation(payload: dict) -> Observation:
    """
    Build an Observation from a request body.

    Raises:
        InvalidBristolTypeError: if bristolType is missing or invalid
    """
    bristol_type = parse_bristol_type(payload.get("bristolType"))
    color_analysis = payload.get("colorAnalysis")
    volume = normalize_volume_analysis(payload.get("volumeAnalysis"))

    return Observation(
        bristol_type=bristol_type,
        colors=normalize_color_analysis(color_analysis),
        volume=volume,
        user_profile=normalize_user_profile(payload.get("userProfile")),
        previous_types=normalize_previous_records(payload.get("previousRecords")),
        has_color_payload=isinstance(color_analysis, dict) and len(color_analysis) > 0,
        has_volume_class=volume is not None,
    )


class InvalidBristolTypeError(ValueError):
    """Bristol type missing or outside 1-7."""

    pass
