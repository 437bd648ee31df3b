"""
Scoring and classification for stool observations.

Pure functions only:
- Health score (0-100) from Bristol type and derived anomalies
- Urgency level (low/medium/high)
- Trend over the last 7 recorded Bristol types
- ColorWarning / VolumeIssue projections of the raw analysis payloads
- Specific-concern list shared by the AI prompt and the fallback advice
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from health_advisor.services.observation import (
    BRISTOL_TYPES,
    ColorReading,
    Observation,
    VolumeReading,
)

# Severity / urgency vocabularies
SEVERITY_CRITICAL = "critical"
SEVERITY_HIGH = "high"
SEVERITY_MEDIUM = "medium"

URGENCY_LOW = "low"
URGENCY_MEDIUM = "medium"
URGENCY_HIGH = "high"

# Colors that may signal bleeding (hematochezia / melena)
BLEEDING_COLORS = frozenset({"Red", "Black"})

HIGH_SEVERITY_STATUSES = frozenset({"Alert", "Abnormal"})

BRISTOL_DESCRIPTIONS = {
    1: "Separate hard lumps, like nuts (severe constipation)",
    2: "Sausage-shaped but lumpy (constipation)",
    3: "Like a sausage with cracks (slightly dry)",
    4: "Like a sausage or snake, smooth and soft (ideal)",
    5: "Soft blobs with clear edges (slightly loose)",
    6: "Fluffy pieces with ragged edges (mild diarrhea)",
    7: "Watery, no solid pieces (severe diarrhea)",
}

MAIN_CONCERNS = {
    1: "Severe constipation needs immediate improvement",
    2: "Constipation requires dietary adjustment",
    3: "Slightly dry, increase hydration",
    4: "Ideal condition, maintain current routine",
    5: "Slightly loose, watch food hygiene",
    6: "Diarrhea needs management",
    7: "Severe diarrhea requires medical attention",
}

# Score penalties
BRISTOL_PENALTIES = {1: 40, 2: 25, 3: 10, 4: 0, 5: 10, 6: 25, 7: 40}
UNKNOWN_TYPE_PENALTY = 20
COLOR_PENALTIES = {SEVERITY_CRITICAL: 40, SEVERITY_HIGH: 25}
DEFAULT_COLOR_PENALTY = 10
VOLUME_PENALTY = 15

# Trend analysis
TREND_WINDOW = 7
TREND_THRESHOLD = 0.5
IDEAL_TYPE = 4

VOLUME_IMPLICATIONS = {
    "small": (
        "Possible insufficient fiber intake",
        "May indicate dehydration",
        "Could suggest incomplete evacuation",
    ),
    "large": (
        "Possible excessive food or fiber intake",
        "May indicate malabsorption",
        "Could suggest rapid intestinal transit",
    ),
}

VOLUME_ISSUE_LABELS = {
    "small": "Small stool volume",
    "large": "Large stool volume",
}


@dataclass(frozen=True)
class ColorWarning:
    color: str
    percentage: float
    status: str
    description: str
    severity: str

    @property
    def is_critical(self) -> bool:
        return self.severity == SEVERITY_CRITICAL

    def to_dict(self) -> dict:
        return {
            "color": self.color,
            "percentage": self.percentage,
            "status": self.status,
            "description": self.description,
            "severity": self.severity,
        }


@dataclass(frozen=True)
class VolumeIssue:
    issue: str
    volume_class: str
    score: Optional[float]
    implications: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "issue": self.issue,
            "volumeClass": self.volume_class,
            "score": self.score,
            "implications": list(self.implications),
        }


@dataclass(frozen=True)
class Trend:
    average: str
    direction: str
    change_rate: str
    priority: str
    record_count: int
    current_type: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "average": self.average,
            "direction": self.direction,
            "changeRate": self.change_rate,
            "priority": self.priority,
            "recordCount": self.record_count,
            "currentType": self.current_type,
        }


@dataclass(frozen=True)
class Assessment:
    """Everything derived from one observation, computed once per request."""

    bristol_type: int
    health_score: int
    urgency: str
    color_warnings: tuple[ColorWarning, ...] = ()
    volume_issues: tuple[VolumeIssue, ...] = ()
    specific_concerns: tuple[str, ...] = ()
    trend: Optional[Trend] = None
    confidence: float = 0.5


def get_bristol_description(bristol_type: int) -> str:
    return BRISTOL_DESCRIPTIONS.get(bristol_type, "Unknown type")


def color_severity(color: str, status: str) -> str:
    """Red/Black always escalate to critical regardless of stated status."""
    if color in BLEEDING_COLORS:
        return SEVERITY_CRITICAL
    if status in HIGH_SEVERITY_STATUSES:
        return SEVERITY_HIGH
    return SEVERITY_MEDIUM


def extract_color_warnings(colors: Iterable[ColorReading]) -> list[ColorWarning]:
    """
    Derive ColorWarnings from normalized color readings.

    A reading is flagged when its status is anything other than Normal, or
    when the color itself is Red or Black.
    """
    warnings = []
    for reading in colors:
        if reading.status == "Normal" and reading.color not in BLEEDING_COLORS:
            continue
        warnings.append(
            ColorWarning(
                color=reading.color,
                percentage=reading.percentage,
                status=reading.status,
                description=reading.description,
                severity=color_severity(reading.color, reading.status),
            )
        )
    return warnings


def extract_volume_issues(volume: Optional[VolumeReading]) -> list[VolumeIssue]:
    """Only small and large volume classes produce an issue."""
    if volume is None or volume.volume_class not in VOLUME_IMPLICATIONS:
        return []
    return [
        VolumeIssue(
            issue=VOLUME_ISSUE_LABELS[volume.volume_class],
            volume_class=volume.volume_class,
            score=volume.volume_score,
            implications=VOLUME_IMPLICATIONS[volume.volume_class],
        )
    ]


def compute_health_score(
    bristol_type: int,
    color_warnings: Sequence[ColorWarning] = (),
    volume_issues: Sequence[VolumeIssue] = (),
) -> int:
    """
    Compute a 0-100 health score.

    Starts at 100, subtracts a Bristol-type penalty, a per-warning color
    penalty (critical 40, high 25, otherwise 10) and 15 per volume issue,
    then clamps.
    """
    score = 100
    score -= BRISTOL_PENALTIES.get(bristol_type, UNKNOWN_TYPE_PENALTY)

    for warning in color_warnings:
        score -= COLOR_PENALTIES.get(warning.severity, DEFAULT_COLOR_PENALTY)

    score -= VOLUME_PENALTY * len(volume_issues)

    return max(0, min(100, score))


def assess_urgency(
    bristol_type: int, color_warnings: Sequence[ColorWarning] = ()
) -> str:
    """A critical color warning overrides everything else."""
    if any(warning.is_critical for warning in color_warnings):
        return URGENCY_HIGH
    if bristol_type in (1, 7):
        return URGENCY_HIGH
    if bristol_type in (2, 6):
        return URGENCY_MEDIUM
    if color_warnings:
        return URGENCY_MEDIUM
    return URGENCY_LOW


def _mean(values: Sequence[int]) -> float:
    return sum(values) / len(values)


def analyze_trend(
    previous_types: Sequence[int], current_type: Optional[int] = None
) -> Optional[Trend]:
    """
    Summarize the direction of the last 7 recorded Bristol types.

    The window is split into halves at floor(n/2). "Improving" and
    "Worsening" are only reported when the half-averages move by at least
    0.5 AND the recent half sits on the matching side of the ideal type 4
    (below it for improving, above it for worsening). Any other movement is
    reported as Stable.

    Returns:
        Trend, or None when there are no records
    """
    if not previous_types:
        return None

    recent = list(previous_types)[-TREND_WINDOW:]
    average = _mean(recent)

    direction = "Stable"
    change_rate = "No significant change"
    priority = "Continue current routine"

    split = len(recent) // 2
    first_half, second_half = recent[:split], recent[split:]

    if first_half and second_half:
        first_avg = _mean(first_half)
        second_avg = _mean(second_half)
        change = second_avg - first_avg

        if abs(change) < TREND_THRESHOLD:
            pass
        elif change < 0 and second_avg < IDEAL_TYPE:
            direction = "Improving"
            change_rate = f"{abs(change) * 25:.1f}% improvement"
            priority = "Continue current plan"
        elif change > 0 and second_avg > IDEAL_TYPE:
            direction = "Worsening"
            change_rate = f"{abs(change) * 25:.1f}% decline"
            priority = "Adjust current plan"

    return Trend(
        average=f"{average:.1f}",
        direction=direction,
        change_rate=change_rate,
        priority=priority,
        record_count=len(recent),
        current_type=current_type,
    )


def build_specific_concerns(
    bristol_type: int,
    color_warnings: Sequence[ColorWarning] = (),
    volume_issues: Sequence[VolumeIssue] = (),
) -> list[str]:
    """
    Ordered list of the concerns worth calling out by name.

    1. The Bristol-type concern for types 1, 2, 6 and 7
    2. Critical/high color warnings covering more than 30% of the sample
    3. The first implication of each volume issue
    """
    concerns = []
    if bristol_type in (1, 2, 6, 7):
        concerns.append(MAIN_CONCERNS[bristol_type])

    for warning in color_warnings:
        if warning.severity not in (SEVERITY_CRITICAL, SEVERITY_HIGH):
            continue
        if warning.percentage <= 30:
            continue
        if warning.is_critical:
            concerns.append(
                f"URGENT: {warning.color} stool detected ({warning.percentage:g}%), "
                "possible gastrointestinal bleeding"
            )
        else:
            concerns.append(
                f"{warning.color} coloration flagged as {warning.status} "
                f"({warning.percentage:g}%)"
            )

    for issue in volume_issues:
        concerns.append(issue.implications[0])

    return concerns


def calculate_confidence(observation: Observation) -> float:
    """0.5 base, +0.2 valid type, +0.15 color payload, +0.15 volume class."""
    confidence = 0.5
    if observation.bristol_type in BRISTOL_TYPES:
        confidence += 0.2
    if observation.has_color_payload:
        confidence += 0.15
    if observation.has_volume_class:
        confidence += 0.15
    return round(min(1.0, confidence), 2)


def assess_observation(observation: Observation) -> Assessment:
    """Run every scoring step for one observation."""
    color_warnings = extract_color_warnings(observation.colors)
    volume_issues = extract_volume_issues(observation.volume)

    return Assessment(
        bristol_type=observation.bristol_type,
        health_score=compute_health_score(
            observation.bristol_type, color_warnings, volume_issues
        ),
        urgency=assess_urgency(observation.bristol_type, color_warnings),
        color_warnings=tuple(color_warnings),
        volume_issues=tuple(volume_issues),
        specific_concerns=tuple(
            build_specific_concerns(
                observation.bristol_type, color_warnings, volume_issues
            )
        ),
        trend=analyze_trend(observation.previous_types, observation.bristol_type),
        confidence=calculate_confidence(observation),
    )
