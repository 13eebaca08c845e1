"""
Composite clinical risk score.

A fixed weighted sum over independent clinical factors. The LACE
sub-score lives in its own function so every caller (composite score,
standalone LACE table) shares one set of weights and caps.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

import pandas as pd

# =====================================================
# LACE SUB-SCORE (Length of stay, Acuity, Comorbidity, ED visits)
# =====================================================

# (minimum stay in days, points); shorter stays score their day count
LACE_LOS_BANDS = ((14, 7), (7, 5))
LACE_ACUITY_POINTS = 3
LACE_COMORBIDITY_CAP = 5
LACE_PRIOR_ADMISSIONS_CAP = 4

# =====================================================
# COMPOSITE WEIGHTS
# =====================================================

AGE_THRESHOLD = 70
AGE_POINTS = 20
HEART_FAILURE_TERM = "Heart Failure"
HEART_FAILURE_POINTS = 30
EMERGENCY_ADMISSION = "Emergency"
EMERGENCY_POINTS = 10
LACE_THRESHOLD = 10
LACE_POINTS = 40
COMORBIDITY_WEIGHT = 5

HIGH_RISK_MIN_SCORE = 80
MEDIUM_RISK_MIN_SCORE = 50

# LACE-only category; both bounds are exclusive
LACE_HIGH_ABOVE = 10
LACE_MEDIUM_ABOVE = 5


class RiskLabel(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


@dataclass(frozen=True)
class RiskAssessment:
    lace_score: Optional[int]
    lace_category: Optional[RiskLabel]
    score: int
    label: RiskLabel


def _is_missing(value: Any) -> bool:
    return value is None or bool(pd.isna(value))


def _int_or_zero(value: Any) -> int:
    if _is_missing(value):
        return 0
    return int(value)


def is_emergency(admission_type: Optional[str]) -> bool:
    if admission_type is None or pd.isna(admission_type):
        return False
    return str(admission_type).strip().lower() == EMERGENCY_ADMISSION.lower()


def calculate_lace(
    length_of_stay: Optional[int],
    emergency: bool,
    comorbidity_score: Optional[int],
    prior_admissions: Optional[int],
) -> Optional[int]:
    """
    LACE readmission index.

    L: stays of 14+ days score 7, 7-13 days score 5, shorter stays their
       day count (negative stays from bad discharge dates score 0)
    A: 3 for an emergency admission
    C: comorbidity score capped at 5
    E: admissions in the prior 12 months capped at 4

    Returns None when the stay, comorbidity or prior admissions are
    unknown; a partial index is never reported.
    """
    if _is_missing(length_of_stay) or _is_missing(comorbidity_score) or _is_missing(prior_admissions):
        return None

    los = max(int(length_of_stay), 0)
    points = los
    for min_days, band_points in LACE_LOS_BANDS:
        if los >= min_days:
            points = band_points
            break

    if emergency:
        points += LACE_ACUITY_POINTS

    points += min(int(comorbidity_score), LACE_COMORBIDITY_CAP)
    points += min(int(prior_admissions), LACE_PRIOR_ADMISSIONS_CAP)

    return points


def lace_category(lace_score: Optional[int]) -> Optional[RiskLabel]:
    """LACE-only risk band: above 10 High, above 5 Medium, else Low."""
    if _is_missing(lace_score):
        return None
    if lace_score > LACE_HIGH_ABOVE:
        return RiskLabel.HIGH
    if lace_score > LACE_MEDIUM_ABOVE:
        return RiskLabel.MEDIUM
    return RiskLabel.LOW


def composite_score(
    age: Optional[int],
    diagnosis: Optional[str],
    admission_type: Optional[str],
    comorbidity_score: Optional[int],
    lace_score: Optional[int],
) -> int:
    # an unknown LACE never earns its points
    score = 0

    if _int_or_zero(age) > AGE_THRESHOLD:
        score += AGE_POINTS
    if isinstance(diagnosis, str) and HEART_FAILURE_TERM in diagnosis:
        score += HEART_FAILURE_POINTS
    if is_emergency(admission_type):
        score += EMERGENCY_POINTS
    if not _is_missing(lace_score) and lace_score > LACE_THRESHOLD:
        score += LACE_POINTS

    score += COMORBIDITY_WEIGHT * _int_or_zero(comorbidity_score)

    return score


def risk_label(score: int) -> RiskLabel:
    if score >= HIGH_RISK_MIN_SCORE:
        return RiskLabel.HIGH
    if score >= MEDIUM_RISK_MIN_SCORE:
        return RiskLabel.MEDIUM
    return RiskLabel.LOW


def assess(snapshot: Mapping[str, Any]) -> RiskAssessment:
    """Score one encounter snapshot (a row mapping with canonical field names)."""
    emergency = is_emergency(snapshot.get("admission_type"))

    lace = calculate_lace(
        snapshot.get("length_of_stay"),
        emergency,
        snapshot.get("comorbidity_score"),
        snapshot.get("previous_admissions_12m"),
    )
    score = composite_score(
        snapshot.get("age"),
        snapshot.get("diagnosis"),
        snapshot.get("admission_type"),
        snapshot.get("comorbidity_score"),
        lace,
    )
    return RiskAssessment(
        lace_score=lace,
        lace_category=lace_category(lace),
        score=score,
        label=risk_label(score),
    )


# =====================================================
# FRAME-LEVEL SCORING
# =====================================================

SCORE_COLUMNS = ["patient_key", "admission_time", "lace_score", "lace_category", "score", "label"]


def score_encounters(df: pd.DataFrame) -> pd.DataFrame:
    """Composite score for every encounter; lace_score is nullable."""
    if df.empty:
        return pd.DataFrame(columns=SCORE_COLUMNS)

    assessments = [assess(row) for row in df.to_dict("records")]

    return pd.DataFrame(
        {
            "patient_key": df["patient_key"].to_numpy(),
            "admission_time": df["admission_time"].to_numpy(),
            "lace_score": pd.array([a.lace_score for a in assessments], dtype="Int64"),
            "lace_category": pd.array(
                [a.lace_category.value if a.lace_category is not None else None for a in assessments],
                dtype="string",
            ),
            "score": [a.score for a in assessments],
            "label": [a.label.value for a in assessments],
        }
    )


def score_patients(df: pd.DataFrame) -> pd.DataFrame:
    """
    Composite score per patient from their most recent encounter.

    Latest means the last encounter in chronological order, input order
    breaking same-day ties.
    """
    if df.empty:
        return pd.DataFrame(columns=[c for c in SCORE_COLUMNS if c != "admission_time"])

    sort_keys = [k for k in ("patient_key", "admission_time", "input_order") if k in df.columns]
    latest = (
        df.sort_values(sort_keys, kind="mergesort")
        .groupby("patient_key", sort=True)
        .tail(1)
    )
    scored = score_encounters(latest)

    return (
        scored.drop(columns="admission_time")
        .sort_values(["score", "patient_key"], ascending=[False, True], kind="mergesort")
        .reset_index(drop=True)
    )
