from enum import Enum
from typing import Optional

import numpy as np
import pandas as pd


# =====================================================
# RISK TIER ENUM
# =====================================================

class RiskTier(str, Enum):
    """
    Clinical urgency of a discharge-to-readmission gap.

    FIRST_VISIT has no gap and never competes with the
    gap-based tiers.
    """

    FIRST_VISIT = "FIRST_VISIT"
    CRITICAL = "CRITICAL"    # readmitted within a week
    HIGH = "HIGH"            # 8-14 days
    MODERATE = "MODERATE"    # 15-30 days
    LOW = "LOW"              # more than 30 days

    @property
    def severity(self) -> int:
        return TIER_SEVERITY[self]


# Upper bounds are inclusive
TIER_THRESHOLDS = (
    (7, RiskTier.CRITICAL),
    (14, RiskTier.HIGH),
    (30, RiskTier.MODERATE),
)

TIER_ORDER = [
    RiskTier.FIRST_VISIT,
    RiskTier.CRITICAL,
    RiskTier.HIGH,
    RiskTier.MODERATE,
    RiskTier.LOW,
]

TIER_SEVERITY = {
    RiskTier.FIRST_VISIT: 0,
    RiskTier.LOW: 1,
    RiskTier.MODERATE: 2,
    RiskTier.HIGH: 3,
    RiskTier.CRITICAL: 4,
}

TIER_LABELS = [t.value for t in TIER_ORDER]


# =====================================================
# REPORTING WINDOWS (FINER THAN TIERS)
# =====================================================

READMISSION_WINDOWS = (
    (7, "<=7 days"),
    (14, "8-14 days"),
    (30, "15-30 days"),
    (60, "31-60 days"),
)
LONG_WINDOW = ">60 days"
WINDOW_LABELS = [label for _, label in READMISSION_WINDOWS] + [LONG_WINDOW]


def _is_null(value) -> bool:
    return value is None or bool(pd.isna(value))


# =====================================================
# CLASSIFIERS
# =====================================================

def classify_gap(gap_days: Optional[float]) -> RiskTier:
    """
    Map a gap in days to its risk tier.

    Null means no predecessor (FIRST_VISIT). Negative gaps from
    overlapping stays fall through to CRITICAL.
    """
    if _is_null(gap_days):
        return RiskTier.FIRST_VISIT

    for upper, tier in TIER_THRESHOLDS:
        if gap_days <= upper:
            return tier
    return RiskTier.LOW


def classify_gaps(gaps: pd.Series) -> pd.Series:
    """Vectorized classify_gap; returns an ordered categorical aligned to the input."""
    values = pd.to_numeric(gaps, errors="coerce").astype("float64").to_numpy()

    conditions = [np.isnan(values)] + [values <= upper for upper, _ in TIER_THRESHOLDS]
    choices = [RiskTier.FIRST_VISIT.value] + [tier.value for _, tier in TIER_THRESHOLDS]

    labels = np.select(conditions, choices, default=RiskTier.LOW.value)

    return pd.Series(
        pd.Categorical(labels, categories=TIER_LABELS, ordered=True),
        index=gaps.index,
        name="risk_tier",
    )


def readmission_window(gap_days: Optional[float]) -> Optional[str]:
    if _is_null(gap_days):
        return None

    for upper, label in READMISSION_WINDOWS:
        if gap_days <= upper:
            return label
    return LONG_WINDOW


def readmission_windows(gaps: pd.Series) -> pd.Series:
    values = pd.to_numeric(gaps, errors="coerce").astype("float64").to_numpy()

    conditions = [values <= upper for upper, _ in READMISSION_WINDOWS] + [values > READMISSION_WINDOWS[-1][0]]
    # unmatched (null) gaps fall outside the categories and become NaN
    labels = np.select(conditions, WINDOW_LABELS, default="")

    return pd.Series(
        pd.Categorical(labels, categories=WINDOW_LABELS, ordered=True),
        index=gaps.index,
        name="readmission_window",
    )
