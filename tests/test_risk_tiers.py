import pandas as pd
import pytest

from readmission.core.risk_tiers import (
    RiskTier,
    classify_gap,
    classify_gaps,
    readmission_window,
    readmission_windows,
)


@pytest.mark.parametrize(
    "gap, tier",
    [
        (7, RiskTier.CRITICAL),
        (8, RiskTier.HIGH),
        (14, RiskTier.HIGH),
        (15, RiskTier.MODERATE),
        (30, RiskTier.MODERATE),
        (31, RiskTier.LOW),
        (0, RiskTier.CRITICAL),
        (-3, RiskTier.CRITICAL),
        (365, RiskTier.LOW),
        (None, RiskTier.FIRST_VISIT),
    ],
)
def test_tier_boundaries(gap, tier):
    assert classify_gap(gap) is tier


def test_null_gap_is_first_visit():
    assert classify_gap(pd.NA) is RiskTier.FIRST_VISIT
    assert classify_gap(float("nan")) is RiskTier.FIRST_VISIT


def test_vectorized_matches_scalar():
    gaps = pd.Series([None, -3, 0, 7, 8, 14, 15, 30, 31, 90], dtype="Int64")

    tiers = classify_gaps(gaps)

    assert tiers.tolist() == [classify_gap(g).value for g in gaps]
    assert tiers.cat.ordered


def test_first_visit_has_lowest_severity():
    assert RiskTier.FIRST_VISIT.severity < RiskTier.LOW.severity
    assert RiskTier.CRITICAL.severity > RiskTier.HIGH.severity > RiskTier.MODERATE.severity


@pytest.mark.parametrize(
    "gap, window",
    [
        (7, "<=7 days"),
        (8, "8-14 days"),
        (30, "15-30 days"),
        (60, "31-60 days"),
        (61, ">60 days"),
        (None, None),
    ],
)
def test_reporting_windows(gap, window):
    assert readmission_window(gap) == window


def test_vectorized_windows_leave_nulls_unassigned():
    windows = readmission_windows(pd.Series([3, None, 100], dtype="Int64"))

    assert windows.iloc[0] == "<=7 days"
    assert pd.isna(windows.iloc[1])
    assert windows.iloc[2] == ">60 days"
