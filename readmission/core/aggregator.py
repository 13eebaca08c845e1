from typing import Any, Dict

import pandas as pd

from readmission.core.intervals import GAP_STATUS_FIRST_VISIT, GAP_STATUS_INDETERMINATE
from readmission.core.risk_tiers import readmission_windows

DISTRIBUTION_COLUMNS = [
    "group_key",
    "count",
    "mean",
    "median",
    "min",
    "max",
    "pct_of_total",
    "indeterminate",
]

FREQUENT_FLYER_COLUMNS = [
    "patient_key",
    "total_readmissions",
    "avg_gap",
    "min_gap",
    "max_gap",
    "pct_rapid_readmit",
]


# =====================================================
# GROUP DISTRIBUTIONS
# =====================================================

def describe_groups(df: pd.DataFrame, group_by: str, measure: str) -> pd.DataFrame:
    """
    Count, mean, median, min, max and share of total for a measure per group.

    Rows with a null measure are left out of the statistics and counted
    in ``indeterminate`` instead. The share denominator is the measured
    row count over all groups, computed once, so ``pct_of_total`` sums
    to 100 for a fixed grouping. The median interpolates linearly
    between order statistics.

    Args:
        df: Encounter-level frame
        group_by: Grouping column (risk_tier, diagnosis, patient_key, ...)
        measure: Numeric column (gap_days, bill_amount, length_of_stay, ...)

    Returns:
        One row per group, in group order (tier order for categoricals)
    """
    if group_by not in df.columns:
        raise KeyError(f"Unknown grouping column: {group_by}")
    if measure not in df.columns:
        raise KeyError(f"Unknown measure column: {measure}")

    if df.empty:
        return pd.DataFrame(columns=DISTRIBUTION_COLUMNS)

    frame = pd.DataFrame(
        {
            "group_key": df[group_by].reset_index(drop=True),
            "value": pd.to_numeric(df[measure], errors="coerce").astype("float64").reset_index(drop=True),
        }
    )

    grouped = frame.groupby("group_key", sort=True, observed=True, dropna=False)["value"]

    table = pd.DataFrame(
        {
            "count": grouped.count(),
            "mean": grouped.mean(),
            "median": grouped.quantile(0.5, interpolation="linear"),
            "min": grouped.min(),
            "max": grouped.max(),
            "indeterminate": grouped.size() - grouped.count(),
        }
    )

    grand_total = int(table["count"].sum())
    if grand_total:
        table["pct_of_total"] = table["count"] / grand_total * 100.0
    else:
        table["pct_of_total"] = 0.0

    table = table.reset_index()
    table["count"] = table["count"].astype("int64")
    table["indeterminate"] = table["indeterminate"].astype("int64")

    return table[DISTRIBUTION_COLUMNS]


def tier_distribution(df: pd.DataFrame) -> pd.DataFrame:
    """
    Gap distribution per risk tier.

    Encounters without a measured gap all land in FIRST_VISIT, so the
    generic ``indeterminate`` count is split by gap_status: true first
    visits go to ``first_visits`` and only predecessors without a
    discharge date stay in ``indeterminate``.
    """
    table = describe_groups(df, "risk_tier", "gap_days")
    if table.empty:
        return table.assign(first_visits=pd.Series(dtype="int64"))

    keys = df["risk_tier"].astype(str)
    status = df["gap_status"]

    def _count(gap_status: str) -> pd.Series:
        return status.eq(gap_status).groupby(keys).sum()

    group_keys = table["group_key"].astype(str)
    table["indeterminate"] = group_keys.map(_count(GAP_STATUS_INDETERMINATE)).fillna(0).astype("int64")
    table["first_visits"] = group_keys.map(_count(GAP_STATUS_FIRST_VISIT)).fillna(0).astype("int64")

    return table


# =====================================================
# FREQUENT FLYERS
# =====================================================

def frequent_flyers(
    df: pd.DataFrame,
    min_readmissions: int = 3,
    rapid_threshold: int = 30,
) -> pd.DataFrame:
    """
    Patients with at least ``min_readmissions`` measured readmission gaps.

    The first visit carries no gap and indeterminate gaps are not
    measured, so neither counts as a readmission.
    """
    measured = df[df["gap_days"].notna()]
    if measured.empty:
        return pd.DataFrame(columns=FREQUENT_FLYER_COLUMNS)

    gaps = measured["gap_days"].astype("float64")
    rapid = gaps.le(rapid_threshold).astype("int64")

    grouped = gaps.groupby(measured["patient_key"], sort=True)

    table = pd.DataFrame(
        {
            "total_readmissions": grouped.count().astype("int64"),
            "avg_gap": grouped.mean(),
            "min_gap": grouped.min(),
            "max_gap": grouped.max(),
            "rapid": rapid.groupby(measured["patient_key"], sort=True).sum(),
        }
    )
    table.index.name = "patient_key"

    table = table[table["total_readmissions"] >= min_readmissions].copy()
    table["pct_rapid_readmit"] = table["rapid"] / table["total_readmissions"] * 100.0

    table = (
        table.reset_index()
        .sort_values(["total_readmissions", "patient_key"], ascending=[False, True], kind="mergesort")
        .reset_index(drop=True)
    )

    return table[FREQUENT_FLYER_COLUMNS]


# =====================================================
# READMISSION SUMMARIES
# =====================================================

def readmission_summary(df: pd.DataFrame, rapid_threshold: int = 30) -> Dict[str, Any]:
    """Headline counts: measured readmissions and the share inside the rapid window."""
    gaps = df["gap_days"].dropna().astype("float64")
    total = int(len(gaps))
    rapid = int(gaps.le(rapid_threshold).sum())

    return {
        "total_readmissions": total,
        "rapid_readmissions": rapid,
        "pct_rapid": round(100.0 * rapid / total, 2) if total else None,
        "rapid_threshold_days": rapid_threshold,
    }


def window_distribution(df: pd.DataFrame) -> pd.DataFrame:
    """Gap distribution over the five reporting windows (<=7 ... >60 days)."""
    measured = df[df["gap_days"].notna()]
    windows = pd.DataFrame(
        {
            "readmission_window": readmission_windows(measured["gap_days"]),
            "gap_days": measured["gap_days"],
        }
    )
    return describe_groups(windows, "readmission_window", "gap_days")
