"""Discharge-to-admission gaps and length of stay."""

import numpy as np
import pandas as pd

GAP_STATUS_FIRST_VISIT = "first_visit"
GAP_STATUS_INDETERMINATE = "indeterminate"
GAP_STATUS_MEASURED = "measured"


def _whole_days(delta: pd.Series) -> pd.Series:
    # NaT -> <NA>; dates are normalized upstream so no partial days remain
    return delta.dt.days.astype("Int64")


def compute_gap_days(admission: pd.Series, predecessor_discharge: pd.Series) -> pd.Series:
    """Days from the previous discharge to this admission. Null when either date is missing."""
    return _whole_days(admission - predecessor_discharge)


def compute_length_of_stay(admission: pd.Series, discharge: pd.Series) -> pd.Series:
    """Days from admission to discharge. Negative values are kept as data-quality signals."""
    return _whole_days(discharge - admission)


def add_intervals(df: pd.DataFrame) -> pd.DataFrame:
    """
    Attach gap and stay measures to a sequenced encounter frame.

    Adds gap_days, length_of_stay, gap_status (first_visit | indeterminate |
    measured), invalid_interval (discharge before admission) and
    overlapping (negative gap).
    """
    out = df.copy()

    out["gap_days"] = compute_gap_days(out["admission_time"], out["predecessor_discharge_time"])
    out["length_of_stay"] = compute_length_of_stay(out["admission_time"], out["discharge_time"])

    out["gap_status"] = np.select(
        [
            ~out["has_predecessor"].to_numpy(dtype=bool),
            out["gap_days"].isna().to_numpy(dtype=bool),
        ],
        [GAP_STATUS_FIRST_VISIT, GAP_STATUS_INDETERMINATE],
        default=GAP_STATUS_MEASURED,
    )

    out["invalid_interval"] = (out["length_of_stay"] < 0).fillna(False).astype(bool)
    out["overlapping"] = (out["gap_days"] < 0).fillna(False).astype(bool)

    return out
