from typing import Optional

import pandas as pd

ACTIVE = "Active"
CHURNED = "Churned"


def monthly_readmission_trend(df: pd.DataFrame) -> pd.DataFrame:
    """
    Readmission rate per admission month and its month-over-month change.

    The rate uses the externally supplied readmitted_flag; encounters
    without a flag count as volume but not in the rate.
    """
    columns = ["month", "encounters", "flagged", "readmissions", "readmission_rate", "rate_change"]
    if df.empty:
        return pd.DataFrame(columns=columns)

    frame = pd.DataFrame(
        {
            "month": df["admission_time"].dt.to_period("M").dt.to_timestamp(),
            "flag": df["readmitted_flag"].astype("boolean"),
        }
    )

    grouped = frame.groupby("month", sort=True)["flag"]
    trend = pd.DataFrame(
        {
            "encounters": grouped.size(),
            "flagged": grouped.count(),
            "readmissions": grouped.sum().astype("int64"),
        }
    )
    trend["readmission_rate"] = (trend["readmissions"] / trend["flagged"]).where(trend["flagged"] > 0)
    trend["rate_change"] = trend["readmission_rate"].diff()

    return trend.reset_index()[columns]


def patient_activity(
    df: pd.DataFrame,
    as_of: Optional[pd.Timestamp] = None,
    churn_days: int = 365,
) -> pd.DataFrame:
    """
    Last visit per patient and Active/Churned status.

    ``as_of`` defaults to the latest admission in the data so results
    do not depend on the day the batch runs.
    """
    if df.empty:
        return pd.DataFrame(columns=["patient_key", "last_visit", "days_since_last_visit", "status"])

    reference = pd.Timestamp(as_of) if as_of is not None else df["admission_time"].max()

    activity = (
        df.groupby("patient_key", sort=True)["admission_time"]
        .max()
        .rename("last_visit")
        .reset_index()
    )
    activity["days_since_last_visit"] = (reference - activity["last_visit"]).dt.days.astype("int64")
    activity["status"] = activity["days_since_last_visit"].gt(churn_days).map({True: CHURNED, False: ACTIVE})

    return activity
