from typing import Optional

import numpy as np
import pandas as pd

# (z lower bound, band) checked top-down; below -1 is "below", else "normal"
ZSCORE_BANDS = (
    (3.0, "extreme"),
    (2.0, "moderate"),
    (1.0, "above"),
)


def _zscore_band(z: Optional[float]) -> Optional[str]:
    if z is None or pd.isna(z):
        return None
    for lower, band in ZSCORE_BANDS:
        if z > lower:
            return band
    if z < -1.0:
        return "below"
    return "normal"


def bill_zscores(df: pd.DataFrame, measure: str = "bill_amount") -> pd.DataFrame:
    """
    Z-score of each bill against the population (sample standard deviation).

    Encounters without a bill are excluded. A population with no spread
    yields null scores rather than a division by zero.
    """
    billed = df[df[measure].notna()].copy()
    values = billed[measure].astype("float64")

    mean = values.mean()
    std = values.std(ddof=1)

    if billed.empty or pd.isna(std) or std == 0:
        billed["z_score"] = np.nan
    else:
        billed["z_score"] = (values - mean) / std

    billed["population_mean"] = mean
    billed["population_std"] = std
    billed["outlier_band"] = billed["z_score"].map(_zscore_band)

    return billed.sort_values("z_score", ascending=False, kind="mergesort").reset_index(drop=True)


def los_outliers(df: pd.DataFrame, multiplier: float = 2.0) -> pd.DataFrame:
    """Encounters staying longer than ``multiplier`` times their diagnosis' mean stay."""
    stays = df[df["length_of_stay"].notna() & df["diagnosis"].notna()].copy()
    if stays.empty:
        return stays.assign(diagnosis_avg_los=pd.Series(dtype="float64"))

    los = stays["length_of_stay"].astype("float64")
    stays["diagnosis_avg_los"] = los.groupby(stays["diagnosis"]).transform("mean")

    flagged = stays[los > multiplier * stays["diagnosis_avg_los"]]
    return flagged.sort_values(["diagnosis", "length_of_stay"], ascending=[True, False], kind="mergesort").reset_index(drop=True)
