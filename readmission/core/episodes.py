"""Gaps-and-islands segmentation of encounters into episodes of care."""

import pandas as pd

DEFAULT_CONTINUITY_THRESHOLD = 1


def assign_episodes(df: pd.DataFrame, continuity_threshold: float = DEFAULT_CONTINUITY_THRESHOLD) -> pd.DataFrame:
    """
    Number each patient's episodes of care, starting at 0.

    Expects a sequenced frame with gap_days. An encounter opens a new
    episode when its gap is null (first visit, indeterminate gap) or
    exceeds ``continuity_threshold``; otherwise it continues the current one.
    """
    out = df.copy()

    gaps = out["gap_days"].astype("float64")
    opens_episode = ~gaps.le(continuity_threshold)

    out["episode_id"] = (
        opens_episode.astype("int64").groupby(out["patient_key"], sort=False).cumsum() - 1
    ).astype("int64")

    return out


def summarize_episodes(df: pd.DataFrame) -> pd.DataFrame:
    """One row per (patient, episode) with its span, size and total stay."""
    if df.empty:
        return pd.DataFrame(
            columns=[
                "patient_key", "episode_id", "episode_start", "episode_end",
                "encounters", "total_length_of_stay",
            ]
        )

    summary = (
        df.groupby(["patient_key", "episode_id"], sort=True)
        .agg(
            episode_start=("admission_time", "min"),
            episode_end=("discharge_time", "max"),
            encounters=("admission_time", "size"),
            total_length_of_stay=("length_of_stay", "sum"),
        )
        .reset_index()
    )
    return summary
