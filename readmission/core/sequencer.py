"""Chronological sequencing of each patient's encounters."""

import numpy as np
import pandas as pd

SORT_KEYS = ["patient_key", "admission_time", "input_order"]


def sequence_encounters(df: pd.DataFrame) -> pd.DataFrame:
    """
    Order encounters per patient and attach the immediate predecessor.

    Encounters sharing an admission date keep their input order
    (``input_order`` is the final sort key, and the sort is stable).

    Adds:
        - visit_index: 0-based position within the patient's sequence
        - predecessor_order: input_order of the previous encounter, null for the first
        - predecessor_discharge_time: discharge of the previous encounter, null for the first
        - previous_diagnosis: diagnosis of the previous encounter, null for the first
        - has_predecessor: False only for the patient's first recorded visit
    """
    ordered = df.copy()
    if "input_order" not in ordered.columns:
        ordered["input_order"] = np.arange(len(ordered), dtype="int64")

    ordered = ordered.sort_values(SORT_KEYS, kind="mergesort").reset_index(drop=True)

    grouped = ordered.groupby("patient_key", sort=False)
    ordered["visit_index"] = grouped.cumcount().astype("int64")
    ordered["predecessor_order"] = grouped["input_order"].shift(1).astype("Int64")
    ordered["predecessor_discharge_time"] = grouped["discharge_time"].shift(1)
    if "diagnosis" in ordered.columns:
        ordered["previous_diagnosis"] = grouped["diagnosis"].shift(1)
    ordered["has_predecessor"] = ordered["visit_index"] > 0

    return ordered
