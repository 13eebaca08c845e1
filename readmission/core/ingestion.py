"""
Encounter ingestion boundary.

Turns whatever the record store hands over (a dataframe, a list of
mappings, a CSV/Excel extract) into the canonical encounter frame the
rest of the engine works on. Structural problems (no patient key, no
admission date) are filtered here and surfaced as rejected records.
Missing optional values stay null; no imputation happens here.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Union

import numpy as np
import pandas as pd

from readmission.core.column_resolver import resolve_encounter_columns
from readmission.utils.logger import get_logger

log = get_logger("ingestion")

SUPPORTED_EXT = (".csv", ".xlsx")

REQUIRED_COLUMNS = ("patient_key", "admission_time")

ENCOUNTER_COLUMNS = (
    "patient_key",
    "admission_time",
    "discharge_time",
    "diagnosis",
    "comorbidity_score",
    "bill_amount",
    "readmitted_flag",
    "age",
    "admission_type",
    "previous_admissions_12m",
)

INTEGER_COLUMNS = ("comorbidity_score", "age", "previous_admissions_12m")
TEXT_COLUMNS = ("diagnosis", "admission_type")

COMORBIDITY_RANGE = (0, 24)

_FLAG_VALUES = {
    "1": True, "1.0": True, "true": True, "yes": True, "y": True,
    "0": False, "0.0": False, "false": False, "no": False, "n": False,
}


@dataclass
class IngestionResult:
    df: pd.DataFrame
    rejected: pd.DataFrame
    summary: Dict[str, Any] = field(default_factory=dict)

    @property
    def rejected_count(self) -> int:
        return int(len(self.rejected))


# -------------------------------------------------
# LOADING
# -------------------------------------------------
def load_encounters(
    source: Union[pd.DataFrame, str, Path, Iterable[Mapping[str, Any]]],
) -> pd.DataFrame:
    """
    Read encounter records from a dataframe, a file path or an
    iterable of mappings. The returned frame is always a copy.
    """
    if isinstance(source, pd.DataFrame):
        return source.copy()

    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(path)

        suffix = path.suffix.lower()
        if suffix == ".csv":
            return pd.read_csv(path)
        if suffix == ".xlsx":
            return pd.read_excel(path)
        raise ValueError(f"Unsupported input type: {path.suffix} (expected one of {SUPPORTED_EXT})")

    return pd.DataFrame.from_records(list(source))


# -------------------------------------------------
# COERCION HELPERS
# -------------------------------------------------
def _coerce_dates(series: pd.Series) -> pd.Series:
    dates = pd.to_datetime(series, errors="coerce")
    if getattr(dates.dt, "tz", None) is not None:
        dates = dates.dt.tz_localize(None)
    return dates.dt.normalize()


def _coerce_integers(series: pd.Series) -> pd.Series:
    return pd.to_numeric(series, errors="coerce").round().astype("Int64")


def _coerce_flag(series: pd.Series) -> pd.Series:
    mapped = series.map(
        lambda v: _FLAG_VALUES.get(str(v).strip().lower()) if pd.notna(v) else None
    )
    return mapped.astype("boolean")


def _coerce_text(series: pd.Series) -> pd.Series:
    return series.astype("string").str.strip().replace("", pd.NA)


# -------------------------------------------------
# PREPARATION
# -------------------------------------------------
def prepare_encounters(
    df: pd.DataFrame,
    columns: Optional[Dict[str, str]] = None,
) -> IngestionResult:
    """
    Canonicalize an encounter frame and split off structurally invalid rows.

    Args:
        df: Raw encounter records
        columns: Optional canonical -> source column overrides

    Returns:
        IngestionResult with:
            - df: accepted encounters, canonical columns plus input_order
            - rejected: rows missing patient_key or admission_time
            - summary: audit counts
    """
    df = df.copy()

    # -----------------------------
    # Standardize column names
    # -----------------------------
    df.columns = (
        df.columns.astype(str)
        .str.strip()
        .str.lower()
        .str.replace(" ", "_")
    )
    overrides = {
        k: str(v).strip().lower().replace(" ", "_")
        for k, v in (columns or {}).items()
    }

    resolved = resolve_encounter_columns(df, overrides)
    missing = [c for c in REQUIRED_COLUMNS if c not in resolved]
    if missing:
        raise ValueError(
            f"Input has no column for required field(s) {missing}; "
            f"available columns: {list(df.columns)}"
        )

    log.debug("Resolved columns: %s", resolved)

    # -----------------------------
    # Build canonical frame
    # -----------------------------
    out = pd.DataFrame(index=df.index)
    for name in ENCOUNTER_COLUMNS:
        if name in resolved:
            out[name] = df[resolved[name]]
        else:
            out[name] = np.nan

    out["patient_key"] = _coerce_text(out["patient_key"])
    out["admission_time"] = _coerce_dates(out["admission_time"])
    out["discharge_time"] = _coerce_dates(out["discharge_time"])
    out["bill_amount"] = pd.to_numeric(out["bill_amount"], errors="coerce").astype("float64")
    out["readmitted_flag"] = _coerce_flag(out["readmitted_flag"])

    for name in INTEGER_COLUMNS:
        out[name] = _coerce_integers(out[name])
    for name in TEXT_COLUMNS:
        out[name] = _coerce_text(out[name])

    out["input_order"] = np.arange(len(out), dtype="int64")
    out = out.reset_index(drop=True)

    # -----------------------------
    # Structural rejection (MissingKey)
    # -----------------------------
    missing_key = out["patient_key"].isna() | out["admission_time"].isna()
    rejected = out[missing_key].reset_index(drop=True)
    accepted = out[~missing_key].reset_index(drop=True)

    if len(rejected):
        log.warning(
            "Rejected %d record(s) missing patient_key or admission_time",
            len(rejected),
        )

    low, high = COMORBIDITY_RANGE
    comorbidity = accepted["comorbidity_score"]
    out_of_range = int(((comorbidity < low) | (comorbidity > high)).fillna(False).sum())
    if out_of_range:
        log.warning("%d comorbidity score(s) outside [%d, %d]", out_of_range, low, high)

    # -----------------------------
    # Summary (audit-friendly)
    # -----------------------------
    summary = {
        "rows_original": int(len(out)),
        "rows_accepted": int(len(accepted)),
        "rows_rejected": int(len(rejected)),
        "duplicate_rows": int(accepted.drop(columns="input_order").duplicated().sum()),
        "comorbidity_out_of_range": out_of_range,
        "resolved_columns": resolved,
        "null_ratio_by_column": (
            accepted[list(ENCOUNTER_COLUMNS)].isna().mean().round(4).to_dict()
            if len(accepted) else {}
        ),
    }

    return IngestionResult(df=accepted, rejected=rejected, summary=summary)
