from difflib import get_close_matches
from typing import Dict, List, Optional
import pandas as pd


# =====================================================
# ENCOUNTER SEMANTIC COLUMN MAP
# =====================================================
# Canonical encounter field -> accepted source names.
# Admissions extracts rarely agree on naming, so every
# canonical field carries the common synonyms.

SEMANTIC_COLUMN_MAP: Dict[str, List[str]] = {
    # ---------- Identity ----------
    "patient_key": ["patient_key", "patient_id", "patientid", "pid", "patient", "mrn", "member_id"],

    # ---------- Dates ----------
    "admission_time": ["admission_time", "admission_date", "admit_date", "admission", "admit_time"],
    "discharge_time": ["discharge_time", "discharge_date", "disch_date", "discharge"],

    # ---------- Clinical ----------
    "diagnosis": ["diagnosis", "primary_diagnosis", "dx", "condition", "primary_dx"],
    "comorbidity_score": ["comorbidity_score", "comorbidity", "charlson_score", "comorb_score"],
    "age": ["age", "patient_age", "age_years"],
    "admission_type": ["admission_type", "admit_type", "acuity"],
    "previous_admissions_12m": [
        "previous_admissions_12m", "prior_admissions_12m", "ed_visits_12m", "prior_admissions",
    ],

    # ---------- Financial ----------
    "bill_amount": ["bill_amount", "total_bill_amount", "billing_amount", "charges", "claim_amount"],

    # ---------- Outcomes ----------
    "readmitted_flag": ["readmitted_flag", "readmitted_30_days", "readmitted", "readmit", "readmission_flag"],
}

# Columns that carry dates; fuzzy matching is never used for them
# because "admission" and "discharge" are close enough to collide.
DATE_FIELDS = ("admission_time", "discharge_time")


# =====================================================
# COLUMN RESOLUTION ENGINE
# =====================================================

def resolve_column(
    df: pd.DataFrame,
    semantic_key: str,
    cutoff: float = 0.85,
    fuzzy: bool = True,
) -> Optional[str]:
    """
    Resolve a canonical encounter field to an actual dataframe column.

    Resolution strategy:
    1. Exact match (case-insensitive)
    2. Synonym match from SEMANTIC_COLUMN_MAP
    3. Fuzzy match fallback (optional)

    Returns:
        Actual column name if resolved, else None
    """

    if df is None or semantic_key is None:
        return None

    cols = list(df.columns)
    cols_lower = {str(c).lower(): c for c in cols}

    semantic_key = semantic_key.lower()

    # -----------------------------
    # 1. Exact match
    # -----------------------------
    if semantic_key in cols_lower:
        return cols_lower[semantic_key]

    # -----------------------------
    # 2. Synonym match (map order wins)
    # -----------------------------
    for candidate in SEMANTIC_COLUMN_MAP.get(semantic_key, []):
        if candidate in cols_lower:
            return cols_lower[candidate]

    if not fuzzy:
        return None

    # -----------------------------
    # 3. Fuzzy fallback (last resort)
    # -----------------------------
    matches = get_close_matches(
        semantic_key,
        cols_lower.keys(),
        n=1,
        cutoff=cutoff
    )

    return cols_lower[matches[0]] if matches else None


def resolve_encounter_columns(
    df: pd.DataFrame,
    overrides: Optional[Dict[str, str]] = None,
) -> Dict[str, str]:
    """
    Map every resolvable canonical field to its source column.

    Explicit overrides win over resolution; a source column is
    never assigned to two canonical fields.
    """
    overrides = overrides or {}
    resolved: Dict[str, str] = {}
    taken = set()

    for field, source in overrides.items():
        if source in df.columns:
            resolved[field] = source
            taken.add(source)

    for field in SEMANTIC_COLUMN_MAP:
        if field in resolved:
            continue
        source = resolve_column(df, field, fuzzy=field not in DATE_FIELDS)
        if source is not None and source not in taken:
            resolved[field] = source
            taken.add(source)

    return resolved
