import pandas as pd
import pytest


@pytest.fixture
def scenario_p_df():
    """
    One patient, three stays with 25 and 23 day gaps between them.
    """
    return pd.DataFrame({
        "patient_id": ["P", "P", "P"],
        "admission_date": ["2024-01-15", "2024-02-18", "2024-03-20"],
        "discharge_date": ["2024-01-24", "2024-02-25", "2024-03-29"],
        "diagnosis": ["Heart Failure", "Heart Failure", "Heart Failure"],
        "bill_amount": [1200.0, 900.0, 1500.0],
    })


@pytest.fixture
def cohort_df():
    """
    Deterministic multi-patient extract.

    A: gaps 5, 10, 40 (frequent flyer, 2 of 3 rapid)
    B: gap 1 (continuous care, one episode)
    C: single visit
    Rows are deliberately out of chronological order.
    """
    return pd.DataFrame({
        "patient_id": ["A", "B", "A", "C", "A", "B", "A"],
        "admission_date": [
            "2024-01-08", "2024-02-01", "2024-01-01", "2024-03-10",
            "2024-03-02", "2024-02-06", "2024-01-20",
        ],
        "discharge_date": [
            "2024-01-10", "2024-02-05", "2024-01-03", "2024-03-12",
            "2024-03-04", "2024-02-08", "2024-01-22",
        ],
        "diagnosis": [
            "Heart Failure", "COPD", "Heart Failure", "Pneumonia",
            "Heart Failure", "COPD", "Heart Failure",
        ],
        "age": [82, 64, 82, 45, 82, 64, 82],
        "admission_type": [
            "Emergency", "Elective", "Emergency", "Elective",
            "Emergency", "Urgent", "emergency",
        ],
        "comorbidity_score": [6, 2, 6, 0, 8, 2, 7],
        "previous_admissions_12m": [1, 0, 0, 0, 3, 1, 2],
        "bill_amount": [5000.0, 800.0, 4200.0, 300.0, 9100.0, 650.0, None],
        "readmitted_30_days": ["Yes", "No", "No", "No", "No", "Yes", "Yes"],
    })
