import pandas as pd

from readmission.core.ingestion import prepare_encounters
from readmission.core.intervals import (
    GAP_STATUS_FIRST_VISIT,
    GAP_STATUS_INDETERMINATE,
    GAP_STATUS_MEASURED,
    add_intervals,
)
from readmission.core.sequencer import sequence_encounters


def _measured(df):
    return add_intervals(sequence_encounters(prepare_encounters(df).df))


def test_sequence_is_chronological_per_patient(cohort_df):
    sequenced = sequence_encounters(prepare_encounters(cohort_df).df)

    for _, visits in sequenced.groupby("patient_key"):
        assert visits["admission_time"].is_monotonic_increasing
        assert visits["visit_index"].tolist() == list(range(len(visits)))


def test_sequence_preserves_patient_counts(cohort_df):
    prepared = prepare_encounters(cohort_df).df
    sequenced = sequence_encounters(prepared)

    assert (
        sequenced["patient_key"].value_counts().sort_index().tolist()
        == prepared["patient_key"].value_counts().sort_index().tolist()
    )


def test_same_day_admissions_keep_input_order():
    df = pd.DataFrame({
        "patient_id": ["A", "A", "A"],
        "admission_date": ["2024-01-05", "2024-01-05", "2024-01-01"],
        "discharge_date": ["2024-01-06", "2024-01-07", "2024-01-02"],
        "diagnosis": ["first", "second", "earliest"],
    })

    sequenced = sequence_encounters(prepare_encounters(df).df)

    assert sequenced["diagnosis"].tolist() == ["earliest", "first", "second"]
    assert pd.isna(sequenced.loc[0, "predecessor_order"])
    assert sequenced["predecessor_order"].tolist()[1:] == [2, 0]


def test_gap_days_are_discharge_to_admission(scenario_p_df):
    measured = _measured(scenario_p_df)

    gaps = measured["gap_days"].tolist()
    assert pd.isna(gaps[0])
    assert gaps[1:] == [25, 23]
    assert measured["gap_status"].tolist() == [
        GAP_STATUS_FIRST_VISIT,
        GAP_STATUS_MEASURED,
        GAP_STATUS_MEASURED,
    ]


def test_missing_predecessor_discharge_is_indeterminate():
    df = pd.DataFrame({
        "patient_id": ["A", "A"],
        "admission_date": ["2024-01-01", "2024-02-01"],
        "discharge_date": [None, "2024-02-03"],
    })

    measured = _measured(df)

    assert pd.isna(measured.loc[1, "gap_days"])
    assert measured.loc[1, "gap_status"] == GAP_STATUS_INDETERMINATE


def test_negative_values_are_flagged_not_dropped():
    df = pd.DataFrame({
        "patient_id": ["A", "A"],
        "admission_date": ["2024-01-01", "2024-01-05"],
        "discharge_date": ["2024-01-08", "2024-01-03"],
    })

    measured = _measured(df)

    assert measured["gap_days"].tolist()[1] == -3
    assert measured["overlapping"].tolist() == [False, True]
    assert measured["length_of_stay"].tolist() == [7, -2]
    assert measured["invalid_interval"].tolist() == [False, True]


def test_previous_diagnosis_follows_the_sequence():
    df = pd.DataFrame({
        "patient_id": ["A", "A", "B"],
        "admission_date": ["2024-02-01", "2024-01-01", "2024-01-01"],
        "discharge_date": ["2024-02-03", "2024-01-02", "2024-01-02"],
        "diagnosis": ["COPD", "Heart Failure", "Pneumonia"],
    })

    sequenced = sequence_encounters(prepare_encounters(df).df)

    previous = sequenced["previous_diagnosis"].tolist()
    assert pd.isna(previous[0])
    assert previous[1] == "Heart Failure"
    assert pd.isna(previous[2])
