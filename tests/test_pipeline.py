import pandas as pd
import pytest

from readmission.config.loader import load_config
from readmission.core.pipeline import (
    ENCOUNTER_STREAM_COLUMNS,
    build_encounter_stream,
    partition_by_patient,
    run_pipeline,
)
from readmission.core.ingestion import prepare_encounters


def test_scenario_p_end_to_end(scenario_p_df):
    result = run_pipeline(scenario_p_df)
    stream = result.encounters

    gaps = stream["gap_days"].tolist()
    assert pd.isna(gaps[0])
    assert gaps[1:] == [25, 23]
    assert stream["risk_tier"].tolist() == ["FIRST_VISIT", "MODERATE", "MODERATE"]
    assert stream["episode_id"].tolist() == [0, 1, 2]
    assert pd.isna(stream.loc[0, "predecessor_discharge_time"])
    assert stream.loc[1, "predecessor_discharge_time"] == pd.Timestamp("2024-01-24")


def test_stream_contract(cohort_df):
    result = run_pipeline(cohort_df)

    assert list(result.tables()["encounters"].columns) == ENCOUNTER_STREAM_COLUMNS
    assert len(result.encounters) == len(cohort_df)
    assert result.summary["patients"] == 3


def test_partitions_never_split_a_patient(cohort_df):
    prepared = prepare_encounters(cohort_df).df

    partitions = partition_by_patient(prepared, 3)

    seen = [set(p["patient_key"]) for p in partitions]
    for i, keys in enumerate(seen):
        for other in seen[i + 1:]:
            assert not keys & other
    assert sum(len(p) for p in partitions) == len(prepared)


def test_parallel_stream_matches_inline(cohort_df):
    prepared = prepare_encounters(cohort_df).df

    inline = build_encounter_stream(prepared, workers=1)
    threaded = build_encounter_stream(prepared, workers=3, executor_kind="thread")

    pd.testing.assert_frame_equal(
        inline[ENCOUNTER_STREAM_COLUMNS],
        threaded[ENCOUNTER_STREAM_COLUMNS],
    )


def test_anomalies_are_counted_not_raised():
    df = pd.DataFrame({
        "patient_id": ["A", "A", "A", None, "B", "B"],
        "admission_date": [
            "2024-01-01", "2024-01-05", "2024-02-01", "2024-02-01",
            "2024-01-01", "2024-03-01",
        ],
        "discharge_date": [
            "2024-01-08", "2024-01-03", "2024-02-02", "2024-02-03",
            None, "2024-03-02",
        ],
    })

    result = run_pipeline(df)
    quality = result.quality

    assert result.quality_passed
    assert quality.rejected_records == 1
    assert quality.accepted_records == 5
    assert quality.overlapping_encounters == 1
    assert quality.invalid_intervals == 1
    assert quality.indeterminate_gaps == 1
    assert quality.anomaly_count == 4
    assert len(result.rejected) == 1


def test_indeterminate_gaps_stay_out_of_gap_statistics():
    df = pd.DataFrame({
        "patient_id": ["B", "B"],
        "admission_date": ["2024-01-01", "2024-03-01"],
        "discharge_date": [None, "2024-03-02"],
    })

    result = run_pipeline(df)

    assert result.tier_distribution["count"].sum() == 0
    assert result.summary["readmissions"]["total_readmissions"] == 0


def test_strict_quality_fails_on_anomalies():
    config = load_config(None)
    config["quality"]["strict"] = True

    df = pd.DataFrame({
        "patient_id": ["A", "A"],
        "admission_date": ["2024-01-01", "2024-01-05"],
        "discharge_date": ["2024-01-08", "2024-01-09"],
    })

    result = run_pipeline(df, config)

    assert not result.quality_passed


def test_rankings_per_configured_measure(cohort_df):
    result = run_pipeline(cohort_df)

    assert set(result.rankings) == {"bill_amount", "gap_days"}
    bills = result.rankings["bill_amount"]
    assert bills.loc[0, "bill_amount"] == 9100.0
    assert bills.loc[0, "rank"] == 1
    assert bills["ranked"].sum() == 6


def test_continuity_threshold_from_config(cohort_df):
    config = load_config(None)
    config["intervals"]["continuity_threshold"] = 10

    stream = run_pipeline(cohort_df, config).encounters
    a_episodes = stream[stream["patient_key"] == "A"]["episode_id"].tolist()

    assert a_episodes == [0, 0, 0, 1]


def test_missing_required_column_fails_the_batch():
    with pytest.raises(ValueError):
        run_pipeline(pd.DataFrame({"diagnosis": ["COPD"]}))
