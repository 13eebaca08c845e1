import pandas as pd
import pytest

from readmission.core.outliers import bill_zscores, los_outliers
from readmission.core.pipeline import run_pipeline
from readmission.core.trends import CHURNED, monthly_readmission_trend, patient_activity


def test_bill_zscores_flag_the_expensive_stay():
    df = pd.DataFrame({
        "patient_key": ["A", "B", "C", "D", "E", "F"],
        "bill_amount": [100.0, 100.0, 100.0, 100.0, 1000.0, None],
    })

    scored = bill_zscores(df)

    assert len(scored) == 5
    top = scored.iloc[0]
    assert top["patient_key"] == "E"
    assert top["z_score"] == pytest.approx(720 / (162000 ** 0.5))
    assert top["outlier_band"] == "above"


def test_constant_bills_have_no_zscore():
    df = pd.DataFrame({"patient_key": ["A", "B"], "bill_amount": [50.0, 50.0]})

    scored = bill_zscores(df)

    assert scored["z_score"].isna().all()
    assert scored["outlier_band"].isna().all()


def test_los_outliers_against_diagnosis_average():
    df = pd.DataFrame({
        "patient_key": ["A", "B", "C", "D", "E"],
        "diagnosis": ["X", "X", "X", "X", "Y"],
        "length_of_stay": pd.array([2, 2, 2, 10, 30], dtype="Int64"),
    })

    flagged = los_outliers(df, multiplier=2.0)

    assert flagged["patient_key"].tolist() == ["D"]
    assert flagged.loc[0, "diagnosis_avg_los"] == pytest.approx(4.0)


def test_monthly_trend(cohort_df):
    trend = run_pipeline(cohort_df).monthly_trend

    assert trend["encounters"].tolist() == [3, 2, 2]
    assert trend["readmissions"].tolist() == [2, 1, 0]
    assert trend["readmission_rate"].tolist() == pytest.approx([2 / 3, 0.5, 0.0])
    assert pd.isna(trend.loc[0, "rate_change"])
    assert trend.loc[1, "rate_change"] == pytest.approx(0.5 - 2 / 3)


def test_patient_activity_defaults_to_latest_admission(cohort_df):
    encounters = run_pipeline(cohort_df).encounters

    activity = patient_activity(encounters).set_index("patient_key")

    assert activity.loc["C", "days_since_last_visit"] == 0
    assert activity.loc["A", "days_since_last_visit"] == 8
    assert (activity["status"] == "Active").all()


def test_patient_activity_churn_window(cohort_df):
    encounters = run_pipeline(cohort_df).encounters

    activity = patient_activity(encounters, churn_days=30).set_index("patient_key")

    assert activity.loc["B", "status"] == CHURNED
    assert activity.loc["A", "status"] != CHURNED


def test_patient_activity_explicit_reference_date(cohort_df):
    encounters = run_pipeline(cohort_df).encounters

    activity = patient_activity(encounters, as_of="2025-06-01").set_index("patient_key")

    assert (activity["status"] == CHURNED).all()
