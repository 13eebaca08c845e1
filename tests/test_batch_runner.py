import json

import pandas as pd

from readmission.automation.batch_runner import run_batch, run_single_file
from readmission.config.loader import load_config


def test_single_file_writes_tables_and_metadata(tmp_path, cohort_df):
    src = tmp_path / "cohort.csv"
    cohort_df.to_csv(src, index=False)

    result = run_single_file(src, load_config(None), tmp_path / "run")

    tables = tmp_path / "run" / "cohort" / "tables"
    assert (tables / "encounters.csv").exists()
    assert (tables / "frequent_flyers.csv").exists()
    assert (tables / "ranking_bill_amount.csv").exists()
    assert (tables / "summary.json").exists()
    assert (tmp_path / "run" / "cohort" / "input" / "cohort.csv").exists()

    flyers = pd.read_csv(tables / "frequent_flyers.csv")
    assert flyers["patient_key"].tolist() == ["A"]

    metadata = json.loads((tmp_path / "run" / "cohort" / "run.json").read_text())
    assert metadata["status"] == "completed"
    assert metadata["quality"]["accepted_records"] == 7
    assert "analysis" in metadata["metrics"]["stages"]
    assert result["quality_passed"]


def test_charts_are_rendered_when_enabled(tmp_path, cohort_df):
    src = tmp_path / "cohort.csv"
    cohort_df.to_csv(src, index=False)

    config = load_config(None)
    config["visuals"]["enabled"] = True

    result = run_single_file(src, config, tmp_path / "run")

    assert (tmp_path / "run" / "cohort" / "charts" / "gap_histogram.png").exists()
    assert "tier_bar" in result["outputs"]


def test_batch_isolates_failures(tmp_path, cohort_df):
    inbox = tmp_path / "inbox"
    inbox.mkdir()
    cohort_df.to_csv(inbox / "good.csv", index=False)
    pd.DataFrame({"ward": ["4B"]}).to_csv(inbox / "bad.csv", index=False)
    (inbox / "notes.txt").write_text("ignored")

    run_dir = run_batch(str(inbox), None, output_root=str(tmp_path / "runs"))

    assert (run_dir / "good" / "tables" / "encounters.csv").exists()
    failed = list((run_dir / "failed").iterdir())
    assert len(failed) == 1
    assert failed[0].name.startswith("bad_")

    metadata = json.loads((run_dir / "run.json").read_text())
    assert metadata["status"] == "completed_with_errors"
    assert len(metadata["errors"]) == 1
