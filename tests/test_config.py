import pytest

from readmission.config.defaults import DEFAULT_CONFIG
from readmission.config.loader import load_config


def test_defaults_without_file():
    config = load_config(None)

    assert config["intervals"]["continuity_threshold"] == 1
    assert config["cohorts"]["min_readmissions"] == 3
    assert config["execution"]["workers"] == 1
    assert config["output_dir"] == "runs"


def test_defaults_are_not_mutated():
    config = load_config(None)
    config["ranking"]["measures"].append("length_of_stay")

    assert "length_of_stay" not in DEFAULT_CONFIG["ranking"]["measures"]


def test_user_sections_merge_over_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "intervals:\n"
        "  continuity_threshold: 3\n"
        "execution:\n"
        "  workers: 4\n"
        "columns:\n"
        "  patient_key: mrn\n"
    )

    config = load_config(str(path))

    assert config["intervals"]["continuity_threshold"] == 3
    assert config["execution"]["workers"] == 4
    assert config["execution"]["executor"] == "process"
    assert config["columns"] == {"patient_key": "mrn"}


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_non_mapping_yaml_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(ValueError):
        load_config(str(path))


def test_invalid_executor_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("execution:\n  executor: cluster\n")

    with pytest.raises(ValueError):
        load_config(str(path))


def test_invalid_bucket_count_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("ranking:\n  n_buckets: 0\n")

    with pytest.raises(ValueError):
        load_config(str(path))


def test_workers_are_clamped(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("execution:\n  workers: 0\n")

    assert load_config(str(path))["execution"]["workers"] == 1
