"""
End-to-end readmission interval analysis.

Per-patient stages (sequencing, intervals, tiers, episodes) run
independently on patient partitions, optionally on a worker pool.
Population stages (distributions, ranks, scores) run once every
partition has come back.
"""

import concurrent.futures
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from readmission.config.loader import load_config
from readmission.core.aggregator import (
    describe_groups,
    frequent_flyers,
    readmission_summary,
    tier_distribution,
    window_distribution,
)
from readmission.core.episodes import assign_episodes, summarize_episodes
from readmission.core.ingestion import load_encounters, prepare_encounters
from readmission.core.intervals import add_intervals
from readmission.core.outliers import bill_zscores, los_outliers
from readmission.core.ranking import cost_concentration, rank_measure, top_n_per_group
from readmission.core.risk_tiers import classify_gaps
from readmission.core.scoring import score_patients
from readmission.core.sequencer import sequence_encounters
from readmission.core.trends import monthly_readmission_trend, patient_activity
from readmission.core.validator import DataQualityReport, DataQualityValidator
from readmission.utils.logger import get_logger

log = get_logger("pipeline")

ENCOUNTER_STREAM_COLUMNS = [
    "patient_key",
    "admission_time",
    "discharge_time",
    "predecessor_discharge_time",
    "gap_days",
    "risk_tier",
    "episode_id",
    "visit_index",
    "length_of_stay",
    "gap_status",
    "invalid_interval",
    "overlapping",
    "diagnosis",
    "previous_diagnosis",
    "bill_amount",
    "readmitted_flag",
    "input_order",
]


@dataclass
class AnalysisResult:
    encounters: pd.DataFrame
    tier_distribution: pd.DataFrame
    diagnosis_distribution: pd.DataFrame
    window_distribution: pd.DataFrame
    frequent_flyers: pd.DataFrame
    risk_scores: pd.DataFrame
    episodes: pd.DataFrame
    rankings: Dict[str, pd.DataFrame]
    top_bills_by_diagnosis: pd.DataFrame
    bill_outliers: pd.DataFrame
    los_outliers: pd.DataFrame
    monthly_trend: pd.DataFrame
    patient_activity: pd.DataFrame
    rejected: pd.DataFrame
    quality: DataQualityReport
    quality_passed: bool = True
    summary: Dict[str, Any] = field(default_factory=dict)

    def tables(self) -> Dict[str, pd.DataFrame]:
        """Every tabular output keyed by a file-friendly name."""
        tables = {
            "encounters": self.encounters[ENCOUNTER_STREAM_COLUMNS],
            "tier_distribution": self.tier_distribution,
            "diagnosis_distribution": self.diagnosis_distribution,
            "window_distribution": self.window_distribution,
            "frequent_flyers": self.frequent_flyers,
            "risk_scores": self.risk_scores,
            "episodes": self.episodes,
            "top_bills_by_diagnosis": self.top_bills_by_diagnosis,
            "bill_outliers": self.bill_outliers,
            "los_outliers": self.los_outliers,
            "monthly_trend": self.monthly_trend,
            "patient_activity": self.patient_activity,
            "rejected": self.rejected,
        }
        for measure, ranked in self.rankings.items():
            tables[f"ranking_{measure}"] = ranked
        return tables


# =====================================================
# PER-PARTITION STAGES
# =====================================================

def process_partition(df: pd.DataFrame, continuity_threshold: float = 1) -> pd.DataFrame:
    """Sequence, measure, classify and segment one group of whole patients."""
    sequenced = sequence_encounters(df)
    measured = add_intervals(sequenced)
    measured["risk_tier"] = classify_gaps(measured["gap_days"])
    return assign_episodes(measured, continuity_threshold)


def partition_by_patient(df: pd.DataFrame, n_partitions: int) -> List[pd.DataFrame]:
    """
    Split encounters into at most ``n_partitions`` frames by hashed patient key.

    A patient never spans two partitions.
    """
    if n_partitions <= 1 or df.empty:
        return [df]

    hashes = pd.util.hash_array(df["patient_key"].to_numpy(dtype=object))
    slots = hashes % np.uint64(n_partitions)

    partitions = [df[slots == slot] for slot in range(n_partitions)]
    return [p for p in partitions if not p.empty]


def _map_partitions(
    partitions: List[pd.DataFrame],
    continuity_threshold: float,
    workers: int,
    executor_kind: str,
) -> List[pd.DataFrame]:
    if workers <= 1 or len(partitions) <= 1:
        return [process_partition(p, continuity_threshold) for p in partitions]

    pool_cls = (
        concurrent.futures.ProcessPoolExecutor
        if executor_kind == "process"
        else concurrent.futures.ThreadPoolExecutor
    )

    results: List[Optional[pd.DataFrame]] = [None] * len(partitions)
    with pool_cls(max_workers=workers) as executor:
        futures = {
            executor.submit(process_partition, part, continuity_threshold): i
            for i, part in enumerate(partitions)
        }
        for future in concurrent.futures.as_completed(futures):
            # a failed partition fails the whole batch
            results[futures[future]] = future.result()

    return results


def build_encounter_stream(
    df: pd.DataFrame,
    continuity_threshold: float = 1,
    workers: int = 1,
    executor_kind: str = "process",
) -> pd.DataFrame:
    """Run the per-patient stages over every partition and merge them back."""
    partitions = partition_by_patient(df, workers)
    log.info("Processing %d patient partition(s) with %d worker(s)", len(partitions), workers)

    processed = _map_partitions(partitions, continuity_threshold, workers, executor_kind)

    stream = pd.concat(processed, ignore_index=True)
    return stream.sort_values(["patient_key", "visit_index"], kind="mergesort").reset_index(drop=True)


# =====================================================
# ENTRY POINT
# =====================================================

def run_pipeline(records: Any, config: Optional[Dict[str, Any]] = None) -> AnalysisResult:
    """
    Analyze a batch of encounter records.

    Args:
        records: DataFrame, iterable of mappings or path to a CSV/Excel file
        config: Merged configuration (see readmission.config); defaults if omitted

    Returns:
        AnalysisResult with the per-encounter stream, aggregate tables
        and data quality counts
    """
    config = config or load_config(None)

    threshold = config["intervals"]["continuity_threshold"]
    cohorts = config["cohorts"]
    ranking = config["ranking"]
    execution = config["execution"]

    # -------------------------------------------------
    # 1. Ingestion boundary
    # -------------------------------------------------
    raw = load_encounters(records)
    ingested = prepare_encounters(raw, config.get("columns"))
    log.info(
        "Ingested %d encounter(s), rejected %d",
        len(ingested.df),
        ingested.rejected_count,
    )

    # -------------------------------------------------
    # 2. Per-patient stages (parallel over partitions)
    # -------------------------------------------------
    encounters = build_encounter_stream(
        ingested.df,
        continuity_threshold=threshold,
        workers=execution["workers"],
        executor_kind=execution["executor"],
    )

    # -------------------------------------------------
    # 3. Data quality
    # -------------------------------------------------
    validator = DataQualityValidator(strict=bool(config["quality"].get("strict")))
    passed, quality = validator.validate(
        encounters,
        rejected_count=ingested.rejected_count,
        duplicate_rows=ingested.summary.get("duplicate_rows", 0),
    )

    # -------------------------------------------------
    # 4. Population stages (after every partition)
    # -------------------------------------------------
    rankings = {
        measure: rank_measure(
            encounters[["patient_key", "admission_time", "diagnosis", measure]],
            measure,
            n_buckets=int(ranking["n_buckets"]),
        ).sort_values("rank", kind="mergesort", na_position="last").reset_index(drop=True)
        for measure in ranking.get("measures", [])
        if measure in encounters.columns
    }

    result = AnalysisResult(
        encounters=encounters,
        tier_distribution=tier_distribution(encounters),
        diagnosis_distribution=describe_groups(encounters, "diagnosis", "gap_days"),
        window_distribution=window_distribution(encounters),
        frequent_flyers=frequent_flyers(
            encounters,
            min_readmissions=int(cohorts["min_readmissions"]),
            rapid_threshold=cohorts["rapid_threshold"],
        ),
        risk_scores=score_patients(encounters),
        episodes=summarize_episodes(encounters),
        rankings=rankings,
        top_bills_by_diagnosis=top_n_per_group(
            encounters[["patient_key", "admission_time", "diagnosis", "bill_amount"]],
            "bill_amount",
            "diagnosis",
            n=int(ranking.get("top_n_per_diagnosis", 3)),
        ),
        bill_outliers=bill_zscores(encounters[["patient_key", "admission_time", "diagnosis", "bill_amount"]]),
        los_outliers=los_outliers(
            encounters[["patient_key", "admission_time", "diagnosis", "length_of_stay"]],
            multiplier=float(config["outliers"]["los_multiplier"]),
        ),
        monthly_trend=monthly_readmission_trend(encounters),
        patient_activity=patient_activity(encounters, churn_days=int(config["trends"]["churn_days"])),
        rejected=ingested.rejected,
        quality=quality,
        quality_passed=passed,
        summary={
            "patients": int(encounters["patient_key"].nunique()),
            "encounters": int(len(encounters)),
            "readmissions": readmission_summary(encounters, rapid_threshold=cohorts["rapid_threshold"]),
            "cost_concentration": cost_concentration(
                encounters, n_buckets=int(ranking.get("concentration_buckets", 100))
            ),
            "ingestion": {k: v for k, v in ingested.summary.items() if k != "null_ratio_by_column"},
        },
    )

    log.info(
        "Analysis complete: %d patient(s), %d frequent flyer(s), %d anomaly(ies)",
        result.summary["patients"],
        len(result.frequent_flyers),
        quality.anomaly_count,
    )
    return result
