"""Core engine - ingestion, per-patient sequencing and population analytics."""

from .ingestion import load_encounters, prepare_encounters
from .pipeline import AnalysisResult, run_pipeline
from .risk_tiers import RiskTier, classify_gap
from .scoring import RiskLabel, calculate_lace, composite_score, risk_label
from .validator import DataQualityReport, DataQualityValidator

__all__ = [
    "load_encounters",
    "prepare_encounters",
    "AnalysisResult",
    "run_pipeline",
    "RiskTier",
    "classify_gap",
    "RiskLabel",
    "calculate_lace",
    "composite_score",
    "risk_label",
    "DataQualityReport",
    "DataQualityValidator",
]
