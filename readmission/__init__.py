"""
Readmission Analytics v1.0

Per-patient hospitalization interval analytics: readmission gaps,
risk tiers, episodes of care, cohort distributions, population
ranks and composite risk scores.
"""

from .__version__ import __version__

# Keep package init lightweight
# Automation and visuals should be imported explicitly

from .config import load_config, DEFAULT_CONFIG
from .core import (
    AnalysisResult,
    DataQualityReport,
    RiskLabel,
    RiskTier,
    calculate_lace,
    classify_gap,
    composite_score,
    run_pipeline,
)

__all__ = [
    "__version__",
    "load_config",
    "DEFAULT_CONFIG",
    "AnalysisResult",
    "DataQualityReport",
    "RiskLabel",
    "RiskTier",
    "calculate_lace",
    "classify_gap",
    "composite_score",
    "run_pipeline",
]
