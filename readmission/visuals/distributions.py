from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from readmission.core.risk_tiers import RiskTier, TIER_LABELS


def gap_histogram(encounters: pd.DataFrame, out: Path):
    """Histogram of measured readmission gaps with the tier boundaries marked."""
    gaps = encounters["gap_days"].dropna().astype("float64")
    if gaps.empty:
        return None

    fig, ax = plt.subplots(figsize=(6, 3))
    sns.histplot(gaps, bins=30, ax=ax, color="#4C72B0")

    for boundary in (7, 14, 30):
        ax.axvline(boundary, linestyle="--", linewidth=0.8, color="grey")

    ax.set_title("Days between discharge and readmission", fontsize=11, pad=10)
    ax.set_xlabel("Gap (days)")
    ax.set_ylabel("Readmissions")
    ax.grid(axis="y", linestyle="--", alpha=0.4)

    fig.tight_layout()
    fig.savefig(out, dpi=200, bbox_inches="tight")
    plt.close(fig)
    return Path(out)


def tier_bar(tier_distribution: pd.DataFrame, out: Path):
    """Readmission count per risk tier; first visits are left out."""
    data = tier_distribution[tier_distribution["group_key"].astype(str) != RiskTier.FIRST_VISIT.value]
    data = data[data["count"] > 0]
    if data.empty:
        return None

    order = [t for t in TIER_LABELS if t in set(data["group_key"].astype(str))]

    fig, ax = plt.subplots(figsize=(6, 3))
    sns.barplot(
        x=data["count"].to_numpy(),
        y=data["group_key"].astype(str).to_numpy(),
        order=order,
        ax=ax,
        color="#C44E52",
    )

    critical = data[data["group_key"].astype(str) == RiskTier.CRITICAL.value]["pct_of_total"]
    share = float(critical.iloc[0]) if len(critical) else 0.0

    ax.set_title(
        f"{share:.1f}% of readmissions happen within a week",
        fontsize=11,
        pad=10,
    )
    ax.set_xlabel("Readmissions")
    ax.set_ylabel("Risk tier")
    ax.grid(axis="x", linestyle="--", alpha=0.4)

    fig.tight_layout()
    fig.savefig(out, dpi=200, bbox_inches="tight")
    plt.close(fig)
    return Path(out)
