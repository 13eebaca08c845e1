"""
Population-wide ranking of a numeric measure.

Every rank flavour (competition, dense, bucket) and the cumulative
distribution come from one sorted view of the measure, built once
by RankIndex and reused. Null measures are never ranked; they come
back as <NA>.
"""

from typing import Any, Dict, Iterable, Union

import numpy as np
import pandas as pd

Values = Union[pd.Series, Iterable[Any]]


def _as_float_series(values: Values) -> pd.Series:
    series = values if isinstance(values, pd.Series) else pd.Series(list(values), dtype="object")
    return pd.to_numeric(series, errors="coerce").astype("float64")


class RankIndex:
    """
    Sorted view of a measure (the first pass of ranking).

    Args:
        values: Measure values, nulls allowed
        ascending: Rank 1 goes to the smallest value when True,
            to the largest when False
    """

    def __init__(self, values: Values, ascending: bool = True):
        numeric = _as_float_series(values)
        data = numeric.to_numpy()

        self.index = numeric.index
        self.ascending = ascending

        valid = np.flatnonzero(~np.isnan(data))
        keys = data[valid] if ascending else -data[valid]
        order = np.argsort(keys, kind="mergesort")

        self.positions = valid[order]
        self.sorted_values = data[self.positions]

        if self.size:
            self._breaks = np.r_[True, self.sorted_values[1:] != self.sorted_values[:-1]]
        else:
            self._breaks = np.zeros(0, dtype=bool)

    @property
    def size(self) -> int:
        return int(len(self.positions))

    def _scatter(self, ranked: np.ndarray, dtype: str) -> pd.Series:
        out = pd.Series(pd.NA, index=self.index, dtype=dtype)
        if self.size:
            out.iloc[self.positions] = ranked
        return out

    # -------------------------------------------------
    # ORDINAL RANKS
    # -------------------------------------------------
    def competition(self) -> pd.Series:
        """Ties share a rank; the next rank skips by the tie count (1, 1, 3)."""
        candidates = np.where(self._breaks, np.arange(1, self.size + 1), 0)
        return self._scatter(np.maximum.accumulate(candidates), "Int64")

    def dense(self) -> pd.Series:
        """Ties share a rank; the next rank is +1 (1, 1, 2)."""
        return self._scatter(np.cumsum(self._breaks), "Int64")

    # -------------------------------------------------
    # BUCKETS (NTILE)
    # -------------------------------------------------
    def buckets(self, n_buckets: int) -> pd.Series:
        """
        Split the sorted population into ``n_buckets`` near-equal buckets.

        When the size is not divisible, the first ``size % n_buckets``
        buckets hold one extra member.
        """
        if n_buckets < 1:
            raise ValueError(f"n_buckets must be >= 1, got {n_buckets}")

        base, extra = divmod(self.size, n_buckets)
        pos = np.arange(self.size)
        boundary = extra * (base + 1)

        if base == 0:
            assigned = pos + 1
        else:
            assigned = np.where(
                pos < boundary,
                pos // (base + 1) + 1,
                extra + (pos - boundary) // base + 1,
            )
        return self._scatter(assigned, "Int64")

    # -------------------------------------------------
    # CUMULATIVE DISTRIBUTION
    # -------------------------------------------------
    def cume_dist(self) -> pd.Series:
        """Fraction of the ranked population with a value <= each value, whatever the rank direction."""
        if not self.size:
            return self._scatter(np.zeros(0), "Float64")

        _, inverse, counts = np.unique(
            self.sorted_values, return_inverse=True, return_counts=True
        )
        fractions = np.cumsum(counts) / self.size
        return self._scatter(fractions[inverse], "Float64")


# =====================================================
# FUNCTIONAL API
# =====================================================

def competition_rank(values: Values, ascending: bool = False) -> pd.Series:
    return RankIndex(values, ascending).competition()


def dense_rank(values: Values, ascending: bool = False) -> pd.Series:
    return RankIndex(values, ascending).dense()


def bucket_rank(values: Values, n_buckets: int, ascending: bool = False) -> pd.Series:
    return RankIndex(values, ascending).buckets(n_buckets)


def cume_dist(values: Values) -> pd.Series:
    return RankIndex(values, ascending=True).cume_dist()


def rank_measure(
    df: pd.DataFrame,
    measure: str,
    n_buckets: int = 4,
    ascending: bool = False,
) -> pd.DataFrame:
    """
    Attach rank, dense_rank, bucket, cume_dist and a ranked flag for a measure.

    Ranks and buckets follow ``ascending``; cume_dist always counts values
    less than or equal to the row's own.
    """
    if measure not in df.columns:
        raise KeyError(f"Unknown measure column: {measure}")

    index = RankIndex(df[measure], ascending=ascending)
    out = df.copy()

    out["rank"] = index.competition().array
    out["dense_rank"] = index.dense().array
    out["bucket"] = index.buckets(n_buckets).array
    out["cume_dist"] = index.cume_dist().array
    out["ranked"] = out["rank"].notna().to_numpy(dtype=bool)

    return out


# =====================================================
# PARTITIONED RANKING & CONCENTRATION
# =====================================================

def top_n_per_group(
    df: pd.DataFrame,
    measure: str,
    group_by: str,
    n: int = 3,
) -> pd.DataFrame:
    """Rows whose measure is among the top ``n`` distinct values of their group (dense rank)."""
    measured = df[df[measure].notna() & df[group_by].notna()].copy()
    if measured.empty:
        return measured.assign(group_rank=pd.Series(dtype="Int64"))

    measured["group_rank"] = (
        measured.groupby(group_by, sort=False, observed=True)[measure]
        .rank(method="dense", ascending=False)
        .astype("int64")
    )
    top = measured[measured["group_rank"] <= n]
    return top.sort_values([group_by, "group_rank"], kind="mergesort").reset_index(drop=True)


def cost_concentration(
    df: pd.DataFrame,
    measure: str = "bill_amount",
    n_buckets: int = 100,
) -> Dict[str, Any]:
    """
    Share of total spend consumed by the top bucket of patients.

    With the default 100 buckets this is the top 1% (Pareto view).
    """
    spend = df.groupby("patient_key", sort=True)[measure].sum(min_count=1).dropna()
    total = float(spend.sum())

    if spend.empty:
        return {
            "patients": 0,
            "top_bucket_patients": 0,
            "top_bucket_spend": 0.0,
            "total_spend": 0.0,
            "top_bucket_share_pct": None,
        }

    buckets = bucket_rank(spend, n_buckets, ascending=False)
    top = spend[buckets == 1]

    return {
        "patients": int(len(spend)),
        "top_bucket_patients": int(len(top)),
        "top_bucket_spend": float(top.sum()),
        "total_spend": total,
        "top_bucket_share_pct": round(100.0 * float(top.sum()) / total, 2) if total else None,
    }
