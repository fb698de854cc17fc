# viz_tools.py
# Distribution reports for generated records
# - RecordLogger: flattens PlaybackRecords into rows
# - distribution_summary: observed vs declared share per value
# - print_distribution_report / plot_distribution
#
# Requirements: pandas, matplotlib

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
import os
import pandas as pd
import matplotlib.pyplot as plt

from dist import probabilities
from models import PlaybackRecord

# -------------------- Logger --------------------

RECORD_COLUMNS = ["datetime", "month", "day", "hour_of_day", "event_type",
                  "country", "movie_id", "movie_rank"]

@dataclass
class RecordLogger:
    """
    Flat per-record rows; one row per PlaybackRecord.
    """
    rows: List[Dict[str, Any]] = field(default_factory=list)

    def log_record(self, rec: PlaybackRecord):
        self.rows.append({
            "datetime":    rec.datetime,
            "month":       int(rec.datetime.month),
            "day":         int(rec.datetime.day),
            "hour_of_day": int(rec.hour_of_day),
            "event_type":  rec.event_type.value,
            "country":     rec.country,
            "movie_id":    int(rec.movie.id),
            "movie_rank":  int(rec.movie.rank),
        })

    def extend(self, recs: Iterable[PlaybackRecord]):
        for rec in recs:
            self.log_record(rec)

    def to_dataframe(self) -> pd.DataFrame:
        df = pd.DataFrame(self.rows, columns=RECORD_COLUMNS)
        if not df.empty:
            df = df.sort_values(["datetime"]).reset_index(drop=True)
        return df

# -------------------- Summary --------------------

def distribution_summary(df: pd.DataFrame, column: str,
                         expected: Optional[Sequence[Tuple[Any, float]]] = None) -> pd.DataFrame:
    """
    count/observed share per value of `column`.
    With `expected` (a weighted table), also expected share and delta = observed - expected.
    """
    if column not in df.columns or df.empty:
        out = pd.DataFrame({"value": [v for v, _ in (expected or [])]})
        out = out.drop_duplicates().reset_index(drop=True)
        out["count"] = 0
        out["observed"] = 0.0
        if expected is not None:
            probs = probabilities(expected)
            out["expected"] = [probs[v] for v in out["value"]]
            out["delta"] = -out["expected"]
        return out.sort_values("value").reset_index(drop=True)
    counts = df[column].value_counts()
    out = pd.DataFrame({"value": counts.index, "count": counts.values})
    total = int(out["count"].sum())
    out["observed"] = out["count"] / total if total else 0.0
    if expected is not None:
        probs = probabilities(expected)
        exp_df = pd.DataFrame({"value": list(probs.keys()), "expected": list(probs.values())})
        out = exp_df.merge(out, on="value", how="outer")
        out["count"] = out["count"].fillna(0).astype(int)
        out["observed"] = out["observed"].fillna(0.0)
        out["expected"] = out["expected"].fillna(0.0)
        out["delta"] = out["observed"] - out["expected"]
    return out.sort_values("value").reset_index(drop=True)

def max_abs_delta(summary: pd.DataFrame) -> float:
    if "delta" not in summary.columns or summary.empty:
        return 0.0
    return float(summary["delta"].abs().max())

def print_distribution_report(summary: pd.DataFrame, title: str, max_rows: int = 40):
    print(f"=== {title} ===")
    if summary.empty:
        print("no rows.")
        return
    has_exp = "expected" in summary.columns
    for _, r in summary.head(max_rows).iterrows():
        line = f"{str(r['value']):24s}: count={int(r['count']):7d} observed={r['observed']:.4f}"
        if has_exp:
            line += f" expected={r['expected']:.4f} delta={r['delta']:+.4f}"
        print(line)
    if has_exp:
        print(f"max |delta|: {max_abs_delta(summary):.4f}")

# -------------------- Plot --------------------

def plot_distribution(summary: pd.DataFrame, title: Optional[str] = None,
                      figsize: Tuple[float, float] = (10, 4), save_path: Optional[str] = None):
    """
    Bar chart of observed share, with expected share as markers when present.
    """
    if summary.empty:
        print("[plot_distribution] empty summary"); return
    labels = [str(v) for v in summary["value"]]
    xs = list(range(len(labels)))
    fig, ax = plt.subplots(figsize=figsize)
    ax.bar(xs, summary["observed"], color="#3498db", label="observed")
    if "expected" in summary.columns:
        ax.plot(xs, summary["expected"], "o", color="#e74c3c", label="expected")
    ax.set_xticks(xs)
    ax.set_xticklabels(labels, rotation=45, ha="right")
    ax.set_ylabel("share")
    ax.legend()
    if title:
        ax.set_title(title)
    fig.tight_layout()
    if save_path:
        d = os.path.dirname(save_path)
        if d:
            os.makedirs(d, exist_ok=True)
        fig.savefig(save_path)
        plt.close(fig)
    else:
        plt.show()
