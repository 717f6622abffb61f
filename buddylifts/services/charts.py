# buddylifts/services/charts.py
from __future__ import annotations

import io
from datetime import date
from typing import List, Sequence

# Matplotlib im Headless-Mode
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402


def _to_png(fig) -> bytes:
    buf = io.BytesIO()
    fig.savefig(buf, format="png")
    plt.close(fig)
    buf.seek(0)
    return buf.getvalue()


def completion_bar_png(labels: Sequence[str], values: Sequence[int], title: str) -> bytes:
    """
    Balkendiagramm: Gesamt-Erfüllung (%) je Teilnehmer.
    """
    fig, ax = plt.subplots(figsize=(7.5, 3.8), dpi=140)
    if values:
        bars = ax.bar(list(labels), list(values), color="#22c55e")
        for bar, value in zip(bars, values):
            ax.annotate(
                f"{value}%",
                (bar.get_x() + bar.get_width() / 2, bar.get_height()),
                ha="center", va="bottom", fontsize=8,
            )
    else:
        ax.text(0.5, 0.5, "No participants yet", ha="center", va="center", transform=ax.transAxes)
    ax.set_ylim(0, 110)
    ax.set_title(title)
    ax.set_ylabel("Completion (%)")
    ax.set_xlabel("Participant")
    ax.grid(axis="y", linestyle=":", alpha=0.4)
    plt.setp(ax.get_xticklabels(), rotation=18, ha="right")
    plt.tight_layout()
    return _to_png(fig)


def reps_history_png(days: List[date], totals: List[int], targets: List[int], title: str) -> bytes:
    """
    Liniendiagramm: geschaffte Gesamt-Wiederholungen pro Session über die Zeit,
    Zielwert gestrichelt.
    """
    fig, ax = plt.subplots(figsize=(7.5, 3.2), dpi=140)

    if totals:
        ax.plot(days, totals, marker="o", linewidth=2, label="Completed reps")
        ax.plot(days, targets, linestyle="--", linewidth=1, label="Target reps")
        ax.legend(loc="lower right", fontsize=8)
    else:
        ax.text(0.5, 0.5, "No data yet", ha="center", va="center", transform=ax.transAxes)

    ax.set_title(title)
    ax.set_ylabel("Reps")
    ax.set_xlabel("Date")
    ax.grid(True, linestyle=":", alpha=0.4)
    fig.autofmt_xdate()
    plt.tight_layout()
    return _to_png(fig)
