"""
Sleft Signals — Referral Visualization Component
------------------------------------------------
Reusable helpers that turn a referral brief into tables and Plotly figures.

Design
------
- Pure functions, no Streamlit imports (pages call these).
- Input is the JSON brief returned by POST /api/brief or /api/snapshot.
"""

from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd
import plotly.express as px

SOURCE_COLUMNS = ["name", "specialty", "fitScore", "rating", "reviewCount", "address", "phone", "website"]


def sources_to_frame(sources: List[Dict[str, Any]]) -> pd.DataFrame:
    """
    Referral sources as a DataFrame in display order.

    Columns missing from the payload are added empty so the table layout is
    stable between Serper and demo data.
    """
    df = pd.DataFrame(sources or [])
    for col in SOURCE_COLUMNS:
        if col not in df.columns:
            df[col] = None
    return df[SOURCE_COLUMNS + [c for c in df.columns if c not in SOURCE_COLUMNS]]


def build_fit_score_figure(sources: List[Dict[str, Any]], title: str = "Referral Source Fit Scores"):
    """Horizontal bar chart of fit score per source, best at the top."""
    df = sources_to_frame(sources)
    if df.empty:
        raise ValueError("No referral sources to plot.")

    df = df.sort_values("fitScore", ascending=True, kind="stable")
    fig = px.bar(
        df,
        x="fitScore",
        y="name",
        color="specialty",
        orientation="h",
        title=title,
        range_x=[0, 100],
        hover_data=["rating", "reviewCount", "address"],
    )
    fig.update_layout(legend_title_text="Specialty", yaxis_title=None, xaxis_title="Fit score")
    return fig


def build_specialty_mix_figure(specialty_counts: Dict[str, int], title: str = "Sources by Specialty"):
    """Pie chart of how many sources each adjacent specialty contributed."""
    if not specialty_counts:
        raise ValueError("No specialty counts to plot.")
    data = pd.DataFrame(
        {"Specialty": list(specialty_counts.keys()), "Sources": list(specialty_counts.values())}
    )
    return px.pie(data, names="Specialty", values="Sources", title=title)
