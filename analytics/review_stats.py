"""
analytics/review_stats.py
-------------------------
Per-product rating averages for the vendor reviews page.
"""

from __future__ import annotations

from typing import Any, Dict, List


def product_averages(rows: List[Dict[str, Any]], top: int = 10) -> List[Dict[str, Any]]:
    """
    Average overall rating per product, most-reviewed first.

    Parameters
    ----------
    rows : list of dict
        Rows with ``product_name`` and ``overall_rating``.
    top : int
        How many products to keep.

    Returns
    -------
    list of dict
        ``{"product_name", "avg_rating" (1 decimal), "review_count"}``.
    """
    stats: Dict[str, List[float]] = {}
    for row in rows:
        name = row.get("product_name")
        rating = row.get("overall_rating")
        if not name or rating is None:
            continue
        stats.setdefault(name, []).append(float(rating))

    averages = [
        {
            "product_name": name,
            "avg_rating": round(sum(ratings) / len(ratings), 1),
            "review_count": len(ratings),
        }
        for name, ratings in stats.items()
    ]
    averages.sort(key=lambda a: -a["review_count"])
    return averages[:top]
