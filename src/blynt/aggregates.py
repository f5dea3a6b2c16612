from __future__ import annotations

import dataclasses
import logging
from types import MappingProxyType
from typing import Dict

import numpy as np
import pandas as pd

from .jurisdictions import to_abbreviation
from .normalize import slugify
from .taxonomy import StateNode, TaxonomySnapshot

LOGGER = logging.getLogger(__name__)

BUSINESS_AGGREGATE_COLUMNS = ["city", "state", "rating"]


def _safe_mean(total: pd.Series, count: pd.Series) -> pd.Series:
    values = np.where(count > 0, total / count.where(count > 0, 1), 0.0)
    return pd.Series(np.round(values.astype(float), 2), index=total.index)


def business_city_stats(businesses: pd.DataFrame) -> pd.DataFrame:
    """Per (state_abbr, city_slug) business counts and rating sums."""
    if businesses.empty:
        return pd.DataFrame(columns=["state_abbr", "city_slug", "business_count", "rating_sum", "rated_count"])
    df = businesses.copy()
    for column in BUSINESS_AGGREGATE_COLUMNS:
        if column not in df.columns:
            df[column] = None
    df["state_abbr"] = df["state"].apply(lambda s: to_abbreviation(s) if isinstance(s, str) else None)
    df["city_slug"] = df["city"].apply(lambda c: slugify(c) if isinstance(c, str) else "")
    df["rating"] = pd.to_numeric(df["rating"], errors="coerce")

    unknown_state = df["state_abbr"].isna()
    if unknown_state.any():
        LOGGER.warning("Skipping %d businesses with an unknown jurisdiction", int(unknown_state.sum()))
    df = df[~unknown_state & (df["city_slug"] != "")]

    grouped = df.groupby(["state_abbr", "city_slug"])
    stats = grouped.agg(
        business_count=("city_slug", "count"),
        rating_sum=("rating", "sum"),
        rated_count=("rating", "count"),
    ).reset_index()
    return stats


def apply_business_aggregates(snapshot: TaxonomySnapshot, businesses: pd.DataFrame) -> TaxonomySnapshot:
    """Return a new snapshot with business counts and average ratings filled in.

    ``businesses`` needs ``city`` and ``state`` (abbreviation or full name)
    and may carry ``rating``. Spelling variants that share a city slug land
    on the same node. Rows for cities outside the taxonomy are skipped.
    """
    stats = business_city_stats(businesses)
    known = pd.Series(
        [snapshot.get_city(a, s) is not None for a, s in zip(stats["state_abbr"], stats["city_slug"])],
        index=stats.index,
        dtype=bool,
    )
    if (~known).any():
        skipped = stats[~known]
        LOGGER.info(
            "Skipping %d businesses in %d cities missing from the taxonomy",
            int(skipped["business_count"].sum()),
            len(skipped),
        )
        stats = stats[known]

    if stats.empty:
        return snapshot.with_states(snapshot.states)

    stats = stats.assign(average_rating=_safe_mean(stats["rating_sum"], stats["rated_count"]))
    by_state = stats.groupby("state_abbr")[["business_count", "rating_sum", "rated_count"]].sum()
    by_state = by_state.assign(average_rating=_safe_mean(by_state["rating_sum"], by_state["rated_count"]))

    city_stats = {
        (row.state_abbr, row.city_slug): (int(row.business_count), float(row.average_rating))
        for row in stats.itertuples()
    }
    state_stats = by_state.to_dict(orient="index")
    states: Dict[str, StateNode] = {}
    for abbr, state in snapshot.states.items():
        if abbr not in state_stats:
            states[abbr] = state
            continue
        cities = {}
        for slug, city in state.cities.items():
            if (abbr, slug) in city_stats:
                count, rating = city_stats[(abbr, slug)]
                city = dataclasses.replace(city, business_count=count, average_rating=rating)
            cities[slug] = city
        state_row = state_stats[abbr]
        states[abbr] = dataclasses.replace(
            state,
            cities=MappingProxyType(cities),
            total_businesses=int(state_row["business_count"]),
            average_rating=float(state_row["average_rating"]),
        )
    LOGGER.info(
        "Applied aggregates for %d businesses across %d cities",
        int(stats["business_count"].sum()),
        len(stats),
    )
    return snapshot.with_states(states)
