"""Derived views over a list of observations."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from kikk.schemas import Observation, TaxonRecord


def recent_species(observations: list[Observation], limit: int = 5) -> list[TaxonRecord]:
    """Most recently observed unique taxa, newest first.

    A taxon's recency is the latest ``updated_at`` of any observation that
    contains it. Taxa are identified by their Artsdatabanken ``Id``.
    """
    latest: dict[int, tuple[datetime, TaxonRecord]] = {}
    for obs in observations:
        for entry in obs.species_observations:
            seen = latest.get(entry.species.id)
            if seen is None or obs.updated_at > seen[0]:
                latest[entry.species.id] = (obs.updated_at, entry.species)

    ranked = sorted(latest.values(), key=lambda pair: pair[0], reverse=True)
    return [taxon for _, taxon in ranked[:limit]]


def unexported_observations(observations: list[Observation]) -> list[Observation]:
    """Observations that have never been included in an export."""
    return [obs for obs in observations if obs.last_exported_at is None]


def unexported_count(observations: list[Observation]) -> int:
    return len(unexported_observations(observations))
