"""Debounced species search-as-you-type.

Each call to ``search`` waits out the debounce delay; if another call arrives
meanwhile, the earlier one is superseded and returns ``None``. Only the most
recent term's results are applied to ``results``, so a slow earlier request
can never overwrite a newer one. Results are cached per term through the
query cache.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

import requests

from kikk.datasources.artsdatabanken import API_BASE, MIN_TERM_LENGTH, search_species
from kikk.query import QueryClient

if TYPE_CHECKING:
    from kikk.config import Settings
    from kikk.schemas import TaxonRecord

logger = logging.getLogger(__name__)

SPECIES = "species"
DEFAULT_DEBOUNCE = 0.3  # seconds

SearchFn = Callable[..., list["TaxonRecord"]]


class SpeciesSearch:
    def __init__(
        self,
        queries: QueryClient | None = None,
        *,
        search_fn: SearchFn = search_species,
        debounce: float = DEFAULT_DEBOUNCE,
        min_length: int = MIN_TERM_LENGTH,
        stale_time: float | None = None,
        taxon_group: int | None = None,
        api_base: str = API_BASE,
    ) -> None:
        self.queries = queries or QueryClient()
        self.search_fn = search_fn
        self.debounce = debounce
        self.min_length = min_length
        self.stale_time = stale_time
        self.taxon_group = taxon_group
        self.api_base = api_base
        self.results: list[TaxonRecord] = []
        self.term = ""
        self._generation = 0

    @classmethod
    def from_settings(cls, settings: Settings, queries: QueryClient | None = None) -> SpeciesSearch:
        return cls(
            queries,
            debounce=settings.search_debounce_seconds,
            min_length=settings.search_min_length,
            stale_time=settings.query_stale_seconds,
            api_base=settings.taxonomy_api,
        )

    async def search(self, term: str) -> list[TaxonRecord] | None:
        """
        Search for ``term`` after the debounce delay.

        Returns:
            The applied results, ``[]`` for short terms or failed lookups, or
            ``None`` if a newer call superseded this one.
        """
        self._generation += 1
        generation = self._generation
        term = term.strip()
        self.term = term

        if len(term) < self.min_length:
            self.results = []
            return []

        await asyncio.sleep(self.debounce)
        if generation != self._generation:
            return None

        try:
            found = await self.queries.fetch_query(
                (SPECIES, term, self.taxon_group),
                functools.partial(asyncio.to_thread, self._lookup, term),
                stale_time=self.stale_time,
            )
        except (requests.RequestException, ValueError) as e:
            logger.warning("Species search for %r failed: %s", term, e)
            found = []

        if generation != self._generation:
            return None
        self.results = found
        return found

    def _lookup(self, term: str) -> list[TaxonRecord]:
        return self.search_fn(term, taxon_group=self.taxon_group, api_base=self.api_base)
