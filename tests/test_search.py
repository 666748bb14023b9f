"""Tests for the debounced species search."""

from __future__ import annotations

import asyncio
import threading
from typing import Any

import requests
from conftest import taxon

from kikk.config import Settings
from kikk.schemas import TaxonRecord
from kikk.search import SpeciesSearch


class RecordingSearch:
    """Stand-in for ``search_species`` that records terms."""

    def __init__(self, results: list[TaxonRecord] | None = None, error: Exception | None = None):
        self.terms: list[str] = []
        self.kwargs: list[dict[str, Any]] = []
        self.results = results if results is not None else [taxon("kjottmeis")]
        self.error = error

    def __call__(self, term: str, **kwargs: Any) -> list[TaxonRecord]:
        self.terms.append(term)
        self.kwargs.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.results


class TestShortTerms:
    def test_short_term_returns_empty_without_call(self) -> None:
        fn = RecordingSearch()
        search = SpeciesSearch(search_fn=fn, debounce=0)

        assert asyncio.run(search.search("k")) == []
        assert asyncio.run(search.search("  ")) == []
        assert fn.terms == []

    def test_short_term_clears_results(self) -> None:
        fn = RecordingSearch()
        search = SpeciesSearch(search_fn=fn, debounce=0)
        asyncio.run(search.search("meis"))
        assert search.results

        asyncio.run(search.search("m"))

        assert search.results == []


class TestDebounce:
    def test_call_made_after_debounce(self) -> None:
        fn = RecordingSearch()
        search = SpeciesSearch(search_fn=fn, debounce=0.05)

        async def scenario() -> None:
            pending = asyncio.ensure_future(search.search("kjøttmeis"))
            await asyncio.sleep(0.01)
            assert fn.terms == []
            assert await pending == [taxon("kjottmeis")]
            assert fn.terms == ["kjøttmeis"]

        asyncio.run(scenario())

    def test_rapid_typing_only_searches_last_term(self) -> None:
        fn = RecordingSearch()
        search = SpeciesSearch(search_fn=fn, debounce=0.02)

        async def scenario() -> list[Any]:
            return await asyncio.gather(
                search.search("kj"),
                search.search("kjø"),
                search.search("kjøtt"),
            )

        results = asyncio.run(scenario())

        assert results[:2] == [None, None]
        assert results[2] == [taxon("kjottmeis")]
        assert fn.terms == ["kjøtt"]
        assert search.term == "kjøtt"

    def test_superseded_search_does_not_apply_results(self) -> None:
        """A slow lookup that finishes after a newer search is discarded."""
        slow_results = [taxon("skjaere")]
        fast_results = [taxon("blameis")]
        started = threading.Event()
        release = threading.Event()

        def fn(term: str, **_: Any) -> list[TaxonRecord]:
            if term == "skjære":
                started.set()
                release.wait(timeout=5)
                return slow_results
            return fast_results

        search = SpeciesSearch(search_fn=fn, debounce=0.01)

        async def scenario() -> None:
            first = asyncio.ensure_future(search.search("skjære"))
            assert await asyncio.to_thread(started.wait, 5)

            assert await search.search("blåmeis") == fast_results
            assert search.results == fast_results

            release.set()
            assert await first is None
            assert search.results == fast_results
            assert search.term == "blåmeis"

        asyncio.run(scenario())


class TestLookup:
    def test_failure_returns_empty(self) -> None:
        fn = RecordingSearch(error=requests.ConnectionError("offline"))
        search = SpeciesSearch(search_fn=fn, debounce=0)

        assert asyncio.run(search.search("meis")) == []
        assert search.results == []

    def test_results_cached_per_term(self) -> None:
        fn = RecordingSearch()
        search = SpeciesSearch(search_fn=fn, debounce=0)

        async def scenario() -> None:
            await search.search("meis")
            await search.search("meis")

        asyncio.run(scenario())
        assert fn.terms == ["meis"]

    def test_taxon_group_and_api_base_passed(self) -> None:
        fn = RecordingSearch()
        search = SpeciesSearch(
            search_fn=fn, debounce=0, taxon_group=1, api_base="https://example.org/api"
        )
        asyncio.run(search.search("meis"))
        assert fn.kwargs == [{"taxon_group": 1, "api_base": "https://example.org/api"}]

    def test_from_settings(self) -> None:
        settings = Settings(
            search_debounce_seconds=0.5, search_min_length=3, query_stale_seconds=60, _env_file=None
        )
        search = SpeciesSearch.from_settings(settings)
        assert search.debounce == 0.5
        assert search.min_length == 3
        assert search.stale_time == 60
