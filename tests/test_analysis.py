"""Tests for observation helpers and proximity."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from conftest import observation_input, taxon

from kikk.analysis import (
    distance_m,
    nearby_locations,
    needs_regeocode,
    recent_species,
    unexported_count,
    unexported_observations,
)
from kikk.schemas import LatLng, Observation, SpeciesObservation, UserLocation

BASE = datetime(2026, 5, 1, tzinfo=UTC)


def _observation(obs_id: str, species: list[str], days: int, **fields: object) -> Observation:
    data = observation_input([1]).model_dump()
    data["species_observations"] = [SpeciesObservation(species=taxon(s)) for s in species]
    data.update(fields)
    stamp = BASE + timedelta(days=days)
    return Observation(**data, id=obs_id, created_at=stamp, updated_at=stamp)


def _location(name: str, lat: float, lng: float) -> UserLocation:
    return UserLocation(
        id=name, name=name, location=LatLng(lat=lat, lng=lng), created_at=BASE, updated_at=BASE
    )


class TestRecentSpecies:
    def test_newest_first_unique(self) -> None:
        observations = [
            _observation("a", ["kjottmeis", "blameis"], days=1),
            _observation("b", ["skjaere"], days=3),
            _observation("c", ["kjottmeis"], days=5),
        ]
        names = [t.valid_scientific_name for t in recent_species(observations)]
        assert names == ["Parus major", "Pica pica", "Cyanistes caeruleus"]

    def test_limit(self) -> None:
        observations = [_observation("a", ["kjottmeis", "blameis", "skjaere"], days=1)]
        assert len(recent_species(observations, limit=2)) == 2

    def test_empty(self) -> None:
        assert recent_species([]) == []


class TestUnexported:
    def test_filters_on_last_exported(self) -> None:
        fresh = _observation("a", ["kjottmeis"], days=1)
        done = _observation("b", ["kjottmeis"], days=1, last_exported_at=BASE, export_count=1)
        assert unexported_observations([fresh, done]) == [fresh]
        assert unexported_count([fresh, done]) == 1


class TestDistance:
    def test_zero(self) -> None:
        p = LatLng(lat=59.9, lng=10.7)
        assert distance_m(p, p) == 0

    def test_one_degree_latitude(self) -> None:
        assert distance_m(LatLng(lat=59, lng=10), LatLng(lat=60, lng=10)) == pytest.approx(111_000)

    def test_longitude_shrinks_with_latitude(self) -> None:
        at_equator = distance_m(LatLng(lat=0, lng=10), LatLng(lat=0, lng=11))
        in_oslo = distance_m(LatLng(lat=60, lng=10), LatLng(lat=60, lng=11))
        assert at_equator == pytest.approx(111_000)
        assert in_oslo == pytest.approx(55_500, rel=1e-3)


class TestNeedsRegeocode:
    def test_first_point(self) -> None:
        assert needs_regeocode(None, LatLng(lat=59.9, lng=10.7))

    def test_small_move(self) -> None:
        a = LatLng(lat=59.9, lng=10.7)
        b = LatLng(lat=59.9005, lng=10.7)  # ~55 m north
        assert not needs_regeocode(a, b)

    def test_large_move(self) -> None:
        a = LatLng(lat=59.9, lng=10.7)
        b = LatLng(lat=59.902, lng=10.7)  # ~222 m north
        assert needs_regeocode(a, b)


class TestNearbyLocations:
    def test_within_radius_nearest_first(self) -> None:
        here = LatLng(lat=59.9, lng=10.7)
        far = _location("far", 59.95, 10.7)
        near = _location("near", 59.9001, 10.7)
        mid = _location("mid", 59.901, 10.7)

        found = nearby_locations(here, [far, mid, near], radius_m=500)

        assert [loc.name for loc in found] == ["near", "mid"]
