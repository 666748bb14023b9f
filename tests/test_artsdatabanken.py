"""Tests for the Artsdatabanken species search."""

from __future__ import annotations

from unittest.mock import Mock, patch

import pytest
import requests
from conftest import TAXA

from kikk.datasources.artsdatabanken import API_BASE, search_species


def _mock_response(payload: object) -> Mock:
    resp = Mock()
    resp.json.return_value = payload
    resp.raise_for_status = Mock()
    return resp


class TestSearchSpecies:
    """Test the /taxon lookup."""

    @patch("kikk.datasources.artsdatabanken.species.session.get")
    def test_parses_results(self, mock_get: Mock) -> None:
        mock_get.return_value = _mock_response([TAXA["kjottmeis"], TAXA["blameis"]])

        results = search_species("meis")

        assert [r.valid_scientific_name for r in results] == ["Parus major", "Cyanistes caeruleus"]
        assert results[0].preferred_popular_name == "kjøttmeis"
        url = mock_get.call_args.args[0]
        assert url == f"{API_BASE}/taxon"
        assert mock_get.call_args.kwargs["params"] == {"term": "meis"}

    @patch("kikk.datasources.artsdatabanken.species.session.get")
    def test_taxon_group_filter(self, mock_get: Mock) -> None:
        mock_get.return_value = _mock_response([])

        search_species("meis", taxon_group=1)

        assert mock_get.call_args.kwargs["params"] == {"term": "meis", "taxonGroups": 1}

    @patch("kikk.datasources.artsdatabanken.species.session.get")
    def test_term_is_trimmed(self, mock_get: Mock) -> None:
        mock_get.return_value = _mock_response([])
        search_species("  skjære ")
        assert mock_get.call_args.kwargs["params"]["term"] == "skjære"

    @pytest.mark.parametrize("term", ["", "k", " k "])
    @patch("kikk.datasources.artsdatabanken.species.session.get")
    def test_short_terms_skip_request(self, mock_get: Mock, term: str) -> None:
        assert search_species(term) == []
        mock_get.assert_not_called()

    @patch("kikk.datasources.artsdatabanken.species.session.get")
    def test_custom_api_base(self, mock_get: Mock) -> None:
        mock_get.return_value = _mock_response([])
        search_species("meis", api_base="https://example.org/api/")
        assert mock_get.call_args.args[0] == "https://example.org/api/taxon"

    @patch("kikk.datasources.artsdatabanken.species.session.get")
    def test_empty_body(self, mock_get: Mock) -> None:
        mock_get.return_value = _mock_response(None)
        assert search_species("meis") == []

    @patch("kikk.datasources.artsdatabanken.species.session.get")
    def test_http_error_propagates(self, mock_get: Mock) -> None:
        resp = _mock_response([])
        resp.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
        mock_get.return_value = resp

        with pytest.raises(requests.HTTPError):
            search_species("meis")
