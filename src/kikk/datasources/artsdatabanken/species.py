"""Species search against the Artsdatabanken ``/taxon`` endpoint."""

from __future__ import annotations

from typing import Any

from kikk.datasources.artsdatabanken.client import API_BASE, MIN_TERM_LENGTH
from kikk.schemas import TaxonRecord
from kikk.services.http import session


def search_species(
    term: str,
    *,
    taxon_group: int | None = None,
    api_base: str = API_BASE,
) -> list[TaxonRecord]:
    """
    Search taxa by free-text name (vernacular or scientific).

    Args:
        term: Search text. Terms shorter than 2 characters return ``[]``
              without a request.
        taxon_group: Optional ``taxonGroups`` filter.
        api_base: API root, overridable from settings.

    Returns:
        Matching taxa in API order.

    Raises:
        requests.HTTPError: If the API request fails.
    """
    term = term.strip()
    if len(term) < MIN_TERM_LENGTH:
        return []

    params: dict[str, Any] = {"term": term}
    if taxon_group is not None:
        params["taxonGroups"] = taxon_group

    resp = session.get(f"{api_base.rstrip('/')}/taxon", params=params)
    resp.raise_for_status()
    results: list[dict[str, Any]] = resp.json() or []
    return [TaxonRecord.model_validate(r) for r in results]
