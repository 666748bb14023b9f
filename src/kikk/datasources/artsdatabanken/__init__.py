"""Artsdatabanken taxonomy data source.

Public API:
  - client: API_BASE, MIN_TERM_LENGTH
  - species: search_species
"""

from kikk.datasources.artsdatabanken.client import API_BASE, MIN_TERM_LENGTH
from kikk.datasources.artsdatabanken.species import search_species

__all__ = [
    "API_BASE",
    "MIN_TERM_LENGTH",
    "search_species",
]
