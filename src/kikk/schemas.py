"""
Domain models for kikk.

Pydantic models shared by the remote client, the local fallback store and the
export pipeline. Python attributes are snake_case; records serialize to
camelCase (``by_alias=True``), which is the shape of the hosted
``observations``/``species``/``export_logs`` tables and of the local blobs.

Taxon records keep the Artsdatabanken field names as aliases, including the
API's own spellings (``PrefferedPopularname``).
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

# =============================================================================
# Enums
# =============================================================================


class Gender(StrEnum):
    """Sex of the observed individuals."""

    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "unknown"


class MapLayer(StrEnum):
    """Raster base layer shown under the pins."""

    TOPO = "topo"
    SATELLITE = "satellite"


class Theme(StrEnum):
    """UI colour theme preference."""

    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class CamelModel(BaseModel):
    """Base for records that serialize with camelCase keys."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "str_strip_whitespace": True,
    }


# =============================================================================
# Geography
# =============================================================================


class LatLng(BaseModel):
    """WGS84 point in degrees."""

    lat: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    lng: float = Field(..., ge=-180, le=180, allow_inf_nan=False)


# =============================================================================
# Taxonomy
# =============================================================================


class TaxonRecord(BaseModel):
    """A species entry from the Artsdatabanken taxon search.

    Read-only reference data. Fields the API adds beyond these are kept
    as extras so the record round-trips unchanged.
    """

    model_config = {"populate_by_name": True, "extra": "allow"}

    id: int = Field(..., alias="Id")
    taxon_id: int | None = Field(None, alias="TaxonId")
    valid_scientific_name: str = Field("", alias="ValidScientificName")
    valid_scientific_name_id: int | None = Field(None, alias="ValidScientificNameId")
    preferred_popular_name: str | None = Field(None, alias="PrefferedPopularname")
    matched_name: str | None = Field(None, alias="MatchedName")
    taxon_group: str | None = Field(None, alias="TaxonGroup")
    taxon_group_id: int | None = Field(None, alias="TaxonGroupId")
    family: str | None = Field(None, alias="Family")
    genus: str | None = Field(None, alias="Genus")

    @property
    def display_name(self) -> str:
        """Vernacular name with the scientific name, or just the latter."""
        if self.preferred_popular_name:
            return f"{self.preferred_popular_name} ({self.valid_scientific_name})"
        return self.valid_scientific_name


# =============================================================================
# Observations
# =============================================================================


class SpeciesObservation(CamelModel):
    """One species' count within an observation."""

    id: str | None = None
    observation_id: str | None = None
    species: TaxonRecord
    gender: Gender = Gender.UNKNOWN
    count: int = Field(1, ge=1)
    comment: str | None = None
    age: str | None = None
    method: str | None = None
    activity: str | None = None
    created_at: datetime | None = None


class ObservationBase(CamelModel):
    """Fields shared by stored observations and create inputs."""

    location: LatLng
    uncertainty_radius: float = Field(10, gt=0, allow_inf_nan=False)
    location_name: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    comment: str = ""


class ObservationCreate(ObservationBase):
    """Input for a new observation. At least one species entry is required."""

    species_observations: list[SpeciesObservation] = Field(..., min_length=1)


class Observation(ObservationBase):
    """A stored sighting event."""

    id: str
    user_id: str | None = None
    species_observations: list[SpeciesObservation] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    last_exported_at: datetime | None = None
    export_count: int = 0

    @property
    def species_count(self) -> int:
        """Total individuals across all species entries."""
        return sum(s.count for s in self.species_observations)


# =============================================================================
# Saved locations
# =============================================================================


class UserLocationCreate(CamelModel):
    """Input for a new saved location."""

    name: str = Field(..., min_length=1)
    location: LatLng
    uncertainty_radius: float = Field(10, gt=0, allow_inf_nan=False)
    description: str | None = None


class UserLocation(UserLocationCreate):
    """A named, reusable point."""

    id: str
    user_id: str | None = None
    created_at: datetime
    updated_at: datetime


# =============================================================================
# Exports
# =============================================================================


class ExportLog(CamelModel):
    """Record of one completed spreadsheet export."""

    id: str | None = None
    user_id: str | None = None
    exported_at: datetime
    observation_ids: list[str] = Field(default_factory=list)
    file_name: str
    file_path: str | None = None
    observation_count: int = 0
    created_at: datetime | None = None
