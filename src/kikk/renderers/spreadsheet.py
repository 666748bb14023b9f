"""Observation spreadsheet renderer.

One row per species entry: an observation with three species produces three
rows that repeat the observation's location and dates. Column headers are
English; dates use the Norwegian ``dd.mm.yyyy, HH:MM:SS`` form in local time.
"""

from __future__ import annotations

import io
from typing import TYPE_CHECKING, Any

import pandas as pd
from openpyxl.utils import get_column_letter

if TYPE_CHECKING:
    from datetime import datetime

    from kikk.schemas import Observation

SHEET_NAME = "Observations"
MAX_COLUMN_WIDTH = 50
NEVER_EXPORTED = "Never"

EXPORT_COLUMNS: list[str] = [
    "Observation ID",
    "Location Name",
    "Latitude",
    "Longitude",
    "Uncertainty (m)",
    "Start Date",
    "End Date",
    "Species (Norwegian)",
    "Species (Scientific)",
    "Count",
    "Gender",
    "Age",
    "Method",
    "Activity",
    "Species Comment",
    "General Comment",
    "Created At",
    "Updated At",
    "Last Exported At",
    "Export Count",
]


def format_timestamp(value: datetime | None) -> str:
    """Render a timestamp the way Norwegian locale settings show it."""
    if value is None:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone()
    return value.strftime("%d.%m.%Y, %H:%M:%S")


def build_export_rows(observations: list[Observation]) -> list[dict[str, Any]]:
    """Flatten observations into one dict per species entry, keyed by column."""
    rows: list[dict[str, Any]] = []
    for obs in observations:
        for entry in obs.species_observations:
            rows.append(
                {
                    "Observation ID": obs.id,
                    "Location Name": obs.location_name or "",
                    "Latitude": obs.location.lat,
                    "Longitude": obs.location.lng,
                    "Uncertainty (m)": obs.uncertainty_radius,
                    "Start Date": format_timestamp(obs.start_date),
                    "End Date": format_timestamp(obs.end_date),
                    "Species (Norwegian)": entry.species.preferred_popular_name or "",
                    "Species (Scientific)": entry.species.valid_scientific_name,
                    "Count": entry.count,
                    "Gender": entry.gender.value,
                    "Age": entry.age or "",
                    "Method": entry.method or "",
                    "Activity": entry.activity or "",
                    "Species Comment": entry.comment or "",
                    "General Comment": obs.comment,
                    "Created At": format_timestamp(obs.created_at),
                    "Updated At": format_timestamp(obs.updated_at),
                    "Last Exported At": (
                        format_timestamp(obs.last_exported_at)
                        if obs.last_exported_at
                        else NEVER_EXPORTED
                    ),
                    "Export Count": obs.export_count or 0,
                }
            )
    return rows


def build_workbook(observations: list[Observation]) -> bytes:
    """
    Render observations as an xlsx workbook.

    The workbook has a single ``Observations`` sheet with a header row and one
    row per species entry. Column widths fit the longest value, capped at 50
    characters.

    Returns:
        The xlsx file content.
    """
    rows = build_export_rows(observations)
    frame = pd.DataFrame.from_records(rows, columns=EXPORT_COLUMNS)

    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=SHEET_NAME, index=False)
        sheet = writer.sheets[SHEET_NAME]
        for idx, column in enumerate(EXPORT_COLUMNS, start=1):
            longest = max([len(column), *(len(str(row[column])) for row in rows)])
            sheet.column_dimensions[get_column_letter(idx)].width = min(
                longest + 2, MAX_COLUMN_WIDTH
            )
    return buffer.getvalue()
