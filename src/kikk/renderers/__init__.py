"""Pure rendering functions: stored records -> export artifacts.

Renderers take model objects and return rows or bytes. No side effects, no
I/O beyond in-memory buffers, no Prefect decorators. Used by
``flows/export.py``, which decides where the bytes go.

Public API:
  - spreadsheet: EXPORT_COLUMNS, build_export_rows, build_workbook
"""

from kikk.renderers.spreadsheet import EXPORT_COLUMNS, SHEET_NAME, build_export_rows, build_workbook

__all__ = [
    "EXPORT_COLUMNS",
    "SHEET_NAME",
    "build_export_rows",
    "build_workbook",
]
