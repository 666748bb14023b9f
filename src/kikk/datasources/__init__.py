"""External data source integrations.

Each subdirectory is one service with a consistent structure:

    datasources/{name}/
    ├── __init__.py       # Public API re-exports
    ├── client.py         # API URLs, constants (and the client, when stateful)
    └── {feature}.py      # Functions, one per endpoint/concept

Current sources:
  - supabase/        Hosted tables + storage for observations, locations, exports
  - artsdatabanken/  Species (taxon) search
  - nominatim/       Reverse geocoding

Adding a new datasource
-----------------------
1. Create ``datasources/{name}/`` with the files above.

2. Write functions that use the shared session and return pydantic models::

       from kikk.services.http import session

       def fetch_something(lat, lng) -> list[Something]:
           resp = session.get(API_URL, params={...})
           resp.raise_for_status()
           return [Something.model_validate(r) for r in resp.json()]

3. Re-export public API in ``__init__.py`` with ``__all__``.

4. Add tests in ``tests/test_{name}.py``.
"""
