"""
Prefect flows.

Flows:
- export: Render observations to xlsx, keep a local copy, and record the
  export in the hosted datastore when one is configured

Usage (local):
    kikk export
    python -m kikk.flows.export

Usage (Prefect):
    prefect server start  # Optional, for dashboard
    kikk export
"""
