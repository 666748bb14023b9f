"""
Shared HTTP client with an explicit timeout and no automatic retry.

Provides a pre-configured ``requests.Session`` used by every datasource. Failed
requests are surfaced to the caller as-is; re-submitting is the user's call,
so the mounted adapter never retries. Every request carries a default timeout
so a hung connection fails instead of waiting forever.

Usage::

    from kikk.services.http import session

    resp = session.get("https://api.example.com/v1/data")
    resp.raise_for_status()
"""

from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from kikk import __version__

#: No retries on any method or status; errors go straight to the caller.
NO_RETRY = Retry(
    total=0,
    connect=0,
    read=0,
    redirect=0,
    status=0,
    raise_on_status=False,  # let resp.raise_for_status() handle it
)

DEFAULT_TIMEOUT = 30  # seconds

#: Identifying client header (required by the Nominatim usage policy).
USER_AGENT = f"kikk/{__version__} (field observation log)"


def create_session(
    retry: Retry | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> requests.Session:
    """
    Build a ``requests.Session`` with the adapter mounted.

    Args:
        retry: Custom retry strategy (defaults to ``NO_RETRY``).
        timeout: Default timeout applied to every request.
    """
    s = requests.Session()
    adapter = HTTPAdapter(max_retries=retry if retry is not None else NO_RETRY)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers["User-Agent"] = USER_AGENT

    # Inject a default timeout so callers don't need to pass ``timeout=``.
    # Session.request forwards ``timeout=None`` explicitly, so None counts as unset.
    _original_send = s.send

    def _send_with_timeout(
        prepared: requests.PreparedRequest, **kwargs: object
    ) -> requests.Response:
        if kwargs.get("timeout") is None:
            kwargs["timeout"] = timeout
        return _original_send(prepared, **kwargs)  # type: ignore[arg-type]

    s.send = _send_with_timeout  # type: ignore[method-assign]
    return s


#: Module-level session. Import and use directly.
session: requests.Session = create_session()
