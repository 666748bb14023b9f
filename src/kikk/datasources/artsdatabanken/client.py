"""Artsdatabanken (Norwegian Biodiversity Information Centre) API constants.

API docs: https://artskart.artsdatabanken.no/publicapi/swagger/index.html
"""

API_BASE = "https://artskart.artsdatabanken.no/publicapi/api"

#: Shorter search terms are not sent to the API.
MIN_TERM_LENGTH = 2
