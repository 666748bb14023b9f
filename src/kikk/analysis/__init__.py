"""Pure helpers over stored observations and locations.

Dependency rule: analysis/ imports from ``kikk.schemas`` and ``kikk.reference``
only. It never fetches data, touches the disk or renders output.

Modules:
  - observations: recent species, export status
  - proximity: distances between points, nearby saved locations
"""

from kikk.analysis.observations import recent_species, unexported_count, unexported_observations
from kikk.analysis.proximity import distance_m, nearby_locations, needs_regeocode

__all__ = [
    "distance_m",
    "nearby_locations",
    "needs_regeocode",
    "recent_species",
    "unexported_count",
    "unexported_observations",
]
