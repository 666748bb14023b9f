"""Distance approximations for short hops on the map."""

# Equirectangular approximation: one degree of latitude is ~111 km. Good
# enough at the scale of a field site; not for long distances.
METERS_PER_DEGREE: float = 111_000.0

# A moved pin gets a new place name once it is this far from the old one.
REGEOCODE_THRESHOLD_M: float = 100.0
