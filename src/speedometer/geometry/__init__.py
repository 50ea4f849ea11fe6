from .distance import EARTH_RADIUS_M, haversine_m

__all__ = ["EARTH_RADIUS_M", "haversine_m"]
