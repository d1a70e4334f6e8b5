import math
from typing import Any, Dict, Optional

from .numeric import as_number

EARTH_RADIUS_KM = 6371.0

# Propagation delay in fibre, roughly c / 1.47.
FIBER_MS_PER_KM = 0.0049

TERRESTRIAL_ROUTE_FACTOR = 1.3
SUBSEA_ROUTE_FACTOR = 1.5

ROUTE_FACTORS = {
    "terrestrial": TERRESTRIAL_ROUTE_FACTOR,
    "subsea": SUBSEA_ROUTE_FACTOR,
}


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two coordinates in kilometres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # rounding can leave `a` just outside [0, 1] for near-antipodal points
    a = min(1.0, max(0.0, a))
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def estimate_fiber_latency(
    lat1: Any,
    lon1: Any,
    lat2: Any,
    lon2: Any,
    route_factor: Optional[Any] = None,
    route: str = "terrestrial",
) -> Dict[str, Any]:
    """
    Fibre latency estimate between two points.

    The straight-line distance is stretched by a route-circuity factor
    (cables rarely run straight) and converted with FIBER_MS_PER_KM.
    Latencies are rounded to 0.1 ms, distances to whole kilometres.
    """
    factor = as_number(route_factor)
    if factor <= 0:
        factor = ROUTE_FACTORS.get(route, TERRESTRIAL_ROUTE_FACTOR)

    straight = haversine_km(
        as_number(lat1), as_number(lon1), as_number(lat2), as_number(lon2)
    )
    cable = straight * factor
    one_way = cable * FIBER_MS_PER_KM

    return {
        "straight_line_km": round(straight),
        "cable_route_km": round(cable),
        "route_factor": factor,
        "one_way_latency_ms": round(one_way, 1),
        "round_trip_latency_ms": round(one_way * 2, 1),
    }
