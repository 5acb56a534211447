"""Horizontal and vertical error kernels."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class SphericalEarth:
    """Spherical Earth constants used for error scoring.

    Haversine on a sphere is not geodesically exact; at indoor test-point
    separations the error against the WGS-84 ellipsoid stays well under 0.5%.
    """

    radius_m: float = 6_371_000.0
    meters_per_degree: float = 111_000.0


EARTH = SphericalEarth()
EARTH_RADIUS_M = EARTH.radius_m
METERS_PER_DEGREE = EARTH.meters_per_degree


class VerticalDatum(str, Enum):
    """Vertical reference of a reported altitude."""

    ELLIPSOID = "HAE"
    GEOID = "MSL"
    UNKNOWN = "UNKNOWN"


def horizontal_distance_m(lat1_deg: float, lon1_deg: float, lat2_deg: float, lon2_deg: float) -> float:
    """Great-circle distance between two points in meters (Haversine).

    Args:
        lat1_deg: Latitude of the first point in degrees.
        lon1_deg: Longitude of the first point in degrees.
        lat2_deg: Latitude of the second point in degrees.
        lon2_deg: Longitude of the second point in degrees.

    Returns:
        Distance in meters, always >= 0.
    """

    phi1 = math.radians(lat1_deg)
    phi2 = math.radians(lat2_deg)
    d_phi = math.radians(lat2_deg - lat1_deg)
    d_lambda = math.radians(lon2_deg - lon1_deg)

    a = math.sin(d_phi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    a = min(max(a, 0.0), 1.0)
    return 2.0 * EARTH_RADIUS_M * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))


def geoid_separation_m(altitude_hae_m: float | None, altitude_geoid_m: float | None) -> float | None:
    """Return the geoid separation N = HAE - geoid altitude, if both are known."""

    if altitude_hae_m is None or altitude_geoid_m is None:
        return None
    return altitude_hae_m - altitude_geoid_m


def vertical_delta_m(
    reported_altitude_m: float,
    reported_datum: VerticalDatum,
    truth_altitude_ellipsoid_m: float,
    *,
    reported_altitude_hae_m: float | None = None,
    reported_altitude_geoid_m: float | None = None,
) -> float:
    """Signed vertical offset (reported - truth) in meters.

    Strategy, in priority order:
      1. With both HAE and geoid altitudes for the fix, the geoid separation
         moves the reported altitude onto the ellipsoid before differencing.
      2. Otherwise the reported altitude is differenced naively against the
         truth HAE; a lone HAE column is preferred since it shares the datum.
    """

    separation = geoid_separation_m(reported_altitude_hae_m, reported_altitude_geoid_m)
    if separation is not None:
        if reported_datum is VerticalDatum.GEOID:
            reported_hae = reported_altitude_m + separation
        elif reported_datum is VerticalDatum.ELLIPSOID:
            reported_hae = reported_altitude_m
        else:
            reported_hae = float(reported_altitude_hae_m)
        return reported_hae - truth_altitude_ellipsoid_m

    if reported_altitude_hae_m is not None:
        return reported_altitude_hae_m - truth_altitude_ellipsoid_m
    return reported_altitude_m - truth_altitude_ellipsoid_m


def vertical_error_m(
    reported_altitude_m: float,
    reported_datum: VerticalDatum,
    truth_altitude_ellipsoid_m: float,
    *,
    reported_altitude_hae_m: float | None = None,
    reported_altitude_geoid_m: float | None = None,
    precomputed_error_m: float | None = None,
) -> float:
    """Absolute vertical error in meters.

    A pre-computed error from the source row is trusted as a magnitude. It
    carries no reliable sign, so only the altitude difference from
    :func:`vertical_delta_m` feeds signed quantities such as bias.
    """

    if precomputed_error_m is not None:
        return abs(float(precomputed_error_m))
    return abs(
        vertical_delta_m(
            reported_altitude_m,
            reported_datum,
            truth_altitude_ellipsoid_m,
            reported_altitude_hae_m=reported_altitude_hae_m,
            reported_altitude_geoid_m=reported_altitude_geoid_m,
        )
    )


def display_altitudes_m(
    truth_altitude_ellipsoid_m: float,
    *,
    reported_altitude_hae_m: float | None,
    reported_altitude_geoid_m: float | None,
    reported_altitude_m: float,
) -> tuple[float, float]:
    """Return (truth, reported) altitudes on the geoid datum for map display.

    Map viewers draw "absolute" altitudes above mean sea level. When the
    separation is unknown both sides are returned on the ellipsoid.
    """

    separation = geoid_separation_m(reported_altitude_hae_m, reported_altitude_geoid_m)
    reported_hae = reported_altitude_hae_m if reported_altitude_hae_m is not None else reported_altitude_m
    if separation is None:
        return truth_altitude_ellipsoid_m, reported_hae
    return truth_altitude_ellipsoid_m - separation, float(reported_altitude_geoid_m)
