"""
Two-body relations shared by the encounter and transit models.

Every function accepts scalars or JAX arrays. The formulas themselves are
jit-compiled kernels; the public wrappers check the input domain so that an
out-of-range square root, arcsine or arccosine raises a DomainError instead
of returning NaN.
"""
import jax.numpy as jnp
from jax import jit

from .errors import ConfigurationError, DomainError


def check_domain(condition, message: str) -> None:
    """Raise a DomainError unless `condition` holds for every element."""
    # NaN inputs make the condition False, so they are rejected as well.
    if not bool(jnp.all(condition)):
        raise DomainError(message)


def _conic_sign(eccentricity, is_ellipse) -> float:
    if is_ellipse is None:
        check_domain(jnp.asarray(eccentricity) != 1.0,
                     "Parabolic orbits (e == 1) are not supported")
        is_ellipse = bool(jnp.all(jnp.asarray(eccentricity) < 1.0))
    return 1.0 if is_ellipse else -1.0


@jit
def _vis_viva_squared(mu, r, a, s):
    return mu * (2.0 / r + s / a)


@jit
def _conic_radius(theta, e, a, sign):
    return sign * a * (1.0 - e**2) / (1.0 + e * jnp.cos(theta))


@jit
def _turn_angle(e):
    return 2.0 * jnp.arcsin(1.0 / e)


def vis_viva_speed(mu, radius, semi_major_axis, is_ellipse: bool = True):
    """
    Orbital speed from the vis-viva equation.

    v = sqrt(mu * (2/r + s/a)) with s = -1 for an ellipse and s = +1 for a
    hyperbola, where a is the magnitude of the semi-major axis.

    Args:
        mu: Gravitational parameter of the central body (m^3/s^2)
        radius: Distance from the central body (m)
        semi_major_axis: Semi-major axis magnitude (m)
        is_ellipse: True for e < 1, False for e > 1

    Returns:
        Speed in m/s

    Raises:
        DomainError: if the argument of the square root is negative.
    """
    s = -1.0 if is_ellipse else 1.0
    v2 = _vis_viva_squared(mu, jnp.asarray(radius, dtype=float), semi_major_axis, s)
    check_domain(v2 >= 0.0,
                 "Vis-viva speed is imaginary: radius lies outside the orbit "
                 f"(mu={mu}, a={semi_major_axis})")
    return jnp.sqrt(v2)


def circular_speed(mu, radius):
    """Speed of a circular orbit of the given radius (m/s)."""
    ratio = mu / jnp.asarray(radius, dtype=float)
    check_domain(ratio >= 0.0, "Circular speed requires mu / r >= 0")
    return jnp.sqrt(ratio)


def semi_latus_rectum(eccentricity, semi_major_axis, is_ellipse=None):
    """
    Semi-latus rectum p = sign * a * (1 - e^2).

    sign is +1 for an ellipse and -1 for a hyperbola, so that p > 0 with a
    given as a positive magnitude in both cases.
    """
    sign = _conic_sign(eccentricity, is_ellipse)
    return sign * semi_major_axis * (1.0 - eccentricity**2)


def radius_at_angle(true_anomaly, eccentricity, semi_major_axis, is_ellipse=None):
    """
    Orbit equation r(theta) = sign * a * (1 - e^2) / (1 + e * cos(theta)).

    Args:
        true_anomaly: Angle from periapsis in the direction of motion (rad)
        eccentricity: Orbit eccentricity (e != 1)
        semi_major_axis: Semi-major axis magnitude (m)
        is_ellipse: Conic type; inferred from the eccentricity when None

    Returns:
        Radius in m

    Raises:
        DomainError: for a parabolic orbit or for an angle beyond the
            asymptote of a hyperbola, where the radius is not positive.
    """
    sign = _conic_sign(eccentricity, is_ellipse)
    r = _conic_radius(jnp.asarray(true_anomaly, dtype=float), eccentricity,
                      semi_major_axis, sign)
    check_domain(jnp.isfinite(r) & (r > 0.0),
                 "True anomaly lies outside the branch of the conic "
                 f"(e={eccentricity}, a={semi_major_axis})")
    return r


def angle_at_radius(radius, eccentricity, semi_major_axis,
                    radial_speed_positive: bool = True, is_ellipse=None):
    """
    Invert the orbit equation for the true anomaly at a given radius.

    Each radius is reached twice per orbit; radial_speed_positive selects
    the outbound branch (theta in [0, pi]) and False the inbound one.

    Raises:
        ConfigurationError: for a circular orbit, where the angle is undefined.
        DomainError: if the radius is never reached on this orbit.
    """
    if eccentricity == 0:
        raise ConfigurationError("A circular orbit has no radius-defined true anomaly")
    p = semi_latus_rectum(eccentricity, semi_major_axis, is_ellipse)
    cos_theta = (p / jnp.asarray(radius, dtype=float) - 1.0) / eccentricity
    check_domain(jnp.abs(cos_theta) <= 1.0,
                 f"Radius {radius} is not reached on the orbit "
                 f"(e={eccentricity}, a={semi_major_axis})")
    theta = jnp.arccos(cos_theta)
    return theta if radial_speed_positive else -theta


def hyperbolic_eccentricity(v_inf, periapsis_radius, mu):
    """
    Eccentricity of a flyby hyperbola, e = 1 + v_inf^2 * r_p / mu.
    """
    return 1.0 + v_inf**2 * periapsis_radius / mu


def turn_angle(eccentricity):
    """
    Deflection of the v-infinity vector by a hyperbolic flyby, 2 * asin(1/e).

    Raises:
        DomainError: if e < 1, which is not a hyperbolic flyby.
    """
    e = jnp.asarray(eccentricity, dtype=float)
    check_domain(e >= 1.0, f"Turn angle requires a hyperbolic eccentricity (e >= 1), got {eccentricity}")
    return _turn_angle(e)
