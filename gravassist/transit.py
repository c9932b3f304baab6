"""
Time of flight along an elliptical or hyperbolic arc.

The arc between two true anomalies is approximated by chords. Each chord
spans a fixed angular step, its length comes from the law of cosines on the
two radii, and it is flown at the vis-viva speed of its first endpoint.
Cost is linear in the number of divisions.
"""
import logging
import math
from pathlib import Path
from typing import List, NamedTuple

import jax.numpy as jnp
from jax import jit
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .angles import angular_separation, normalize_angle
from .constants import DAY, G_CONST
from .errors import ConfigurationError
from .physics import angle_at_radius, radius_at_angle, vis_viva_speed

logger = logging.getLogger(__name__)

# Relative slack on the remaining-angle exit test, absorbs accumulated rounding.
STEP_TOLERANCE = 1e-9


class OrbitParameters(BaseModel):
    """
    Conic orbit around a central mass.

    Attributes:
        eccentricity: 0 <= e < 1 for an ellipse, e > 1 for a hyperbola
        semi_major_axis: Semi-major axis magnitude (m), positive for both conics
        central_mass: Mass of the body being orbited (kg)
        G: Gravitational constant (N*m^2/kg^2)
    """
    model_config = ConfigDict(frozen=True)

    eccentricity: float = Field(..., ge=0, description="Orbit eccentricity")
    semi_major_axis: float = Field(..., gt=0, description="Semi-major axis magnitude (m)")
    central_mass: float = Field(..., gt=0, description="Mass of the central body (kg)")
    G: float = Field(default=G_CONST, gt=0, description="Gravitational constant")

    @field_validator('eccentricity')
    @classmethod
    def validate_eccentricity(cls, v):
        if v == 1.0:
            raise ValueError("parabolic orbits (e == 1) are not supported")
        return v

    @model_validator(mode='after')
    def validate_finite(self):
        for name in ('eccentricity', 'semi_major_axis', 'central_mass'):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be finite")
        return self

    @property
    def is_ellipse(self) -> bool:
        return self.eccentricity < 1.0

    @property
    def mu(self) -> float:
        return self.G * self.central_mass

    def radius(self, true_anomaly):
        return radius_at_angle(true_anomaly, self.eccentricity, self.semi_major_axis,
                               self.is_ellipse)

    def speed(self, radius):
        return vis_viva_speed(self.mu, radius, self.semi_major_axis, self.is_ellipse)

    def save(self, filepath: str | Path) -> None:
        with open(Path(filepath), 'w') as f:
            f.write(self.model_dump_json(indent=2))

    @classmethod
    def load(cls, filepath: str | Path) -> 'OrbitParameters':
        with open(Path(filepath), 'r') as f:
            return cls.model_validate_json(f.read())


class ArcSample(NamedTuple):
    angle: float
    radius: float


class IntegrationResult(NamedTuple):
    """
    Attributes:
        total_distance: Arc length (m)
        total_time: Time of flight (s)
    """
    total_distance: float
    total_time: float

    @property
    def total_days(self) -> float:
        return self.total_time / DAY


def _march(angle_i: float, angle_f: float, step: float, divisions: int):
    """Yield the start angle of every chord from angle_i towards angle_f."""
    theta = angle_i
    for _ in range(divisions):
        yield theta
        if angular_separation(theta, angle_f, clockwise=True) <= step * (1.0 + STEP_TOLERANCE):
            return
        theta += step


def arc_samples(orbit: OrbitParameters, angle_i: float, angle_f: float,
                divisions: int) -> List[ArcSample]:
    """
    Points on the orbit from angle_i to angle_f in the direction of motion.

    Both angles may be given in [0, 2*pi) or [-pi, pi). The returned list
    holds divisions + 1 samples, the last one at angle_f.
    """
    if divisions < 1:
        raise ConfigurationError(f"divisions must be a positive integer, got {divisions}")

    angle_i = normalize_angle(angle_i)
    angle_f = normalize_angle(angle_f)
    separation = angular_separation(angle_i, angle_f, clockwise=True)
    if separation == 0.0:
        return [ArcSample(angle_i, float(orbit.radius(angle_i)))]

    step = separation / divisions
    angles = list(_march(angle_i, angle_f, step, divisions))
    angles.append(angles[-1] + step)

    radii = orbit.radius(jnp.asarray(angles))
    return [ArcSample(normalize_angle(a), float(r)) for a, r in zip(angles, radii)]


@jit
def _chords(r1, r2, step):
    # Law of cosines, written as (r1 - r2)^2 + 4 r1 r2 sin^2(step / 2) so the
    # argument stays non-negative.
    return jnp.sqrt((r1 - r2)**2 + 4.0 * r1 * r2 * jnp.sin(step / 2.0)**2)


def compute_transit(orbit: OrbitParameters, angle_i: float, angle_f: float,
                    divisions: int) -> IntegrationResult:
    """
    Distance and time of flight between two true anomalies.

    Parameters
    ----------
    orbit : OrbitParameters
        Ellipse or hyperbola being flown.
    angle_i, angle_f : float
        Initial and final true anomaly (rad), measured from periapsis in the
        direction of motion. [0, 2*pi) and [-pi, pi) are both accepted.
    divisions : int
        Number of chords. Higher values trade run time for accuracy.

    Returns
    -------
    IntegrationResult

    Raises
    ------
    ConfigurationError
        If divisions < 1.
    DomainError
        If the arc leaves the hyperbola's branch or the speed is imaginary.
    """
    if divisions < 1:
        raise ConfigurationError(f"divisions must be a positive integer, got {divisions}")
    separation = angular_separation(angle_i, angle_f, clockwise=True)
    if separation == 0.0:
        return IntegrationResult(0.0, 0.0)
    step = separation / divisions

    samples = arc_samples(orbit, angle_i, angle_f, divisions)
    radii = jnp.asarray([s.radius for s in samples])
    r1 = radii[:-1]
    r2 = radii[1:]

    chords = _chords(r1, r2, step)
    speeds = orbit.speed(r1)

    total_distance = float(jnp.sum(chords))
    total_time = float(jnp.sum(chords / speeds))

    logger.debug("Integrated %d chords from %.6f to %.6f rad: %.6e m in %.6e s",
                 len(chords), samples[0].angle, samples[-1].angle, total_distance, total_time)
    return IntegrationResult(total_distance, total_time)


def transit_between_radii(orbit: OrbitParameters,
                          radius_i: float,
                          radius_f: float,
                          divisions: int,
                          radial_speed_positive_i: bool = True,
                          radial_speed_positive_f: bool = True) -> IntegrationResult:
    """
    Distance and time of flight between two radii.

    Each radius is reached twice per orbit; the radial-speed flags pick the
    outbound (True) or inbound (False) crossing.
    """
    angle_i = float(angle_at_radius(radius_i, orbit.eccentricity, orbit.semi_major_axis,
                                    radial_speed_positive_i, orbit.is_ellipse))
    angle_f = float(angle_at_radius(radius_f, orbit.eccentricity, orbit.semi_major_axis,
                                    radial_speed_positive_f, orbit.is_ellipse))
    logger.info("Radii %.6e m -> %.6e m map to true anomalies %.6f -> %.6f rad",
                radius_i, radius_f, angle_i, angle_f)
    return compute_transit(orbit, angle_i, angle_f, divisions)
