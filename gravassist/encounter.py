"""
Planar patched-conic model of a gravity-assist flyby.

The incoming velocity is expressed relative to the flyby body in the orbital
plane as a (radial, angular) pair. A flyby with periapsis radius r_p turns
it by delta = 2 * asin(1/e); adding the body's circular speed around the
primary gives the heliocentric velocity after the encounter.
"""
from pathlib import Path
from typing import NamedTuple, Optional

import jax.numpy as jnp
from jax import jit
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import (
    DEFAULT_CONSTANTS,
    ENCOUNTER_ANGULAR_SPEED,
    ENCOUNTER_RADIAL_SPEED,
    ENCOUNTER_V_INF,
    PhysicalConstants,
)
from .errors import ConfigurationError, DomainError
from .physics import check_domain, circular_speed, hyperbolic_eccentricity, turn_angle


TURN_SIGNS = (1, -1)


class EncounterState(BaseModel):
    """
    Flyby geometry at closest approach.

    Attributes:
        radial_speed: Incoming radial speed relative to the flyby body (m/s)
        angular_speed: Incoming angular (transverse) speed relative to the flyby body (m/s)
        v_inf: Hyperbolic excess speed (m/s)
        mu_body: Gravitational parameter of the flyby body (m^3/s^2)
        mu_primary: Gravitational parameter of the primary (m^3/s^2)
        body_orbit_radius: Orbital radius of the flyby body around the primary (m)
        body_radius: Physical radius of the flyby body, used to report heights (m)
        turn_sign: +1 or -1, direction in which the velocity is rotated
    """
    model_config = ConfigDict(frozen=True)

    radial_speed: float = Field(..., description="Incoming radial speed (m/s)")
    angular_speed: float = Field(..., description="Incoming angular speed (m/s)")
    v_inf: float = Field(..., gt=0, description="Hyperbolic excess speed (m/s)")
    mu_body: float = Field(..., gt=0, description="GM of the flyby body (m^3/s^2)")
    mu_primary: float = Field(..., gt=0, description="GM of the primary (m^3/s^2)")
    body_orbit_radius: float = Field(..., gt=0, description="Orbital radius of the flyby body (m)")
    body_radius: float = Field(default=0.0, ge=0, description="Physical radius of the flyby body (m)")
    turn_sign: int = Field(default=1, description="Turn direction, +1 or -1")

    @field_validator('turn_sign')
    @classmethod
    def validate_turn_sign(cls, v):
        if v not in TURN_SIGNS:
            raise ValueError("turn_sign must be +1 or -1")
        return v

    @classmethod
    def jupiter_assist(cls, constants: PhysicalConstants = DEFAULT_CONSTANTS,
                       turn_sign: int = 1) -> 'EncounterState':
        """Jupiter flyby on the Earth to Saturn transfer."""
        return cls(
            radial_speed=ENCOUNTER_RADIAL_SPEED,
            angular_speed=ENCOUNTER_ANGULAR_SPEED,
            v_inf=ENCOUNTER_V_INF,
            mu_body=constants.mu_jupiter,
            mu_primary=constants.mu_sun,
            body_orbit_radius=constants.jupiter_orbit,
            body_radius=constants.jupiter_radius,
            turn_sign=turn_sign,
        )

    def with_turn_sign(self, turn_sign: int) -> 'EncounterState':
        if turn_sign not in TURN_SIGNS:
            raise ConfigurationError(f"turn_sign must be +1 or -1, got {turn_sign}")
        return self.model_copy(update={'turn_sign': turn_sign})

    @property
    def body_speed(self) -> float:
        """Circular speed of the flyby body around the primary (m/s)."""
        return float(circular_speed(self.mu_primary, self.body_orbit_radius))

    def save(self, filepath: str | Path) -> None:
        with open(Path(filepath), 'w') as f:
            f.write(self.model_dump_json(indent=2))

    @classmethod
    def load(cls, filepath: str | Path) -> 'EncounterState':
        with open(Path(filepath), 'r') as f:
            return cls.model_validate_json(f.read())


class PostEncounterVelocity(NamedTuple):
    """
    Heliocentric velocity after the flyby, for one periapsis radius.

    Attributes:
        periapsis_radius: Flyby periapsis radius from the body center (m)
        turn_sign: Turn direction used (+1 or -1)
        eccentricity: Eccentricity of the flyby hyperbola
        turn_angle: Signed rotation applied to the incoming velocity (rad)
        radial_speed: Radial component relative to the primary (m/s)
        angular_speed: Angular component relative to the primary (m/s)
        speed: Total speed relative to the primary (m/s)
        apoapsis: Apoapsis of the resulting orbit around the primary (m), if requested
    """
    periapsis_radius: float
    turn_sign: int
    eccentricity: float
    turn_angle: float
    radial_speed: float
    angular_speed: float
    speed: float
    apoapsis: Optional[float] = None


@jit
def _rotate_and_shift(v_r, v_ang, delta, body_speed):
    cos_d = jnp.cos(delta)
    sin_d = jnp.sin(delta)
    new_v_r = v_r * cos_d - v_ang * sin_d
    new_v_ang = v_r * sin_d + v_ang * cos_d + body_speed
    return new_v_r, new_v_ang, jnp.sqrt(new_v_r**2 + new_v_ang**2)


def orbit_apoapsis(speed: float, angular_speed: float, radius: float, mu: float) -> float:
    """
    Apoapsis of the orbit through `radius` with the given speed.

    a = 1 / (2/r - v^2/mu), e = sqrt(1 - (v_ang * r)^2 / (mu * a)),
    apoapsis = a * (1 + e).

    Raises:
        DomainError: if the orbit is unbound or the eccentricity is imaginary.
    """
    inv_a = 2.0 / radius - speed**2 / mu
    if not inv_a > 0.0:
        raise DomainError(f"Orbit with speed {speed} m/s at r={radius} m is unbound and has no apoapsis")
    a = 1.0 / inv_a
    e_squared = 1.0 - (angular_speed * radius)**2 / (mu * a)
    check_domain(e_squared >= 0.0, f"Imaginary eccentricity for a={a} m, v_ang={angular_speed} m/s")
    return float(a * (1.0 + jnp.sqrt(e_squared)))


def post_encounter_velocity(state: EncounterState, periapsis_radius: float,
                            compute_apoapsis: bool = False) -> PostEncounterVelocity:
    """
    Velocity relative to the primary after a flyby with the given periapsis radius.

    Args:
        state: Flyby geometry, including the turn direction
        periapsis_radius: Periapsis radius measured from the body center (m)
        compute_apoapsis: Also derive the apoapsis of the resulting orbit

    Returns:
        PostEncounterVelocity
    """
    if not periapsis_radius > 0.0:
        raise DomainError(f"Periapsis radius must be positive, got {periapsis_radius}")

    e = hyperbolic_eccentricity(state.v_inf, periapsis_radius, state.mu_body)
    delta = state.turn_sign * turn_angle(e)

    v_r, v_ang, v = _rotate_and_shift(state.radial_speed, state.angular_speed,
                                      delta, state.body_speed)
    v_r, v_ang, v = float(v_r), float(v_ang), float(v)

    apoapsis = None
    if compute_apoapsis:
        apoapsis = orbit_apoapsis(v, v_ang, state.body_orbit_radius, state.mu_primary)

    return PostEncounterVelocity(
        periapsis_radius=float(periapsis_radius),
        turn_sign=state.turn_sign,
        eccentricity=float(e),
        turn_angle=float(delta),
        radial_speed=v_r,
        angular_speed=v_ang,
        speed=v,
        apoapsis=apoapsis,
    )


class EncounterModel:
    """
    Scalar view of the flyby used by the radius search.

    Parameters
    ----------
    state : EncounterState
        Flyby geometry. Its turn_sign is the default direction.
    output : str
        'speed' for the heliocentric speed after the flyby, or 'apoapsis'
        for the apoapsis of the resulting orbit.
    """
    OUTPUTS = ('speed', 'apoapsis')

    def __init__(self, state: EncounterState, output: str = 'speed'):
        if output not in self.OUTPUTS:
            raise ConfigurationError(f"output must be one of {self.OUTPUTS}, got '{output}'")
        self.state = state
        self.output = output

    def evaluate(self, radius: float, turn_sign: Optional[int] = None) -> PostEncounterVelocity:
        state = self.state if turn_sign is None else self.state.with_turn_sign(turn_sign)
        return post_encounter_velocity(state, radius, compute_apoapsis=self.output == 'apoapsis')

    def __call__(self, radius: float, turn_sign: Optional[int] = None) -> float:
        result = self.evaluate(radius, turn_sign)
        return result.apoapsis if self.output == 'apoapsis' else result.speed
