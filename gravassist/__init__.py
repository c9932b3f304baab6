# Configure JAX to use double precision (64-bit floats) throughout the package
import jax
jax.config.update("jax_enable_x64", True)

from .constants import (
    # Constants
    G_CONST,
    AU,
    DAY,
    SUN_MASS,
    JUPITER_MASS,
    JUPITER_RADIUS,
    JUPITER_ORBIT,
    SATURN_ORBIT,
    ORBIT_TO_SATURN,
    TARGET_SPEED,
    PhysicalConstants,
    DEFAULT_CONSTANTS,
)

from .errors import (
    GravAssistError,
    DomainError,
    ConfigurationError,
)

from .physics import (
    # Two-body relations
    vis_viva_speed,
    circular_speed,
    semi_latus_rectum,
    radius_at_angle,
    angle_at_radius,
    hyperbolic_eccentricity,
    turn_angle,
)

from .angles import (
    normalize_angle,
    angular_separation,
)

from .encounter import (
    # Flyby model
    EncounterState,
    PostEncounterVelocity,
    EncounterModel,
    post_encounter_velocity,
    orbit_apoapsis,
)

from .solver import (
    # Radius search
    SearchStatus,
    SearchInterval,
    IterationRecord,
    SearchResult,
    expected_iterations,
    iterate_bisection,
    find_radius,
    find_radius_both_signs,
    check_monotonic,
)

from .transit import (
    # Time of flight
    OrbitParameters,
    ArcSample,
    IntegrationResult,
    arc_samples,
    compute_transit,
    transit_between_radii,
)

__all__ = [
    # Constants
    "G_CONST",
    "AU",
    "DAY",
    "SUN_MASS",
    "JUPITER_MASS",
    "JUPITER_RADIUS",
    "JUPITER_ORBIT",
    "SATURN_ORBIT",
    "ORBIT_TO_SATURN",
    "TARGET_SPEED",
    "PhysicalConstants",
    "DEFAULT_CONSTANTS",

    # Errors
    "GravAssistError",
    "DomainError",
    "ConfigurationError",

    # Two-body relations
    "vis_viva_speed",
    "circular_speed",
    "semi_latus_rectum",
    "radius_at_angle",
    "angle_at_radius",
    "hyperbolic_eccentricity",
    "turn_angle",

    # Angles
    "normalize_angle",
    "angular_separation",

    # Flyby model
    "EncounterState",
    "PostEncounterVelocity",
    "EncounterModel",
    "post_encounter_velocity",
    "orbit_apoapsis",

    # Radius search
    "SearchStatus",
    "SearchInterval",
    "IterationRecord",
    "SearchResult",
    "expected_iterations",
    "iterate_bisection",
    "find_radius",
    "find_radius_both_signs",
    "check_monotonic",

    # Time of flight
    "OrbitParameters",
    "ArcSample",
    "IntegrationResult",
    "arc_samples",
    "compute_transit",
    "transit_between_radii",
]
