"""
Physical and mission constants for the Earth-Jupiter-Saturn gravity assist.

All values are SI (m, kg, s).
"""
from pydantic import BaseModel, ConfigDict, Field

# General constants
G_CONST = 6.67e-11  # N*m^2/kg^2

# Planet masses
EARTH_MASS = 5.976e24  # kg
JUPITER_MASS = 1.8982e27  # kg
SATURN_MASS = 5.6834e26  # kg
SUN_MASS = 1.989e30  # kg

# Planet radii
EARTH_RADIUS = 6.378e6  # m
JUPITER_RADIUS = 7.1492e7  # m
SATURN_RADIUS = 6.033e7  # m

# Heliocentric orbital radii
EARTH_ORBIT = 1.496e11  # m (1 AU)
JUPITER_ORBIT = 5.20 * EARTH_ORBIT  # m
SATURN_ORBIT = 9.54 * EARTH_ORBIT  # m

AU = EARTH_ORBIT
DAY = 86400.0  # s

# Mission constants
ORBIT_TO_SATURN = 10.5 * EARTH_ORBIT  # m (apoapsis of the post-assist orbit)
ORBIT_TO_JUPITER = 5.5 * EARTH_ORBIT  # m
ORBIT_IN_SATURN = 4.5e8 + SATURN_RADIUS  # m

# Spacecraft state at the Jupiter encounter, relative to Jupiter
ENCOUNTER_RADIAL_SPEED = 3565.7818  # m/s
ENCOUNTER_ANGULAR_SPEED = 5609.1811  # m/s
ENCOUNTER_V_INF = 5609.1811  # m/s
TARGET_SPEED = 16019.4180  # m/s (heliocentric speed needed after the assist)


class PhysicalConstants(BaseModel):
    """
    Read-only bundle of the constants consumed by the encounter and transit models.

    Attributes:
        G: Gravitational constant (N*m^2/kg^2)
        sun_mass: Mass of the primary (kg)
        jupiter_mass: Mass of the flyby body (kg)
        jupiter_radius: Physical radius of the flyby body (m)
        jupiter_orbit: Orbital radius of the flyby body around the primary (m)
        saturn_orbit: Orbital radius of the destination body (m)
        au: Astronomical unit used to normalize reported distances (m)
    """
    model_config = ConfigDict(frozen=True)

    G: float = Field(default=G_CONST, gt=0)
    sun_mass: float = Field(default=SUN_MASS, gt=0)
    jupiter_mass: float = Field(default=JUPITER_MASS, gt=0)
    jupiter_radius: float = Field(default=JUPITER_RADIUS, gt=0)
    jupiter_orbit: float = Field(default=JUPITER_ORBIT, gt=0)
    saturn_orbit: float = Field(default=SATURN_ORBIT, gt=0)
    au: float = Field(default=AU, gt=0)

    @property
    def mu_sun(self) -> float:
        """Gravitational parameter of the primary (m^3/s^2)."""
        return self.G * self.sun_mass

    @property
    def mu_jupiter(self) -> float:
        """Gravitational parameter of the flyby body (m^3/s^2)."""
        return self.G * self.jupiter_mass


DEFAULT_CONSTANTS = PhysicalConstants()
