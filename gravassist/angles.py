"""
True-anomaly bookkeeping.

Angles are measured from periapsis in the direction of motion and kept in
[-pi, pi). Inputs in [0, 2*pi) are accepted and mapped onto that range.
"""
import math

TWO_PI = 2.0 * math.pi


def normalize_angle(angle: float) -> float:
    """
    Map any real angle into [-pi, pi).

    Angles already in range are returned unchanged, so the mapping is
    idempotent bit for bit.
    """
    angle = float(angle)
    if -math.pi <= angle < math.pi:
        return angle
    wrapped = (angle + math.pi) % TWO_PI - math.pi
    # Rounding can land exactly on +pi.
    if wrapped >= math.pi:
        wrapped -= TWO_PI
    elif wrapped < -math.pi:
        wrapped += TWO_PI
    return wrapped


def angular_separation(a1: float, a2: float, clockwise: bool = False) -> float:
    """
    Non-negative separation between two angles.

    With clockwise=True the separation is measured from a1 forward (in the
    direction of motion) to a2, which lies in [0, 2*pi). Otherwise the
    smaller of the two arcs is returned, which is symmetric in a1 and a2.
    """
    a1 = normalize_angle(a1)
    a2 = normalize_angle(a2)

    swapped = a1 > a2
    if swapped:
        a1, a2 = a2, a1
    delta = a2 - a1

    if clockwise:
        return TWO_PI - delta if swapped else delta
    return TWO_PI - delta if delta > math.pi else delta
