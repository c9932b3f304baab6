"""
Plain-text rendering of search and transit results.

Nothing here computes physics; every function takes finished results and
returns a string.
"""
import math

from .constants import AU
from .encounter import PostEncounterVelocity
from .solver import IterationRecord, SearchResult, SearchStatus
from .transit import IntegrationResult

FAILURE_MESSAGES = {
    SearchStatus.NO_ROOT: ("A suitable radius could not be found in the given "
                           "interval with the precision selected."),
    SearchStatus.ITERATION_CAP: ("The maximum number of iterations was reached before "
                                 "the precision was met."),
    SearchStatus.SAFETY_BOUND: ("The search exceeded its iteration safety bound; the model "
                                "is probably not monotonic on the interval."),
}


def format_iteration(record: IterationRecord, expected: int, target: float,
                     precision: float, unit: str = 'm/s') -> str:
    """One verbose trace block for a bisection iteration."""
    return "\n".join([
        "",
        f"iteration / expected iters: \t{record.index} / {expected}",
        f"min / max: \t{record.interval.min:.4f} m / {record.interval.max:.4f} m",
        f"current radius: \t{record.candidate_radius:.4f} m",
        f"value / target: \t{record.evaluated_value:.4f} {unit} / {target:.4f} {unit}",
        f"current precision / desired precision: \t"
        f"{abs(record.residual):.4f} {unit} / {precision:.4f} {unit}",
    ])


def format_post_encounter(velocity: PostEncounterVelocity, au: float = AU) -> str:
    lines = [
        f"turn angle: \t{math.degrees(velocity.turn_angle):.4f} deg",
        f"radial speed: \t{velocity.radial_speed:.4f} m/s",
        f"angular speed: \t{velocity.angular_speed:.4f} m/s",
        f"total speed: \t{velocity.speed:.4f} m/s",
    ]
    if velocity.apoapsis is not None:
        lines.append(f"apoapsis: \t{velocity.apoapsis / au:.4f} AU")
    return "\n".join(lines)


def format_search_result(result: SearchResult, velocity: PostEncounterVelocity,
                         body_radius: float = 0.0, unit: str = 'm/s') -> str:
    """
    Summary of a radius search.

    On failure the closest radius found is still reported, together with the
    reason the search stopped.
    """
    sign = "" if result.turn_sign is None else f" (turn sign {result.turn_sign:+d})"
    if result.converged:
        lines = [f"COMPUTATION SUCCESSFUL{sign}"]
    else:
        lines = [f"COMPUTATION FAILED{sign}", FAILURE_MESSAGES[result.status],
                 "closest approximation:"]
    lines += [
        f"radius: \t{result.radius:.4f} m",
        f"height: \t{result.radius - body_radius:.4f} m",
        format_post_encounter(velocity),
        f"target: \t{result.target:.4f} {unit}",
        f"iterations: \t{result.iterations} (expected {result.expected_iterations})",
    ]
    return "\n".join(lines)


def format_transit(result: IntegrationResult) -> str:
    return "\n".join([
        "RESULTS:",
        f"distance: \t{result.total_distance:.4f} m",
        f"time: \t\t{result.total_time:.4f} s ({result.total_days:.4f} days)",
    ])
