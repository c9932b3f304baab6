"""
Bisection search for the flyby periapsis radius.

Finds r in [min, max] such that |model(r) - target| <= precision, where the
model is any callable ``model(radius, turn_sign) -> float`` (normally an
EncounterModel).

Two modes are provided:

- ``find_radius``: precision driven. The loop runs until the tolerance is
  met or the interval collapses below the width tolerance. Expected
  iteration count is ceil(log2((max - min) / precision)); a safety guard a
  fixed margin above it stops the loop if the width can no longer shrink
  (floating point resolution at large radii).

- ``find_radius_both_signs``: iteration capped. The same bisection is run
  once per turn direction (+1, then -1), each bounded by max_iterations.

The search direction assumes the model is monotonic in radius on [min, max].
This is not verified at run time; ``check_monotonic`` is provided for
fixtures and diagnostics.
"""
import logging
import math
from enum import Enum
from typing import Callable, Dict, Iterator, NamedTuple, Optional, Tuple

import numpy as np

from .encounter import TURN_SIGNS
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# Iterations allowed beyond the expected count before giving up in find_radius.
SAFETY_MARGIN = 64


class SearchStatus(str, Enum):
    CONVERGED = 'converged'
    NO_ROOT = 'no_root'                # interval collapsed without meeting the tolerance
    ITERATION_CAP = 'iteration_cap'    # explicit max_iterations exhausted
    SAFETY_BOUND = 'safety_bound'      # expected iteration count plus margin exceeded


class SearchInterval(NamedTuple):
    min: float
    max: float

    @property
    def width(self) -> float:
        return self.max - self.min

    @property
    def midpoint(self) -> float:
        return (self.max - self.min) / 2 + self.min


class IterationRecord(NamedTuple):
    """
    Snapshot of one bisection iteration.

    Attributes:
        index: Zero-based iteration number
        interval: Search interval at the start of the iteration
        candidate_radius: Midpoint evaluated in this iteration (m)
        evaluated_value: Model value at the candidate radius
        residual: evaluated_value - target
    """
    index: int
    interval: SearchInterval
    candidate_radius: float
    evaluated_value: float
    residual: float


class SearchResult(NamedTuple):
    """
    Outcome of a radius search.

    On failure, radius and value hold the last evaluated candidate, which is
    the closest approximation found.
    """
    radius: float
    value: float
    target: float
    status: SearchStatus
    iterations: int
    expected_iterations: int
    turn_sign: Optional[int] = None
    trace: Tuple[IterationRecord, ...] = ()

    @property
    def converged(self) -> bool:
        return self.status is SearchStatus.CONVERGED

    @property
    def residual(self) -> float:
        return self.value - self.target


def expected_iterations(min_radius: float, max_radius: float, precision: float) -> int:
    """Iterations needed to shrink [min, max] below precision, ceil(log2(width / precision))."""
    if not precision > 0:
        raise ConfigurationError(f"precision must be positive, got {precision}")
    ratio = (max_radius - min_radius) / precision
    if ratio <= 1.0:
        return 0
    return int(math.ceil(math.log2(ratio)))


def _validate(min_radius, max_radius, precision, width_tolerance, max_iterations):
    if not precision > 0:
        raise ConfigurationError(f"precision must be positive, got {precision}")
    if not min_radius < max_radius:
        raise ConfigurationError(f"min ({min_radius}) must be smaller than max ({max_radius})")
    if not min_radius > 0:
        raise ConfigurationError(f"min radius must be positive, got {min_radius}")
    if width_tolerance is not None and not width_tolerance > 0:
        raise ConfigurationError(f"width_tolerance must be positive, got {width_tolerance}")
    if max_iterations is not None and max_iterations < 1:
        raise ConfigurationError(f"max_iterations must be at least 1, got {max_iterations}")


def iterate_bisection(model: Callable[[float, Optional[int]], float],
                      target: float,
                      min_radius: float,
                      max_radius: float,
                      precision: float,
                      turn_sign: Optional[int] = None,
                      increasing: bool = True,
                      width_tolerance: Optional[float] = None,
                      max_iterations: Optional[int] = None,
                      cap_status: SearchStatus = SearchStatus.ITERATION_CAP,
                      ) -> Iterator[IterationRecord]:
    """
    Bisection loop as a generator of IterationRecord.

    Each record is yielded before the termination conditions are checked.
    The final SearchStatus is the generator's return value
    (``StopIteration.value``). The generator is single use.

    Parameters
    ----------
    model : callable
        ``model(radius, turn_sign) -> float``.
    target : float
        Desired model value.
    min_radius, max_radius : float
        Initial bracket (m).
    precision : float
        Tolerance on |model(r) - target|.
    turn_sign : int or None
        Passed through to the model.
    increasing : bool
        True if the model grows with radius, so a value below target moves
        min up. False applies the opposite rule (a value below target moves
        max down).
    width_tolerance : float or None
        The search fails with NO_ROOT once the interval width is at or below
        this value. Defaults to precision.
    max_iterations : int or None
        Stop with cap_status after this many evaluations.
    """
    if width_tolerance is None:
        width_tolerance = precision

    interval = SearchInterval(float(min_radius), float(max_radius))
    index = 0
    while True:
        if max_iterations is not None and index >= max_iterations:
            return cap_status

        radius = interval.midpoint
        value = float(model(radius, turn_sign))
        residual = value - target

        yield IterationRecord(index, interval, radius, value, residual)

        if abs(residual) <= precision:
            return SearchStatus.CONVERGED

        if interval.width <= width_tolerance:
            return SearchStatus.NO_ROOT

        if (value < target) == increasing:
            interval = SearchInterval(radius, interval.max)
        else:
            interval = SearchInterval(interval.min, radius)

        index += 1


def _run(records: Iterator[IterationRecord],
         target: float,
         expected: int,
         turn_sign: Optional[int],
         verbose: bool,
         on_iteration: Optional[Callable[[IterationRecord], None]]) -> SearchResult:
    trace = []
    last = None
    while True:
        try:
            record = next(records)
        except StopIteration as stop:
            status = stop.value
            break

        logger.debug("iteration %d / %d: [%g, %g] r=%.6f value=%.6f residual=%.6g",
                     record.index, expected, record.interval.min, record.interval.max,
                     record.candidate_radius, record.evaluated_value, record.residual)
        if on_iteration is not None:
            on_iteration(record)
        if verbose:
            trace.append(record)
        last = record

    result = SearchResult(
        radius=last.candidate_radius,
        value=last.evaluated_value,
        target=target,
        status=status,
        iterations=last.index + 1,
        expected_iterations=expected,
        turn_sign=turn_sign,
        trace=tuple(trace),
    )

    if result.converged:
        logger.info("Converged to r=%.6f m after %d iterations (turn sign %s)",
                    result.radius, result.iterations, turn_sign)
    else:
        logger.warning("Search failed (%s) after %d iterations, closest r=%.6f m (turn sign %s)",
                       status.value, result.iterations, result.radius, turn_sign)
    return result


def find_radius(model: Callable[[float, Optional[int]], float],
                target: float,
                min_radius: float,
                max_radius: float,
                precision: float,
                turn_sign: Optional[int] = None,
                increasing: bool = True,
                width_tolerance: Optional[float] = None,
                max_iterations: Optional[int] = None,
                verbose: bool = False,
                on_iteration: Optional[Callable[[IterationRecord], None]] = None) -> SearchResult:
    """
    Precision-driven bisection for a single turn direction.

    Runs until |model(r) - target| <= precision (CONVERGED) or the interval
    width drops to width_tolerance (NO_ROOT). If max_iterations is None the
    loop is guarded at expected_iterations + SAFETY_MARGIN, reported as
    SAFETY_BOUND.

    Parameters
    ----------
    verbose : bool
        Collect every IterationRecord into ``SearchResult.trace``.
    on_iteration : callable or None
        Called with each IterationRecord as it is produced.

    Returns
    -------
    SearchResult
    """
    _validate(min_radius, max_radius, precision, width_tolerance, max_iterations)
    if turn_sign is not None and turn_sign not in TURN_SIGNS:
        raise ConfigurationError(f"turn_sign must be +1 or -1, got {turn_sign}")

    expected = expected_iterations(min_radius, max_radius, width_tolerance or precision)
    if max_iterations is None:
        max_iterations = expected + SAFETY_MARGIN

    records = iterate_bisection(model, target, min_radius, max_radius, precision,
                                turn_sign=turn_sign, increasing=increasing,
                                width_tolerance=width_tolerance,
                                max_iterations=max_iterations,
                                cap_status=SearchStatus.SAFETY_BOUND)
    return _run(records, target, expected, turn_sign, verbose, on_iteration)


def find_radius_both_signs(model: Callable[[float, Optional[int]], float],
                           target: float,
                           min_radius: float,
                           max_radius: float,
                           precision: float,
                           max_iterations: int,
                           increasing: bool = True,
                           width_tolerance: Optional[float] = None,
                           verbose: bool = False,
                           on_iteration: Optional[Callable[[IterationRecord], None]] = None,
                           ) -> Dict[int, SearchResult]:
    """
    Iteration-capped bisection, run independently for turn_sign +1 and -1.

    Each search stops after max_iterations evaluations with ITERATION_CAP if
    the tolerance was not met, still returning the last evaluated radius.

    Returns
    -------
    dict
        SearchResult keyed by turn sign, in the order +1, -1.
    """
    _validate(min_radius, max_radius, precision, width_tolerance, max_iterations)
    expected = expected_iterations(min_radius, max_radius, width_tolerance or precision)

    results = {}
    for sign in TURN_SIGNS:
        records = iterate_bisection(model, target, min_radius, max_radius, precision,
                                    turn_sign=sign, increasing=increasing,
                                    width_tolerance=width_tolerance,
                                    max_iterations=max_iterations,
                                    cap_status=SearchStatus.ITERATION_CAP)
        results[sign] = _run(records, target, expected, sign, verbose, on_iteration)
    return results


def check_monotonic(model: Callable[[float, Optional[int]], float],
                    min_radius: float,
                    max_radius: float,
                    turn_sign: Optional[int] = None,
                    increasing: bool = True,
                    samples: int = 64,
                    tolerance: float = 0.0) -> bool:
    """
    Sample the model on a logarithmic radius grid and test monotonicity.

    Returns True if consecutive values never move against the expected
    direction by more than tolerance.
    """
    radii = np.geomspace(min_radius, max_radius, samples)
    values = np.array([model(float(r), turn_sign) for r in radii])
    steps = np.diff(values)
    if increasing:
        return bool(np.all(steps >= -tolerance))
    return bool(np.all(steps <= tolerance))
