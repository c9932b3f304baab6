"""
Command-line interface for the gravity-assist solvers.

Usage:
    # Periapsis radius of the Jupiter flyby that reaches the target speed
    python -m gravassist encounter --min 7.1492e7 --max 5e9 --precision 0.001

    # Time of flight between two true anomalies
    python -m gravassist transit -e 0.5 -a 7.48e11 --mass 1.989e30 --angles 0 3.14159 --divisions 10000
"""

import argparse
import logging
import math
import sys

from pydantic import ValidationError

from gravassist.constants import JUPITER_RADIUS, ORBIT_TO_SATURN, TARGET_SPEED
from gravassist.encounter import EncounterModel, EncounterState
from gravassist.errors import GravAssistError
from gravassist.report import format_iteration, format_search_result, format_transit
from gravassist.solver import expected_iterations, find_radius, find_radius_both_signs
from gravassist.transit import OrbitParameters, compute_transit, transit_between_radii

logger = logging.getLogger('gravassist')


def _setup_encounter_parser(subparsers):
    """
    Set up the encounter subcommand parser.

    Parameters
    ----------
    subparsers : argparse._SubParsersAction
        The subparsers object from the main parser

    Returns
    -------
    argparse.ArgumentParser
        The configured encounter parser
    """
    encounter_parser = subparsers.add_parser(
        'encounter',
        help='Search the flyby periapsis radius that gives a target speed or apoapsis',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Target heliocentric speed after the Jupiter flyby, printing every iteration
  python -m gravassist encounter --min 7.1492e7 --max 5e9 --precision 0.001 --verbose

  # Target the apoapsis of the post-flyby orbit (default: 10.5 AU)
  python -m gravassist encounter --output apoapsis --min 1e8 --max 1.5e9 --precision 1000 --width-tolerance 1e-3

  # Capped search for both turn directions
  python -m gravassist encounter --min 2e8 --max 1e10 --both-signs --max-iterations 100
"""
    )

    encounter_parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='JSON file with the encounter state (default: Jupiter flyby of the Earth-Saturn transfer)'
    )
    encounter_parser.add_argument(
        '--min',
        type=float,
        default=JUPITER_RADIUS,
        help=f'Minimum periapsis radius in m (default: {JUPITER_RADIUS})'
    )
    encounter_parser.add_argument(
        '--max',
        type=float,
        default=1e16,
        help='Maximum periapsis radius in m (default: 1e16)'
    )
    encounter_parser.add_argument(
        '--precision', '-p',
        type=float,
        default=0.001,
        help='Tolerance on the target value (default: 0.001)'
    )
    encounter_parser.add_argument(
        '--width-tolerance',
        type=float,
        default=None,
        help='Interval width in m at which the search gives up (default: the precision)'
    )
    encounter_parser.add_argument(
        '--output', '-o',
        choices=EncounterModel.OUTPUTS,
        default='speed',
        help='Quantity to match: post-flyby speed (m/s) or apoapsis (m) (default: speed)'
    )
    encounter_parser.add_argument(
        '--target', '-t',
        type=float,
        default=None,
        help=f'Target value (default: {TARGET_SPEED} m/s for speed, {ORBIT_TO_SATURN} m for apoapsis)'
    )
    encounter_parser.add_argument(
        '--turn-sign',
        type=int,
        choices=(1, -1),
        default=None,
        help='Turn direction (default: the one in the encounter state)'
    )
    encounter_parser.add_argument(
        '--both-signs',
        action='store_true',
        help='Run a capped search for each turn direction (requires --max-iterations)'
    )
    encounter_parser.add_argument(
        '--max-iterations',
        type=int,
        default=None,
        help='Iteration cap for each search'
    )
    encounter_parser.add_argument(
        '--decreasing',
        action='store_true',
        help='Treat the model as decreasing with radius'
    )
    encounter_parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Print every iteration of the search'
    )

    return encounter_parser


def _setup_transit_parser(subparsers):
    """
    Set up the transit subcommand parser.

    Parameters
    ----------
    subparsers : argparse._SubParsersAction
        The subparsers object from the main parser

    Returns
    -------
    argparse.ArgumentParser
        The configured transit parser
    """
    transit_parser = subparsers.add_parser(
        'transit',
        help='Distance and time of flight along an orbital arc',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
The zero angle is at periapsis and increases with the object's movement.
Both [-pi, pi) and [0, 2*pi) are accepted.

Examples:
  # Half an Earth-Saturn Hohmann ellipse
  python -m gravassist transit -e 0.8102 -a 7.884e11 --mass 1.989e30 --angles 0 3.14159 --divisions 10000

  # Between two radii, arriving while falling back towards the body
  python -m gravassist transit -e 0.5 -a 2e11 --mass 1.989e30 --radii 1.5e11 2.5e11 --inbound-f --divisions 5000
"""
    )

    transit_parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='JSON file with the orbit parameters (overrides -e, -a and --mass)'
    )
    transit_parser.add_argument('--eccentricity', '-e', type=float, help='Orbit eccentricity (e != 1)')
    transit_parser.add_argument('--semi-major-axis', '-a', type=float, help='Semi-major axis magnitude (m)')
    transit_parser.add_argument('--mass', type=float, help='Mass of the central body (kg)')

    endpoints = transit_parser.add_mutually_exclusive_group(required=True)
    endpoints.add_argument(
        '--angles',
        type=float,
        nargs=2,
        metavar=('ANGLE_I', 'ANGLE_F'),
        help='Initial and final true anomaly (rad, or deg with --degrees)'
    )
    endpoints.add_argument(
        '--radii',
        type=float,
        nargs=2,
        metavar=('RADIUS_I', 'RADIUS_F'),
        help='Initial and final radius (m)'
    )
    transit_parser.add_argument(
        '--degrees',
        action='store_true',
        help='Angles are given in degrees'
    )
    transit_parser.add_argument(
        '--inbound-i',
        action='store_true',
        help='Radial speed is negative at the initial radius'
    )
    transit_parser.add_argument(
        '--inbound-f',
        action='store_true',
        help='Radial speed is negative at the final radius'
    )
    transit_parser.add_argument(
        '--divisions', '-n',
        type=int,
        required=True,
        help='Number of chords along the arc'
    )

    return transit_parser


def run_encounter(args) -> int:
    if args.config is not None:
        state = EncounterState.load(args.config)
    else:
        state = EncounterState.jupiter_assist()
    if args.turn_sign is not None:
        state = state.with_turn_sign(args.turn_sign)

    model = EncounterModel(state, output=args.output)
    if args.target is not None:
        target = args.target
    else:
        target = ORBIT_TO_SATURN if args.output == 'apoapsis' else TARGET_SPEED
    unit = 'm' if args.output == 'apoapsis' else 'm/s'

    expected = expected_iterations(args.min, args.max, args.width_tolerance or args.precision)

    def print_iteration(record):
        print(format_iteration(record, expected, target, args.precision, unit=unit))

    on_iteration = print_iteration if args.verbose else None

    if args.both_signs:
        if args.max_iterations is None:
            raise SystemExit("--both-signs requires --max-iterations")
        results = find_radius_both_signs(model, target, args.min, args.max, args.precision,
                                         max_iterations=args.max_iterations,
                                         increasing=not args.decreasing,
                                         width_tolerance=args.width_tolerance,
                                         on_iteration=on_iteration)
        results = list(results.values())
    else:
        results = [find_radius(model, target, args.min, args.max, args.precision,
                               increasing=not args.decreasing,
                               width_tolerance=args.width_tolerance,
                               max_iterations=args.max_iterations,
                               on_iteration=on_iteration)]

    for result in results:
        velocity = model.evaluate(result.radius, result.turn_sign)
        print()
        print(format_search_result(result, velocity, body_radius=state.body_radius, unit=unit))

    return 0 if any(result.converged for result in results) else 1


def run_transit(args) -> int:
    if args.config is not None:
        orbit = OrbitParameters.load(args.config)
    else:
        missing = [name for name in ('eccentricity', 'semi_major_axis', 'mass')
                   if getattr(args, name) is None]
        if missing:
            raise SystemExit(f"Missing orbit parameters: {', '.join(missing)} (or use --config)")
        orbit = OrbitParameters(eccentricity=args.eccentricity,
                                semi_major_axis=args.semi_major_axis,
                                central_mass=args.mass)

    if args.radii is not None:
        result = transit_between_radii(orbit, args.radii[0], args.radii[1], args.divisions,
                                       radial_speed_positive_i=not args.inbound_i,
                                       radial_speed_positive_f=not args.inbound_f)
    else:
        angle_i, angle_f = args.angles
        if args.degrees:
            angle_i, angle_f = math.radians(angle_i), math.radians(angle_f)
        result = compute_transit(orbit, angle_i, angle_f, args.divisions)

    print(format_transit(result))
    return 0


def main(argv=None) -> int:
    """Main entry point for the gravassist CLI."""
    parser = argparse.ArgumentParser(
        description="Gravity assist radius search and orbital time-of-flight integration",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        '--log-level',
        default='WARNING',
        choices=('DEBUG', 'INFO', 'WARNING', 'ERROR'),
        help='Logging level (default: WARNING)'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')
    subparsers.required = True

    _setup_encounter_parser(subparsers)
    _setup_transit_parser(subparsers)

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format='%(levelname)s %(name)s: %(message)s')

    handlers = {'encounter': run_encounter, 'transit': run_transit}
    try:
        return handlers[args.command](args)
    except (GravAssistError, ValidationError) as e:
        logger.error("%s", e)
        return 2


if __name__ == '__main__':
    sys.exit(main())
