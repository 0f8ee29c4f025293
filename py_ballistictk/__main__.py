"""Batch calibration tool: fit aerodynamic coefficients to a CSV of range-test observations.

    btk-fit observations.csv [--config btk.toml] [--seed N] [--fix lift_slope] [--debug]
"""
import argparse
import logging
import sys
from importlib import metadata

if sys.version_info[:2] < (3, 11):
    import tomli as tomllib
else:
    import tomllib

from py_ballistictk import basicConfig
from py_ballistictk.calibration import COEFFICIENT_NAMES, Calibrator
from py_ballistictk.config import create_calibration_config
from py_ballistictk.exceptions import CalibrationError, ObservationError, ZeroFindingError
from py_ballistictk.logger import enable_file_logging, logger
from py_ballistictk.observations import load_observations

version = metadata.version("py_ballistictk")


def get_arg_parser():
    parser = argparse.ArgumentParser(
        prog='btk-fit',
        description="Fit spin drift / crosswind jump coefficients to range-test observations"
    )
    parser.add_argument('csv_file', help="CSV file of range-test observations", type=str)
    parser.add_argument("-v", "--version", action='version',
                        version=f'btk-fit v{version}', help="Show version")
    parser.add_argument("-c", "--config", action="store", help="TOML file with [btk.calibration] settings")
    parser.add_argument("-s", "--seed", action="store", type=int, help="Seed of the annealing random generator")
    parser.add_argument("-f", "--fix", action="append", default=[], choices=COEFFICIENT_NAMES,
                        help="Hold a coefficient at its starting value (repeatable)")
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug messages")
    parser.add_argument("-l", "--log-file", action="store",
                        help="Also write log messages to this file (debug messages with --debug)")
    return parser


def main(args=None) -> int:
    argv = get_arg_parser().parse_args(args)

    if argv.debug:
        logger.setLevel(logging.DEBUG)
        logger.info("Debug messages enabled")
    if argv.log_file:
        enable_file_logging(argv.log_file)

    try:
        if argv.config:
            basicConfig(argv.config)
        overrides = {'cSeed': argv.seed} if argv.seed is not None else {}
        config = create_calibration_config(overrides)
    except OSError as exc:
        logger.error(f"Cannot read config: {exc}")
        return 1
    except (tomllib.TOMLDecodeError, KeyError, ValueError) as exc:
        logger.error(f"Invalid config: {exc}")
        return 1

    try:
        observations = load_observations(argv.csv_file)
        result = Calibrator(observations, config, fixed=argv.fix).run()
    except OSError as exc:
        logger.error(f"Cannot read input: {exc}")
        return 1
    except ObservationError as exc:
        logger.error(f"Invalid observation data: {exc}")
        return 1
    except (ZeroFindingError, CalibrationError) as exc:
        logger.exception(exc)
        return 1

    print(result.report.format())
    return 0


if __name__ == '__main__':
    sys.exit(main())
