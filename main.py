#!/usr/bin/env python3
"""
CLI that periodically reports collector values to StatHat.

Values are recorded as gauges through the stats facade; every round also
increments "<prefix>.rounds". The backend is always closed on exit so the
last partial batch is flushed.
"""
import argparse
import json
import logging
import os
import sys
import time
from typing import Any, Dict, List, Optional, Tuple

import stats
from collectors.battery_collector.battery_collector import BatteryCollector
from collectors.system_collector.system_collector import SystemCollector
from stathat import StatHatBackend, StatHatConfig
from stathat import config as stathat_config
from stats.collector import Collector

# Setup logging
logger = logging.getLogger(__name__)

COLLECTORS = {
    'system': SystemCollector,
    'battery': BatteryCollector,
}


def setup_logging(log_level: str) -> None:
    """
    Setup logging with the specified log level.

    Args:
        log_level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {log_level}")

    logging.basicConfig(
        level=numeric_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        force=True
    )


def load_config_from_file(config_file: str) -> Dict[str, Any]:
    """
    Load configuration from a JSON file.

    Args:
        config_file (str): Path to the JSON config file

    Returns:
        dict: Configuration dictionary, empty if the file is missing or invalid
    """
    if not os.path.exists(config_file):
        logger.error("Config file not found: %s", config_file)
        return {}

    try:
        with open(config_file, 'r') as f:
            config = json.load(f)
    except (IOError, json.JSONDecodeError) as e:
        logger.error("Error parsing config file %s: %s", config_file, e)
        return {}

    if not isinstance(config, dict):
        logger.error("Config file %s must contain a JSON object", config_file)
        return {}
    logger.debug("Loaded configuration from %s: %s", config_file, config)
    return config


def merge_config_with_args(config: Dict[str, Any], args: argparse.Namespace) -> argparse.Namespace:
    """
    Merge configuration from a file with command line arguments.
    Command line arguments take precedence over config file values.

    Args:
        config (dict): Configuration dictionary from file
        args (argparse.Namespace): Command line arguments (None where not given)

    Returns:
        argparse.Namespace: Updated arguments namespace
    """
    args_dict = vars(args).copy()

    for key, value in config.items():
        arg_key = key.replace('-', '_')
        if args_dict.get(arg_key) is None:
            args_dict[arg_key] = value

    return argparse.Namespace(**args_dict)


def parse_collector_spec(spec: str) -> Tuple[str, Dict[str, Any]]:
    """
    Parse a collector specification string into a collector type and parameters.

    Args:
        spec (str): Collector specification in format "type:param1=value1,param2=value2"

    Returns:
        tuple: (collector_type, parameters_dict)

    Raises:
        ValueError: If the specification has no collector type
    """
    parts = spec.split(':', 1)
    collector_type = parts[0].strip().lower()
    if not collector_type:
        raise ValueError(f"Missing collector type in {spec!r}")

    params = {}
    if len(parts) > 1 and parts[1].strip():
        for param in parts[1].strip().split(','):
            if '=' in param:
                key, value = param.split('=', 1)
                params[key.strip()] = value.strip()

    return collector_type, params


def build_collectors(specs: List[str]) -> List[Collector]:
    """
    Instantiate the collectors named in the specifications.
    Unknown or misconfigured collectors are logged and skipped.

    Args:
        specs (list): Collector specifications

    Returns:
        list: Collector instances
    """
    collectors = []
    for spec in specs:
        try:
            collector_type, params = parse_collector_spec(spec)
        except ValueError as e:
            logger.error("Invalid collector specification: %s", e)
            continue

        prefix = params.pop('prefix', None)
        collector_class = COLLECTORS.get(collector_type)
        if collector_class is None:
            logger.error("Collector type not found: %s. Available collectors: %s",
                         collector_type, sorted(COLLECTORS))
            continue

        try:
            collector = collector_class(**params)
        except (TypeError, ValueError) as e:
            logger.error("Error instantiating collector %s: %s", collector_type, e)
            continue

        if prefix:
            collector.prefix = prefix
        collectors.append(collector)
    return collectors


def build_config(args: argparse.Namespace) -> StatHatConfig:
    """
    Build the backend configuration from parsed arguments.

    Args:
        args (argparse.Namespace): Command line arguments merged with the config file

    Returns:
        StatHatConfig: The backend configuration
    """
    options = dict(vars(args))
    if options.get('dry_run'):
        options['transport'] = 'dry-run'
    return StatHatConfig.from_dict(options)


def create_parser() -> argparse.ArgumentParser:
    """Build the argument parser. Options default to None so config file values can fill them."""
    parser = argparse.ArgumentParser(
        prog='stathat-report',
        description='Periodically report collector values to StatHat.',
    )

    parser.add_argument('--config-file', type=str,
                        help='Path to JSON configuration file')
    parser.add_argument('--log-level', type=str, default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Log level')
    parser.add_argument('--interval', type=float,
                        help='Interval between collections in seconds (default: 60)')
    parser.add_argument('--count', type=int,
                        help='Number of collection rounds, 0 for infinite (default: 0)')
    parser.add_argument('--prefix', type=str,
                        help='Prefix of the rounds counter (default: stathat-report)')
    parser.add_argument('--dry-run', action='store_true', default=None,
                        help='Log batches instead of sending them')
    parser.add_argument('--collectors', type=str, nargs='*',
                        help='Collectors to run in format "type:param1=value1,param2=value2"'
                             ' (default: system)')

    # Backend configuration, defaults come from the STATHAT_* environment
    parser.add_argument('--key', type=str,
                        help='StatHat EZ key')
    parser.add_argument('--debug', action='store_true', default=None,
                        help='Log every stat and batch')
    parser.add_argument('--endpoint', type=str,
                        help=f'EZ API endpoint (default: {stathat_config.ENDPOINT})')
    parser.add_argument('--connect-timeout', '--dial-timeout', dest='connect_timeout', type=str,
                        help=f'Connect timeout, e.g. 1s (default: {stathat_config.CONNECT_TIMEOUT}s)')
    parser.add_argument('--read-timeout', '--read-write-timeout', dest='read_timeout', type=str,
                        help=f'Response read timeout (default: {stathat_config.READ_TIMEOUT}s)')
    parser.add_argument('--max-connections', '--max-idle-conns', dest='max_connections', type=int,
                        help=f'Max connections to StatHat (default: {stathat_config.MAX_CONNECTIONS})')
    parser.add_argument('--batch-timeout', type=str,
                        help=f'Time to accumulate a batch (default: {stathat_config.BATCH_TIMEOUT}s)')
    parser.add_argument('--max-batch-size', type=int,
                        help=f'Max stats in a batch (default: {stathat_config.MAX_BATCH_SIZE})')
    parser.add_argument('--buffer-size', '--channel-buffer-size', dest='buffer_size', type=int,
                        help=f'Stats queued before reporting blocks (default: {stathat_config.BUFFER_SIZE})')
    parser.add_argument('--transport', type=str, choices=list(stathat_config.TRANSPORTS),
                        help=f'Transport to use (default: {stathat_config.TRANSPORT})')
    parser.add_argument('--no-drain', dest='drain_on_close', action='store_false', default=None,
                        help='Do not wait for in-flight batches on exit')
    return parser


def run_rounds(collectors: List[Collector], reporter: stats.Stats, interval: float,
               count: int, prefix: str) -> int:
    """
    Report every collector once per interval.

    Args:
        collectors (list): Collectors to report
        reporter (Stats): Facade to record through
        interval (float): Seconds between rounds
        count (int): Number of rounds, 0 for infinite
        prefix (str): Prefix of the rounds counter

    Returns:
        int: Number of rounds completed
    """
    round_count = 0
    next_collection_time = time.time()
    while count == 0 or round_count < count:
        current_time = time.time()
        if current_time > next_collection_time:
            next_collection_time = current_time

        round_count += 1
        logger.info("Collection round %s%s", round_count,
                    ("/%s" % count if count > 0 else ""))

        for collector in collectors:
            collector.report(reporter)
        reporter.inc(f"{prefix}.rounds")

        if count == 0 or round_count < count:
            next_collection_time += interval
            wait_time = next_collection_time - time.time()
            if wait_time > 0:
                logger.debug("Waiting %.2f seconds until next collection...", wait_time)
                time.sleep(wait_time)
            else:
                logger.warning("Collection took longer than interval. Next collection will start immediately.")
    return round_count


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, run the collectors and flush on exit."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    if args.config_file:
        logger.info("Loading configuration from %s", args.config_file)
        args = merge_config_with_args(load_config_from_file(args.config_file), args)

    try:
        config = build_config(args)
    except ValueError as e:
        parser.error(str(e))

    collectors = build_collectors(args.collectors or ['system'])
    if not collectors:
        logger.error("No usable collectors. Available collectors: %s", sorted(COLLECTORS))
        return 1

    backend = StatHatBackend(config)
    reporter = stats.set_backend(backend, verbose=config.debug)
    try:
        run_rounds(
            collectors,
            reporter,
            interval=float(args.interval if args.interval is not None else 60),
            count=int(args.count or 0),
            prefix=args.prefix or 'stathat-report',
        )
    except KeyboardInterrupt:
        logger.info("Collection interrupted by user.")
    finally:
        stats.reset_backend()
        error = backend.close()

    if error is not None:
        logger.error("Final flush failed: %s", error)
        return 1
    logger.info("Collection completed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
