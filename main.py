#!/usr/bin/env python3
"""Proof-of-Work Puzzle - Command Line Entry Point"""

import sys
from pathlib import Path

# Ensure the script directory is in Python's module search path
# This allows imports to work regardless of where the script is run from
script_dir = Path(__file__).parent.resolve()
if str(script_dir) not in sys.path:
    sys.path.insert(0, str(script_dir))

import argparse
import logging
import time
from typing import List, Optional

from pow_core.logger import setup_logging
from pow_core.config import config
from pow_core.constants import DEFAULT_CONFIG_FILE, DEFAULT_LOG_FILE
from pow_core.exceptions import (
    BudgetExhaustedError,
    RandomSourceError,
    InvalidNonceError,
    ConfigurationError,
    WorkerError,
)
from pow_core.proof import search, verify
from pow_core.search_manager import SearchManager
from pow_core import pow_utils

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_BUDGET_EXHAUSTED = 2
EXIT_RANDOM_FAILURE = 3
EXIT_TIMEOUT = 4
EXIT_USAGE = 64
EXIT_INTERRUPTED = 130


def _init_multiprocessing():
    """Initialize multiprocessing with appropriate settings."""
    import multiprocessing as mp
    # Same start method on every platform
    try:
        mp.set_start_method('spawn', force=False)
    except RuntimeError:
        # Already set, ignore
        pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Client-puzzle proof of work")
    parser.add_argument("--config", default=DEFAULT_CONFIG_FILE, help=f"Config file (default: {DEFAULT_CONFIG_FILE})")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to the console")
    sub = parser.add_subparsers(dest="command", required=True)

    p_search = sub.add_parser("search", help="Find a nonce for a payload")
    p_search.add_argument("payload")
    p_search.add_argument("--hex-payload", action="store_true", help="Treat payload as hex")
    p_search.add_argument("--cost", type=int, default=None, help="Required leading zero bits")
    p_search.add_argument("--meter", type=int, default=None, help="Attempt budget")
    p_search.add_argument("--timeout", type=float, default=None, help="Wall-clock limit in seconds (runs in a worker)")

    p_verify = sub.add_parser("verify", help="Check a nonce against a payload")
    p_verify.add_argument("payload")
    p_verify.add_argument("nonce", help="Nonce as hex")
    p_verify.add_argument("--hex-payload", action="store_true", help="Treat payload as hex")
    p_verify.add_argument("--cost", type=int, default=None, help="Required leading zero bits")

    p_bench = sub.add_parser("bench", help="Run parallel searches and report hashrate")
    p_bench.add_argument("--cost", type=int, default=16)
    p_bench.add_argument("--jobs", type=int, default=4)
    p_bench.add_argument("--workers", type=int, default=None, help="Worker processes (0 = one per core)")
    p_bench.add_argument("--meter", type=int, default=None)

    p_init = sub.add_parser("init-config", help="Write the default configuration file")
    p_init.add_argument("path", nargs="?", default=None)

    return parser


def _payload(args) -> bytes:
    if args.hex_payload:
        return bytes.fromhex(args.payload)
    return args.payload.encode('utf-8')


def _cmd_search(args) -> int:
    payload = _payload(args)
    cost = args.cost if args.cost is not None else config.get('puzzle.cost')
    meter = args.meter if args.meter is not None else config.get('puzzle.meter')
    timeout = args.timeout if args.timeout is not None else config.get('search.timeout')

    logging.info(
        f"Searching cost={cost} meter={meter} "
        f"(~{pow_utils.expected_attempts(cost)} attempts expected)"
    )
    start_time = time.time()
    try:
        if timeout is None:
            nonce = search(payload, cost, meter)
        else:
            with SearchManager(workers=1) as manager:
                nonce = manager.search(payload, cost, meter, timeout=timeout)
    except BudgetExhaustedError as e:
        logging.error(str(e))
        return EXIT_BUDGET_EXHAUSTED
    except RandomSourceError as e:
        logging.error(str(e))
        return EXIT_RANDOM_FAILURE
    except WorkerError as e:
        logging.error(str(e))
        return EXIT_TIMEOUT

    logging.info(f"Found nonce in {time.time() - start_time:.2f}s")
    print(pow_utils.format_nonce_hex(nonce))
    return EXIT_OK


def _cmd_verify(args) -> int:
    payload = _payload(args)
    cost = args.cost if args.cost is not None else config.get('puzzle.cost')
    try:
        nonce = pow_utils.parse_nonce_hex(args.nonce)
    except InvalidNonceError as e:
        logging.error(str(e))
        print("invalid")
        return EXIT_INVALID

    if verify(payload, nonce, cost):
        print("valid")
        return EXIT_OK
    print("invalid")
    return EXIT_INVALID


def _cmd_bench(args) -> int:
    meter = args.meter if args.meter is not None else config.get('puzzle.meter')
    jobs = [(f"bench-{i}".encode('utf-8'), args.cost, meter) for i in range(args.jobs)]

    with SearchManager(workers=args.workers) as manager:
        logging.info(f"Benchmark: {args.jobs} jobs at cost {args.cost} on {manager.num_workers} workers")
        start_time = time.time()
        responses = manager.run_batch(jobs)
        elapsed = time.time() - start_time

    total_attempts = sum(r.get('attempts', 0) for r in responses)
    found = sum(1 for r in responses if r.get('found'))
    worker_hashrates = {}
    for r in responses:
        worker_id = r.get('worker_id', -1)
        worker_hashrates[worker_id] = pow_utils.smooth_hashrate(
            worker_hashrates.get(worker_id, 0.0),
            pow_utils.calculate_hashrate(r.get('attempts', 0), r.get('duration', 0.0))
        )

    print(f"jobs: {args.jobs}  found: {found}  attempts: {total_attempts}  elapsed: {elapsed:.2f}s")
    print(f"pool hashrate: {pow_utils.format_hashrate(pow_utils.calculate_hashrate(total_attempts, elapsed))}")
    for worker_id in sorted(worker_hashrates):
        print(f"worker {worker_id} hashrate: {pow_utils.format_hashrate(worker_hashrates[worker_id])}")
    return EXIT_OK if found == args.jobs else EXIT_BUDGET_EXHAUSTED


def _cmd_init_config(args) -> int:
    path = args.path or args.config
    config.reset()
    config.set('logging.file', DEFAULT_LOG_FILE)
    config.save(path)
    print(path)
    return EXIT_OK


COMMANDS = {
    "search": _cmd_search,
    "verify": _cmd_verify,
    "bench": _cmd_bench,
    "init-config": _cmd_init_config,
}


def main(argv: Optional[List[str]] = None) -> int:
    # Configure multiprocessing first
    _init_multiprocessing()

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command != "init-config":
            config.load(args.config)
    except ConfigurationError as e:
        setup_logging()
        logging.error(str(e))
        return EXIT_USAGE

    # Initialize logging
    level = getattr(logging, config.get('logging.level', 'INFO').upper())
    console_level = logging.DEBUG if args.verbose else logging.WARNING
    setup_logging(log_file=config.get('logging.file'), level=level, console_level=console_level)

    try:
        return COMMANDS[args.command](args)
    except ConfigurationError as e:
        logging.error(str(e))
        return EXIT_USAGE
    except ValueError as e:
        logging.error(f"Invalid argument: {e}")
        return EXIT_USAGE
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
