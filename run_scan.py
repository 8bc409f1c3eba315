#!/usr/bin/env python
import argparse
import logging
from utils.logging_config import setup_logging, get_logger
from inout.model import load_model
from inout.scan import load_scan_config
from evaluation.scan import scan
from evaluation.integration import integrate
from core.exceptions import HistFuncError

logger = get_logger(__name__)

def main() -> int:
    """
    Scan histogram functions defined in a YAML model along one observable.

    Command-line arguments:
      --model: Path to the YAML model file.
      --scan: Path to the YAML scan configuration file.
      --dump: Optional path to dump scan results (e.g., scan.npz).
      --integral: Also print the integral of each scanned function.
      --summary: Print a summary of the scan results.
      --verbose: Enable DEBUG logging.
    """
    parser = argparse.ArgumentParser(description="Scan parameterized histogram functions.")
    parser.add_argument("--model", required=True, help="Path to the YAML model file.")
    parser.add_argument("--scan", required=True, help="Path to the YAML scan configuration file.")
    parser.add_argument("--dump", help="Path to dump scan results (e.g., scan.npz)", default=None)
    parser.add_argument("--integral", action="store_true", help="Print the full-range integral of each function.")
    parser.add_argument("--summary", action="store_true", help="Print scan summary.")
    parser.add_argument("--verbose", action="store_true", help="Enable DEBUG logging.")
    args = parser.parse_args()

    if args.verbose:
        setup_logging(level=logging.DEBUG)
        logger.debug("Verbose logging enabled.")
    else:
        setup_logging(level=logging.INFO)

    try:
        workspace = load_model(args.model)
        config = load_scan_config(args.scan)
    except HistFuncError as e:
        logger.error("Configuration failed: %s", e)
        return 1

    results = []
    for entry in config.scan:
        try:
            func = workspace.function(entry.function)
            lo, hi = entry.range if entry.range else (None, None)
            result = scan(func, entry.observable, lo, hi, entry.points, entry.hints, entry.fixed)
        except HistFuncError as e:
            logger.error("Scan of '%s' failed: %s", entry.function, e)
            return 1
        results.append(result)

        if result.errors:
            logger.warning("%d points of '%s' could not be evaluated", len(result.errors), func.name)
            for err in result.errors:
                logger.debug(err)

        if args.integral:
            try:
                integral = integrate(func)
            except HistFuncError as e:
                logger.error("Integral of '%s' failed: %s", func.name, e)
                return 1
            kind = "analytic" if integral.analytic else "numeric"
            print(f"Integral of {func.name}: {integral.value:.6g} ({kind})")

        if args.summary:
            print(f"Scan of {func.name} along {result.observable}: {result.stats['points']} points "
                  f"({result.stats['hints']} hints, {result.stats['failed']} failed) "
                  f"in {result.stats['elapsed']:.3f} s")

    logger.info("Scan completed.")

    if args.dump:
        import numpy as np
        arrays = {}
        for r in results:
            arrays[f"{r.function}__{r.observable}__x"] = r.x
            arrays[f"{r.function}__{r.observable}__values"] = r.values
        np.savez(args.dump, **arrays)
        print(f"Scan results dumped to {args.dump}")

    return 0

if __name__ == "__main__":
    raise SystemExit(main())
