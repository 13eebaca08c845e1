"""
Readmission Analytics CLI
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from readmission.__version__ import __version__
from readmission.automation import batch_runner
from readmission.config.loader import load_config

logger = logging.getLogger(__name__)


# -------------------------------------------------
# PROGRAMMATIC ENTRY
# -------------------------------------------------
def run_single_file(
    input_path: str,
    config_path: Optional[str] = None,
    config: Optional[Dict[str, Any]] = None,
    output_root: str = "runs",
) -> Dict[str, Any]:
    """
    Analyze one file into a fresh timestamped run directory.

    Returns:
        {
            "outputs": {table name: path},
            "metadata": <run.json path>,
            "quality_passed": bool,
            "run_dir": <path>
        }
    """
    final_config = config if config is not None else load_config(config_path)

    run_dir = Path(output_root) / datetime.utcnow().strftime("%Y-%m-%d_%H-%M-%S")
    run_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Run directory: %s", run_dir)

    return batch_runner.run_single_file(Path(input_path), final_config, run_dir)


# -------------------------------------------------
# CLI ENTRY
# -------------------------------------------------
def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description=f"Readmission interval analytics v{__version__}"
    )

    parser.add_argument("input", nargs="?", help="Encounter CSV or Excel file")
    parser.add_argument("--config", required=False, help="Path to config YAML")

    parser.add_argument("--batch", help="Analyze every CSV/Excel file in a folder")
    parser.add_argument("--workers", type=int, help="Worker count for per-patient stages")
    parser.add_argument("--output", help="Root folder for run directories")

    parser.add_argument("--charts", action="store_true", help="Render PNG charts")
    parser.add_argument("--strict", action="store_true", help="Fail the run on any data anomaly")
    parser.add_argument("--version", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")

    args = parser.parse_args(argv)

    # ---- VERSION ----
    if args.version:
        print(f"Readmission Analytics v{__version__}")
        return 0

    # ---- LOGGING ----
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    config = load_config(args.config)

    if args.workers is not None:
        config["execution"]["workers"] = max(1, args.workers)
    if args.charts:
        config["visuals"]["enabled"] = True
    if args.strict:
        config["quality"]["strict"] = True
    output_root = args.output or config.get("output_dir", "runs")

    # ---- BATCH ----
    if args.batch:
        run_dir = batch_runner.run_batch(args.batch, args.config, output_root, config=config)
        print(f"Batch folder: {run_dir}")
        return 0

    # ---- SINGLE FILE ----
    if not args.input:
        parser.error("Input file required")

    input_path = Path(args.input)
    if not input_path.exists():
        raise FileNotFoundError(input_path)

    result = run_single_file(str(input_path), config=config, output_root=output_root)

    print(f"Tables written: {len(result['outputs'])}")
    print(f"Run metadata: {result['metadata']}")
    print(f"Run folder: {result['run_dir']}")

    if not result["quality_passed"]:
        print("Data quality check failed (strict mode)")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
