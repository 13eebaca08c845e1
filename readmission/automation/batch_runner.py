import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from readmission.automation.run_metadata import create_run_metadata
from readmission.config.loader import load_config
from readmission.core.ingestion import SUPPORTED_EXT
from readmission.core.pipeline import AnalysisResult, run_pipeline
from readmission.monitoring.metrics import MetricsCollector
from readmission.reporting.exporter import TableExporter
from readmission.utils.logger import get_logger

log = get_logger("batch-runner")


def _render_charts(result: AnalysisResult, charts_dir: Path) -> Dict[str, str]:
    # seaborn/matplotlib only load when charts are asked for
    from readmission.visuals.distributions import gap_histogram, tier_bar

    charts_dir.mkdir(parents=True, exist_ok=True)
    rendered = {
        "gap_histogram": gap_histogram(result.encounters, charts_dir / "gap_histogram.png"),
        "tier_bar": tier_bar(result.tier_distribution, charts_dir / "tier_bar.png"),
    }
    return {name: str(path) for name, path in rendered.items() if path is not None}


# =====================================================
# PROCESS SINGLE FILE (BATCH SAFE)
# =====================================================

def run_single_file(
    file_path: Path,
    config: Dict[str, Any],
    run_dir: Path,
) -> Dict[str, Any]:
    """
    Analyze one encounter extract into its own folder under ``run_dir``.

    Layout:
        <run_dir>/<stem>/input/<file>      copy of the source
        <run_dir>/<stem>/tables/*.csv      every output table
        <run_dir>/<stem>/charts/*.png      only with visuals.enabled
        <run_dir>/<stem>/run.json          metadata, quality and timings
    """
    src = Path(file_path)

    file_run_dir = Path(run_dir) / src.stem
    input_dir = file_run_dir / "input"
    input_dir.mkdir(parents=True, exist_ok=True)

    dst = input_dir / src.name
    dst.write_bytes(src.read_bytes())

    log.info("Processing file: %s", src.name)

    metrics = MetricsCollector()

    result = run_pipeline(str(dst), config)
    metrics.mark("analysis")

    outputs = TableExporter(file_run_dir / "tables").export(result)
    metrics.mark("export")

    if config.get("visuals", {}).get("enabled"):
        try:
            outputs.update(_render_charts(result, file_run_dir / "charts"))
        except Exception as e:
            # charts never fail a run
            log.warning("Chart rendering failed (non-blocking): %s", e)
        metrics.mark("charts")

    metadata_path = create_run_metadata(
        input_files=[src.name],
        config=config,
        output_dir=file_run_dir,
        status="completed" if result.quality_passed else "quality_failed",
        quality=result.quality.to_dict(),
        metrics=metrics.collect(),
        outputs=outputs,
    )

    log.info("Completed file: %s", src.name)

    return {
        "file": src.name,
        "outputs": outputs,
        "metadata": str(metadata_path),
        "quality_passed": result.quality_passed,
        "run_dir": str(file_run_dir),
    }


# =====================================================
# BATCH ENTRY POINT
# =====================================================

def run_batch(
    input_folder: str,
    config_path: Optional[str],
    output_root: str = "runs",
    config: Optional[Dict[str, Any]] = None,
) -> Path:
    """
    Analyze every CSV/Excel extract in a folder.

    - One timestamped run directory
    - One subfolder per file
    - A failing file is copied to failed/ and the batch moves on
    """
    config = config or load_config(config_path)

    timestamp = datetime.utcnow().strftime("%Y-%m-%d_%H-%M-%S")
    run_dir = Path(output_root) / timestamp
    run_dir.mkdir(parents=True, exist_ok=True)

    files = sorted(
        f for f in os.listdir(input_folder)
        if f.lower().endswith(SUPPORTED_EXT)
    )

    log.info("Found %d input files", len(files))
    log.info("Batch run directory: %s", run_dir)

    processed: List[str] = []
    errors: List[str] = []

    for file in files:
        src = Path(input_folder) / file

        try:
            run_single_file(src, config, run_dir)
            processed.append(src.name)

        except Exception as e:
            failed_path = (
                run_dir
                / "failed"
                / f"{src.stem}_{int(datetime.utcnow().timestamp())}{src.suffix}"
            )
            failed_path.parent.mkdir(exist_ok=True)
            failed_path.write_bytes(src.read_bytes())

            errors.append(f"{src.name}: {e}")
            log.error("File failed: %s | Reason: %s", src.name, str(e))

    create_run_metadata(
        input_files=files,
        config=config,
        output_dir=run_dir,
        status="completed" if not errors else "completed_with_errors",
        errors=errors,
        outputs={name: str(run_dir / Path(name).stem) for name in processed},
    )

    log.info("Batch run completed: %s (%d ok, %d failed)", run_dir, len(processed), len(errors))
    return run_dir
