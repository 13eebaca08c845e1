import json
from pathlib import Path
from typing import Dict

import pandas as pd

from readmission.core.pipeline import AnalysisResult
from readmission.utils.logger import get_logger

log = get_logger("exporter")

DATE_FORMAT = "%Y-%m-%d"


class TableExporter:
    """
    Writes an AnalysisResult to a run directory.

    Responsibilities:
    - One CSV per output table
    - summary.json with headline counts and data quality
    - NEVER compute analytics
    """

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)

    def _write_table(self, name: str, table: pd.DataFrame) -> Path:
        path = self.output_dir / f"{name}.csv"
        table.to_csv(path, index=False, date_format=DATE_FORMAT)
        return path

    def export(self, result: AnalysisResult) -> Dict[str, str]:
        self.output_dir.mkdir(parents=True, exist_ok=True)

        outputs = {}
        for name, table in result.tables().items():
            outputs[name] = str(self._write_table(name, table))

        summary_path = self.output_dir / "summary.json"
        with open(summary_path, "w", encoding="utf-8") as f:
            json.dump(
                {
                    "summary": result.summary,
                    "quality": result.quality.to_dict(),
                    "quality_passed": result.quality_passed,
                },
                f,
                indent=2,
                default=str,
            )
        outputs["summary"] = str(summary_path)

        log.info("Wrote %d output file(s) to %s", len(outputs), self.output_dir)
        return outputs
