from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Tuple

import pandas as pd

from readmission.core.intervals import (
    GAP_STATUS_FIRST_VISIT,
    GAP_STATUS_INDETERMINATE,
    GAP_STATUS_MEASURED,
)
from readmission.utils.logger import get_logger

log = get_logger("quality")

QUALITY_MEASURES = ("gap_days", "length_of_stay", "bill_amount", "comorbidity_score")


@dataclass
class DataQualityReport:
    """Anomaly counts for one batch. None of these stop the batch."""

    total_records: int = 0
    accepted_records: int = 0
    rejected_records: int = 0          # missing patient_key / admission_time
    invalid_intervals: int = 0         # discharge before admission
    overlapping_encounters: int = 0    # negative gap
    indeterminate_gaps: int = 0        # predecessor without discharge
    first_visits: int = 0
    measured_gaps: int = 0
    duplicate_rows: int = 0
    null_measures: Dict[str, int] = field(default_factory=dict)

    @property
    def anomaly_count(self) -> int:
        return (
            self.rejected_records
            + self.invalid_intervals
            + self.overlapping_encounters
            + self.indeterminate_gaps
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["anomaly_count"] = self.anomaly_count
        return payload


@dataclass
class DataQualityValidator:
    strict: bool = False

    def validate(
        self,
        encounters: pd.DataFrame,
        rejected_count: int = 0,
        duplicate_rows: int = 0,
    ) -> Tuple[bool, DataQualityReport]:
        """
        Count anomalies in a processed encounter frame.

        Non-strict validation always passes; strict validation fails
        when any anomaly is present. Anomalies are logged, never raised.
        """
        status = encounters["gap_status"] if len(encounters) else pd.Series(dtype="object")

        report = DataQualityReport(
            total_records=int(len(encounters)) + int(rejected_count),
            accepted_records=int(len(encounters)),
            rejected_records=int(rejected_count),
            invalid_intervals=int(encounters["invalid_interval"].sum()) if len(encounters) else 0,
            overlapping_encounters=int(encounters["overlapping"].sum()) if len(encounters) else 0,
            indeterminate_gaps=int((status == GAP_STATUS_INDETERMINATE).sum()),
            first_visits=int((status == GAP_STATUS_FIRST_VISIT).sum()),
            measured_gaps=int((status == GAP_STATUS_MEASURED).sum()),
            duplicate_rows=int(duplicate_rows),
            null_measures={
                m: int(encounters[m].isna().sum())
                for m in QUALITY_MEASURES
                if m in encounters.columns
            },
        )

        if report.rejected_records:
            log.warning("MissingKey: %d record(s) rejected", report.rejected_records)
        if report.invalid_intervals:
            log.warning(
                "InvalidInterval: %d encounter(s) discharged before admission",
                report.invalid_intervals,
            )
        if report.overlapping_encounters:
            log.warning(
                "OverlappingEncounters: %d readmission(s) with a negative gap",
                report.overlapping_encounters,
            )
        if report.indeterminate_gaps:
            log.warning(
                "IndeterminateGap: %d readmission(s) follow a stay without discharge date",
                report.indeterminate_gaps,
            )

        passed = True
        if self.strict:
            passed = report.anomaly_count == 0

        return passed, report
