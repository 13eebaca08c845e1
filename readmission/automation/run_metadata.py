import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


def create_run_metadata(
    input_files: List[str],
    config: Dict,
    output_dir: Path,
    status: str = "completed",
    errors: Optional[List[str]] = None,
    quality: Optional[Dict[str, Any]] = None,
    metrics: Optional[Dict[str, Any]] = None,
    outputs: Optional[Dict[str, str]] = None,
):
    """
    Create a run.json metadata file describing a batch or single-file run.
    """

    metadata = {
        "timestamp": datetime.utcnow().isoformat(),
        "status": status,
        "input_files": input_files,
        "errors": errors or [],
        "config_summary": list(config.keys()),
        "quality": quality or {},
        "metrics": metrics or {},
        "outputs": outputs or {},
    }

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    metadata_path = output_dir / "run.json"

    with open(metadata_path, "w", encoding="utf-8") as f:
        json.dump(metadata, f, indent=2, default=str)

    return metadata_path
