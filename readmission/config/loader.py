import copy
from pathlib import Path
from typing import Optional

import yaml

from .defaults import DEFAULT_CONFIG

EXECUTOR_KINDS = ("process", "thread")


# -------------------------------------------------
# MAIN CONFIG LOADER
# -------------------------------------------------
def load_config(path: Optional[str] = None) -> dict:
    """
    Load and merge user config with the analytics defaults.

    Rules:
    - Defaults always win if the user omits fields
    - Every section is optional
    - output_dir always exists
    """

    # -------------------------------------------------
    # 1. Load user config (if provided)
    # -------------------------------------------------
    user_config = {}

    if path:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}

        if not isinstance(user_config, dict):
            raise ValueError("Config file must contain a YAML dictionary")

    # -------------------------------------------------
    # 2. Merge with defaults (one level deep)
    # -------------------------------------------------
    config = copy.deepcopy(DEFAULT_CONFIG)

    for key, value in user_config.items():
        if isinstance(value, dict) and isinstance(config.get(key), dict):
            config[key].update(value)
        else:
            config[key] = value

    # -------------------------------------------------
    # 3. Enforce invariants
    # -------------------------------------------------
    config.setdefault("output_dir", "runs")

    threshold = config["intervals"].get("continuity_threshold")
    if not isinstance(threshold, (int, float)) or isinstance(threshold, bool):
        raise ValueError(f"intervals.continuity_threshold must be numeric, got {threshold!r}")

    if int(config["ranking"].get("n_buckets", 0)) < 1:
        raise ValueError("ranking.n_buckets must be >= 1")

    if config["execution"].get("executor") not in EXECUTOR_KINDS:
        raise ValueError(
            f"execution.executor must be one of {EXECUTOR_KINDS}, "
            f"got {config['execution'].get('executor')!r}"
        )

    config["execution"]["workers"] = max(int(config["execution"].get("workers") or 1), 1)

    return config
