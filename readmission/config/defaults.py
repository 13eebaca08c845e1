DEFAULT_CONFIG = {
    # -----------------------------
    # INPUT COLUMN OVERRIDES (OPTIONAL)
    # -----------------------------
    # canonical name -> column in the input file
    # e.g. {"patient_key": "mrn", "admission_time": "admit_dt"}
    "columns": {},

    # -----------------------------
    # INTERVALS & EPISODES
    # -----------------------------
    "intervals": {
        "continuity_threshold": 1,  # days; gaps <= this continue an episode
    },

    # -----------------------------
    # COHORTS (FREQUENT FLYERS)
    # -----------------------------
    "cohorts": {
        "min_readmissions": 3,
        "rapid_threshold": 30,      # days; CMS-style rapid readmission
    },

    # -----------------------------
    # RANKING
    # -----------------------------
    "ranking": {
        "n_buckets": 4,             # quartiles by default
        "measures": ["bill_amount", "gap_days"],
        "top_n_per_diagnosis": 3,
        "concentration_buckets": 100,
    },

    # -----------------------------
    # OUTLIERS & TRENDS
    # -----------------------------
    "outliers": {
        "los_multiplier": 2.0,
    },
    "trends": {
        "churn_days": 365,
    },

    # -----------------------------
    # EXECUTION
    # -----------------------------
    "execution": {
        "workers": 1,               # 1 = run partitions inline
        "executor": "process",      # process | thread
    },

    # -----------------------------
    # DATA QUALITY
    # -----------------------------
    "quality": {
        "strict": False,            # strict = any anomaly fails the run status
    },

    # -----------------------------
    # OUTPUT CONTROL
    # -----------------------------
    "output_dir": "runs",

    "visuals": {
        "enabled": False,
    },
}
