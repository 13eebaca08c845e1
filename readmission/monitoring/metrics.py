import os
import time

import psutil


class MetricsCollector:
    def __init__(self):
        self.start_time = time.time()
        self._last_mark = self.start_time
        self.stages = {}

    def mark(self, stage: str):
        now = time.time()
        self.stages[stage] = round(now - self._last_mark, 3)
        self._last_mark = now

    def collect(self):
        process = psutil.Process(os.getpid())

        return {
            "duration_sec": round(time.time() - self.start_time, 2),
            "memory_mb": round(process.memory_info().rss / 1024 / 1024, 2),
            "stages": dict(self.stages),
        }
