"""
Logging utilities for game sessions and simulations.
"""
from typing import Dict, Any, Optional, List
from pathlib import Path
import json
import time
from datetime import datetime
from collections import Counter, defaultdict
from enum import Enum
import numpy as np


def convert_to_serializable(obj):
    """Convert numpy types, enums and sets to plain Python types for JSON serialization."""
    if isinstance(obj, (bool, np.bool_)):
        return bool(obj)
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, Enum):
        return convert_to_serializable(obj.value)
    elif isinstance(obj, dict):
        return {k: convert_to_serializable(v) for k, v in obj.items()}
    elif isinstance(obj, (set, frozenset)):
        return sorted(convert_to_serializable(i) for i in obj)
    elif isinstance(obj, (list, tuple)):
        return [convert_to_serializable(i) for i in obj]
    return obj


class Logger:
    """
    JSONL event logger.

    Each call to :meth:`log` appends one record with the step number,
    elapsed time and timestamp. ``GameSession`` uses it for placements,
    power-ups, undo, tier changes and game over.
    """

    def __init__(self, log_dir: str, name: str = "session"):
        """
        Initialize logger.

        Args:
            log_dir: Directory to save logs
            name: Prefix of the log file name
        """
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.name = name
        self.start_time = time.time()

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.log_file = self.log_dir / f"{name}_{timestamp}.jsonl"

        self.event_counts: Counter = Counter()
        self.step = 0

    def log(self, record: Dict[str, Any], step: Optional[int] = None) -> None:
        """
        Append a record.

        Args:
            record: Event payload; an ``event`` key names its kind
            step: Optional step number, defaults to the previous step + 1
        """
        if step is not None:
            self.step = step
        else:
            self.step += 1

        line = convert_to_serializable({
            'step': self.step,
            'time': time.time() - self.start_time,
            'timestamp': datetime.now().isoformat(),
            **record,
        })
        self.event_counts[record.get('event', 'record')] += 1

        with open(self.log_file, 'a') as f:
            f.write(json.dumps(line) + '\n')

    def read(self, event: Optional[str] = None) -> List[Dict[str, Any]]:
        """Read back logged records, optionally only those of one event kind."""
        if not self.log_file.exists():
            return []
        with open(self.log_file) as f:
            records = [json.loads(line) for line in f if line.strip()]
        if event is None:
            return records
        return [r for r in records if r.get('event') == event]

    def save_summary(self, extra: Optional[Dict[str, Any]] = None) -> Path:
        """Write event counts (and any extra fields) next to the log file."""
        summary = {
            'name': self.name,
            'total_records': self.step,
            'total_time': time.time() - self.start_time,
            'events': dict(self.event_counts),
        }
        if extra:
            summary.update(convert_to_serializable(extra))

        summary_file = self.log_dir / f"{self.name}_summary.json"
        with open(summary_file, 'w') as f:
            json.dump(summary, f, indent=2)
        return summary_file


class MetricsTracker:
    """
    Track running statistics for metrics.
    """

    def __init__(self, window_size: int = 100):
        """
        Initialize metrics tracker.

        Args:
            window_size: Size of rolling window for statistics
        """
        self.window_size = window_size
        self.metrics: Dict[str, List[float]] = defaultdict(list)

    def add(self, name: str, value: float) -> None:
        """Add a value to a metric."""
        self.metrics[name].append(value)
        if len(self.metrics[name]) > self.window_size:
            self.metrics[name].pop(0)

    def add_all(self, values: Dict[str, Any]) -> None:
        """Add every numeric entry of a statistics dictionary."""
        for name, value in values.items():
            if isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, bool):
                self.add(name, float(value))

    def get_summary(self, name: str) -> Dict[str, float]:
        """Get summary statistics for a metric."""
        values = self.metrics.get(name, [])
        if not values:
            return {'mean': 0.0, 'std': 0.0, 'min': 0.0, 'max': 0.0, 'last': 0.0}
        return {
            'mean': float(np.mean(values)),
            'std': float(np.std(values)),
            'min': float(np.min(values)),
            'max': float(np.max(values)),
            'last': float(values[-1]),
        }

    def get_all_summaries(self) -> Dict[str, Dict[str, float]]:
        """Get summaries for all metrics."""
        return {name: self.get_summary(name) for name in self.metrics}

    def reset(self) -> None:
        """Reset all metrics."""
        self.metrics.clear()
