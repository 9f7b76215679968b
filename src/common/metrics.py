from dataclasses import dataclass, field
from typing import Dict
import threading
import time

@dataclass
class StorageMetrics:
    """Storage delivery metrics"""
    delivered: Dict[str, int] = field(default_factory=dict)
    failed_attempts: Dict[str, int] = field(default_factory=dict)
    buffered: int = 0
    hard_failures: int = 0
    uptime_seconds: float = 0.0

    def to_dict(self) -> Dict:
        return {
            'delivered': dict(self.delivered),
            'failed_attempts': dict(self.failed_attempts),
            'buffered': self.buffered,
            'hard_failures': self.hard_failures,
            'uptime_seconds': self.uptime_seconds
        }


class MetricsCollector:
    """Collects storage delivery counters per adapter"""

    def __init__(self):
        self._lock = threading.Lock()
        self.delivered: Dict[str, int] = {}
        self.failed_attempts: Dict[str, int] = {}
        self.buffered = 0
        self.hard_failures = 0
        self.start_time = time.time()

    def record_delivery(self, adapter_name: str):
        with self._lock:
            self.delivered[adapter_name] = self.delivered.get(adapter_name, 0) + 1

    def record_failure(self, adapter_name: str):
        with self._lock:
            self.failed_attempts[adapter_name] = self.failed_attempts.get(adapter_name, 0) + 1

    def record_hard_failure(self):
        """All adapters failed; the payload went to the local buffer."""
        with self._lock:
            self.hard_failures += 1
            self.buffered += 1

    def get_metrics(self) -> StorageMetrics:
        with self._lock:
            return StorageMetrics(
                delivered=dict(self.delivered),
                failed_attempts=dict(self.failed_attempts),
                buffered=self.buffered,
                hard_failures=self.hard_failures,
                uptime_seconds=time.time() - self.start_time
            )
