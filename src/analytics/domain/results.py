from dataclasses import dataclass
from typing import Optional

from ...common.exceptions import StorageError


@dataclass(frozen=True)
class StorageResult:
    """Outcome of a single adapter write."""
    ok: bool
    adapter: str
    error: Optional[StorageError] = None

    @classmethod
    def success(cls, adapter: str) -> 'StorageResult':
        return cls(ok=True, adapter=adapter)

    @classmethod
    def failure(cls, adapter: str, message: str, status_code: Optional[int] = None) -> 'StorageResult':
        return cls(ok=False, adapter=adapter, error=StorageError(message, status_code))
