"""
Domain module initialization.
"""
from .entities import AnalyticsEvent, SessionRecord, DeviceClass
from .results import StorageResult
from .protocols import StorageAdapter
from .backends import (
    BackendConfig,
    TableBackend,
    CosmosBackend,
    FunctionsBackend,
    HttpBackend,
    LocalBackend,
    resolve_backend_config,
    configured_backends,
    local_backend
)
