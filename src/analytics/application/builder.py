from typing import Optional, Sequence

from omegaconf import DictConfig

from ..domain.backends import (
    BackendConfig,
    CosmosBackend,
    FunctionsBackend,
    HttpBackend,
    LocalBackend,
    TableBackend,
    configured_backends,
    local_backend,
    resolve_backend_config
)
from ..domain.protocols import StorageAdapter
from ..infrastructure import (
    DocumentStoreAdapter,
    FunctionEndpointAdapter,
    HttpEndpointAdapter,
    LocalBuffer,
    LocalBufferAdapter,
    TableStoreAdapter
)
from .chain import StorageChain
from .dispatcher import BackgroundDispatcher
from .service import AnalyticsService
from ...common.metrics import MetricsCollector


def create_adapter(backend: BackendConfig, buffer: LocalBuffer, timeout_seconds: float = 5.0) -> StorageAdapter:
    if isinstance(backend, TableBackend):
        return TableStoreAdapter(backend, timeout_seconds=timeout_seconds)
    if isinstance(backend, CosmosBackend):
        return DocumentStoreAdapter(backend, timeout_seconds=timeout_seconds)
    if isinstance(backend, FunctionsBackend):
        return FunctionEndpointAdapter(backend, timeout_seconds=timeout_seconds)
    if isinstance(backend, HttpBackend):
        return HttpEndpointAdapter(backend, timeout_seconds=timeout_seconds)
    if isinstance(backend, LocalBackend):
        return LocalBufferAdapter(buffer)
    raise TypeError(f"Unsupported backend config: {type(backend).__name__}")


def create_storage_chain(
    backend: BackendConfig,
    buffer: LocalBuffer,
    fallbacks: Sequence[BackendConfig] = (),
    metrics: Optional[MetricsCollector] = None,
    timeout_seconds: float = 5.0
) -> StorageChain:
    """Builds every adapter once; the chain is reused for the whole session."""
    primary = create_adapter(backend, buffer, timeout_seconds)
    fallback_adapters = [
        create_adapter(b, buffer, timeout_seconds)
        for b in fallbacks
        if b.kind != backend.kind
    ]
    return StorageChain(primary, buffer, fallbacks=fallback_adapters, metrics=metrics)


class AnalyticsApplicationBuilder:
    """
    Builder pattern for the analytics pipeline.
    Resolves the backend once from the `analytics.storage` config.
    """

    def __init__(self, config: DictConfig):
        self.config = config
        self.analytics_cfg = config.analytics

        # Components
        self.backend: Optional[BackendConfig] = None
        self.buffer: Optional[LocalBuffer] = None
        self.chain: Optional[StorageChain] = None
        self.dispatcher: Optional[BackgroundDispatcher] = None
        self.metrics = MetricsCollector()

    def build_chain(self) -> 'AnalyticsApplicationBuilder':
        storage_cfg = self.analytics_cfg.storage
        local = local_backend(storage_cfg)
        self.buffer = LocalBuffer(
            max_events=local.max_events,
            max_sessions=local.max_sessions,
            path=local.path
        )
        self.backend = resolve_backend_config(storage_cfg)

        fallbacks = configured_backends(storage_cfg) if storage_cfg.fallback_chain else []
        self.chain = create_storage_chain(
            self.backend,
            self.buffer,
            fallbacks=fallbacks,
            metrics=self.metrics,
            timeout_seconds=storage_cfg.timeout_seconds
        )
        return self

    def build_dispatcher(self) -> 'AnalyticsApplicationBuilder':
        if not self.chain:
            self.build_chain()
        self.dispatcher = BackgroundDispatcher(
            self.chain,
            queue_size=self.analytics_cfg.dispatch_queue_size
        )
        return self

    def build_service(self) -> AnalyticsService:
        if not self.dispatcher:
            self.build_dispatcher()
        cfg = self.analytics_cfg
        return AnalyticsService(
            self.dispatcher,
            locale=cfg.locale,
            timezone=cfg.timezone,
            screen_width=cfg.screen_width,
            screen_height=cfg.screen_height
        )
