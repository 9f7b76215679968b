from dataclasses import dataclass, field
from typing import Optional, List

@dataclass
class WindowConfig:
    capacity: int = 20
    sample_interval_seconds: float = 180.0
    demo_interval_seconds: float = 3.0
    demo_mode: bool = True

@dataclass
class SynthesizerConfig:
    timezone: str = "America/Montreal"
    min_db: float = 30.0
    max_db: float = 85.0

@dataclass
class ProjectionConfig:
    total_fleet: int = 50000
    monthly_growth_rate: float = 0.03
    drift_per_day: float = -0.002
    oscillation_amplitude: float = 0.05

@dataclass
class PulseConfig:
    site: str = "papineau"
    window: WindowConfig = field(default_factory=WindowConfig)
    synthesizer: SynthesizerConfig = field(default_factory=SynthesizerConfig)
    projection: ProjectionConfig = field(default_factory=ProjectionConfig)

@dataclass
class TableStoreConfig:
    account: Optional[str] = None
    key: Optional[str] = None
    sas_token: Optional[str] = None
    table_name: str = "analyticsdata"

@dataclass
class DocumentStoreConfig:
    endpoint: Optional[str] = None
    key: Optional[str] = None
    database: str = "noise-pulse"
    container: str = "analytics"

@dataclass
class FunctionEndpointConfig:
    url: Optional[str] = None
    key: Optional[str] = None

@dataclass
class CollectorClientConfig:
    url: Optional[str] = None
    site_id: str = "lafontaine-noise-pulse"
    api_key: Optional[str] = None

@dataclass
class LocalBufferConfig:
    path: Optional[str] = None
    max_events: int = 1000
    max_sessions: int = 50

@dataclass
class StorageConfig:
    table: TableStoreConfig = field(default_factory=TableStoreConfig)
    cosmos: DocumentStoreConfig = field(default_factory=DocumentStoreConfig)
    functions: FunctionEndpointConfig = field(default_factory=FunctionEndpointConfig)
    http: CollectorClientConfig = field(default_factory=CollectorClientConfig)
    local: LocalBufferConfig = field(default_factory=LocalBufferConfig)
    timeout_seconds: float = 5.0
    fallback_chain: bool = False # Try every configured backend before the local buffer

@dataclass
class AnalyticsConfig:
    storage: StorageConfig = field(default_factory=StorageConfig)
    dispatch_queue_size: int = 500
    locale: str = "en-CA"
    timezone: str = "America/Montreal"
    screen_width: int = 1920
    screen_height: int = 1080

@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 3000
    service_name: str = "lafontaine-analytics-api"
    database_url: str = "sqlite:///./data/noise_pulse.db"
    max_events: int = 10000
    rate_limit_max: int = 100
    rate_limit_window_seconds: int = 900
    cors_origins: List[str] = field(default_factory=lambda: [
        "http://localhost:5173",
        "http://localhost:3000",
    ])

@dataclass
class AppConfig:
    pulse: PulseConfig = field(default_factory=PulseConfig)
    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
