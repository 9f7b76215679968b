from .sanitizer import DENYLIST, sanitize
from .chain import StorageChain
from .dispatcher import BackgroundDispatcher
from .service import AnalyticsService, generate_session_id
from .builder import AnalyticsApplicationBuilder, create_adapter, create_storage_chain
