from .local_buffer import LocalBuffer, LocalBufferAdapter
from .remote import RemoteAdapter
from .table_store import TableStoreAdapter
from .document_store import DocumentStoreAdapter
from .function_endpoint import FunctionEndpointAdapter
from .http_endpoint import HttpEndpointAdapter
