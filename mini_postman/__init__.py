from .client import HttpClient
from .draft import RequestDraft
from .errors import (
    ConnectionFailed,
    EmptyUrl,
    InvalidUrl,
    MiniPostmanError,
    Other,
    PersistenceWarning,
    RequestError,
    Timeout,
    TransportError,
    ValidationError,
)
from .history import MAX_HISTORY_ITEMS, HistoryStore, RequestHistory
from .models import DEFAULT_TIMEOUT_MS, BodyType, HistoryItem, HttpMethod, HttpRequest, HttpResponse, KeyValue
from .urls import merge_query, normalize
from .worker import RequestWorker

__version__ = "0.1.0"
