from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

DEFAULT_TIMEOUT_MS = 30000


class HttpMethod(Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    def allows_body(self) -> bool:
        return self is not HttpMethod.GET

    def __str__(self):
        return self.value


class BodyType(Enum):
    NONE = "None"
    RAW = "Raw"
    JSON = "Json"

    def __str__(self):
        return self.value


def parse_timeout(text, default: int = DEFAULT_TIMEOUT_MS) -> int:
    """Parse a user-entered timeout in milliseconds, falling back to ``default``."""
    try:
        value = int(str(text).strip())
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class KeyValue:
    key: str = ""
    value: str = ""
    enabled: bool = True

    @property
    def active(self) -> bool:
        return self.enabled and bool(self.key)

    def to_dict(self) -> dict:
        return {"key": self.key, "value": self.value, "enabled": self.enabled}

    @classmethod
    def from_dict(cls, d: dict) -> "KeyValue":
        return cls(key=str(d["key"]), value=str(d.get("value", "")), enabled=bool(d.get("enabled", True)))


def _rows(rows) -> Tuple[KeyValue, ...]:
    return tuple(r if isinstance(r, KeyValue) else KeyValue(*r) for r in rows or ())


@dataclass(frozen=True)
class HttpRequest:
    method: HttpMethod = HttpMethod.GET
    url: str = ""
    headers: Tuple[KeyValue, ...] = ()
    query_params: Tuple[KeyValue, ...] = ()
    body: str = ""
    body_type: BodyType = BodyType.NONE
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    def __post_init__(self):
        # accept lists / (key, value, enabled) tuples from callers, store immutably
        object.__setattr__(self, "headers", _rows(self.headers))
        object.__setattr__(self, "query_params", _rows(self.query_params))
        object.__setattr__(self, "timeout_ms", parse_timeout(self.timeout_ms))

    def to_dict(self) -> dict:
        return {
            "method": self.method.value,
            "url": self.url,
            "headers": [h.to_dict() for h in self.headers],
            "query_params": [p.to_dict() for p in self.query_params],
            "body": self.body,
            "body_type": self.body_type.value,
            "timeout_ms": self.timeout_ms,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "HttpRequest":
        return cls(
            method=HttpMethod(d["method"]),
            url=str(d["url"]),
            headers=[KeyValue.from_dict(h) for h in d.get("headers") or []],
            query_params=[KeyValue.from_dict(p) for p in d.get("query_params") or []],
            body=str(d.get("body") or ""),
            body_type=BodyType(d.get("body_type", BodyType.NONE.value)),
            timeout_ms=d.get("timeout_ms", DEFAULT_TIMEOUT_MS),
        )


@dataclass(frozen=True)
class HttpResponse:
    status: int
    status_text: str
    body: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    duration_ms: int = 0

    def __post_init__(self):
        if not 0 <= int(self.status) <= 0xFFFF:
            raise ValueError(f"status out of range: {self.status}")

    @property
    def size_bytes(self) -> int:
        return len(self.body.encode("utf-8"))

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "status_text": self.status_text,
            "body": self.body,
            "headers": dict(self.headers),
            "duration_ms": self.duration_ms,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "HttpResponse":
        headers = d.get("headers") or {}
        if not isinstance(headers, dict):
            raise TypeError("response headers must be an object")
        return cls(
            status=int(d["status"]),
            status_text=str(d.get("status_text", "Unknown")),
            body=str(d.get("body") or ""),
            headers={str(k): str(v) for k, v in headers.items()},
            duration_ms=int(d.get("duration_ms", 0)),
        )


@dataclass(frozen=True)
class HistoryItem:
    request: HttpRequest
    response: HttpResponse
    timestamp: int

    def to_dict(self) -> dict:
        return {
            "request": self.request.to_dict(),
            "response": self.response.to_dict(),
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "HistoryItem":
        if not isinstance(d, dict):
            raise TypeError(f"history entry must be an object, got {type(d).__name__}")
        return cls(
            request=HttpRequest.from_dict(d["request"]),
            response=HttpResponse.from_dict(d["response"]),
            timestamp=int(d["timestamp"]),
        )


def active_rows(rows: Optional[List[KeyValue]]) -> List[KeyValue]:
    """Rows that are transmitted: enabled and with a non-empty key, in list order."""
    return [r for r in rows or () if r.active]
