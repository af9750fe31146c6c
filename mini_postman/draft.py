from dataclasses import dataclass, field
from typing import List, Mapping

from .models import DEFAULT_TIMEOUT_MS, BodyType, HistoryItem, HttpMethod, HttpRequest, KeyValue, parse_timeout


def _default_headers() -> List[KeyValue]:
    return [KeyValue("Content-Type", "application/json")]


@dataclass
class RequestDraft:
    """Editable request fields as the user sees them; the timeout stays raw text."""
    method: HttpMethod = HttpMethod.GET
    url: str = ""
    headers: List[KeyValue] = field(default_factory=_default_headers)
    query_params: List[KeyValue] = field(default_factory=list)
    body: str = ""
    body_type: BodyType = BodyType.JSON
    timeout_text: str = str(DEFAULT_TIMEOUT_MS)
    default_timeout_ms: int = DEFAULT_TIMEOUT_MS

    @classmethod
    def from_settings(cls, settings: Mapping) -> "RequestDraft":
        """Fresh draft whose timeout starts at, and falls back to, ``settings["timeout_ms"]``."""
        default = parse_timeout(settings.get("timeout_ms", DEFAULT_TIMEOUT_MS))
        return cls(timeout_text=str(default), default_timeout_ms=default)

    def to_request(self) -> HttpRequest:
        return HttpRequest(
            method=self.method,
            url=self.url,
            headers=list(self.headers),
            query_params=list(self.query_params),
            body=self.body,
            body_type=self.body_type,
            timeout_ms=parse_timeout(self.timeout_text, self.default_timeout_ms),
        )

    def load_history_item(self, item: HistoryItem):
        req = item.request
        self.method = req.method
        self.url = req.url
        self.headers = list(req.headers)
        self.query_params = list(req.query_params)
        self.body = req.body
        self.body_type = req.body_type
        self.timeout_text = str(req.timeout_ms)

    def reset(self):
        fresh = RequestDraft(timeout_text=str(self.default_timeout_ms), default_timeout_ms=self.default_timeout_ms)
        for name in self.__dataclass_fields__:
            setattr(self, name, getattr(fresh, name))
