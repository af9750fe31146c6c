import codecs
import http
import logging
import socket
import threading
import time
from typing import Iterable, Mapping

import requests
from requests.structures import CaseInsensitiveDict
from urllib3.exceptions import ReadTimeoutError

from .errors import ConnectionFailed, Other, RequestError, Timeout, TransportError
from .models import BodyType, HttpRequest, HttpResponse, KeyValue, active_rows
from .settings import DEFAULT_SETTINGS, deep_merge
from .urls import merge_query, normalize

log = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
_REQUEST_ERRORS = (
    requests.exceptions.InvalidURL,
    requests.exceptions.InvalidHeader,
    requests.exceptions.InvalidSchema,
    requests.exceptions.MissingSchema,
    requests.exceptions.URLRequired,
)


def build_headers(rows: Iterable[KeyValue]) -> CaseInsensitiveDict:
    headers = CaseInsensitiveDict()
    for row in active_rows(rows):
        headers[row.key] = row.value
    return headers


def should_include_body(request: HttpRequest) -> bool:
    return (
        request.method.allows_body()
        and bool(request.body)
        and request.body_type is not BodyType.NONE
    )


def collapse_headers(headers) -> dict:
    """Flatten transport headers to name -> value; a repeated name keeps its last value."""
    items = headers.iteritems() if hasattr(headers, "iteritems") else headers.items()
    return {str(k).lower(): str(v) for k, v in items}


def reason_phrase(status: int) -> str:
    try:
        return http.HTTPStatus(status).phrase
    except ValueError:
        return "Unknown"


def classify_error(exc: Exception) -> TransportError:
    if isinstance(exc, requests.exceptions.Timeout):
        return Timeout(str(exc))
    if isinstance(exc, requests.exceptions.ConnectionError):
        # requests reports a read timeout while streaming the body as ConnectionError
        if exc.args and isinstance(exc.args[0], ReadTimeoutError):
            return Timeout(str(exc))
        return ConnectionFailed(str(exc))
    if isinstance(exc, _REQUEST_ERRORS):
        return RequestError(str(exc))
    if isinstance(exc, ValueError) and not isinstance(exc, requests.exceptions.RequestException):
        return RequestError(str(exc))
    return Other(str(exc))


def _charset(content_type: str):
    for part in (content_type or "").split(";")[1:]:
        key, _, value = part.partition("=")
        if key.strip().lower() == "charset":
            return value.strip().strip("\"'") or None
    return None


def _check_deadline(deadline: float, timeout_ms: int):
    if time.monotonic() > deadline:
        raise requests.exceptions.ReadTimeout(f"deadline of {timeout_ms}ms elapsed before the response was read")


def _abort(resp):
    """Shut down the socket under a streamed response so a blocked read returns."""
    conn = getattr(getattr(resp, "raw", None), "connection", None)
    sock = getattr(conn, "sock", None)
    if sock is None:
        return
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError as e:
        log.debug("Socket shutdown after deadline failed: %s", e)


def decode_body(content: bytes, content_type: str) -> str:
    encoding = _charset(content_type) or "utf-8"
    try:
        codecs.lookup(encoding)
    except LookupError:
        encoding = "utf-8"
    return content.decode(encoding, errors="replace")


class HttpClient:
    def __init__(self, settings: Mapping = None, session: requests.Session = None):
        self.settings = deep_merge(DEFAULT_SETTINGS, dict(settings or {}))
        self.sess = session or requests.Session()
        self.sess.verify = bool(self.settings.get("verify", True))

    def send(self, request: HttpRequest) -> HttpResponse:
        """Validate, perform and normalize one request.

        Raises ValidationError before any network attempt, TransportError after.
        """
        url = normalize(request.url)
        full_url = merge_query(url, request.query_params)
        headers = build_headers(request.headers)
        data = request.body.encode("utf-8") if should_include_body(request) else None
        method = request.method.value
        log.debug("%s %s (timeout %dms, body %s)", method, full_url, request.timeout_ms,
                  "attached" if data is not None else "none")
        start = time.monotonic()
        try:
            resp, content = self._exchange(method, full_url, headers, data, request.timeout_ms, start)
        except (requests.exceptions.RequestException, ValueError) as e:
            err = classify_error(e)
            log.warning("%s %s failed: %s", method, full_url, err)
            raise err from e
        duration_ms = int((time.monotonic() - start) * 1000)
        raw_headers = getattr(resp.raw, "headers", None) or resp.headers
        response = HttpResponse(
            status=resp.status_code,
            status_text=reason_phrase(resp.status_code),
            body=decode_body(content, resp.headers.get("Content-Type", "")),
            headers=collapse_headers(raw_headers),
            duration_ms=duration_ms,
        )
        log.info("%s %s -> %d %s in %dms", method, full_url, response.status, response.status_text, duration_ms)
        return response

    def _exchange(self, method, url, headers, data, timeout_ms, start):
        """Run the exchange on a helper thread and give up on it at the deadline."""
        timeout = timeout_ms / 1000.0
        deadline = start + timeout
        state = {"resp": None, "result": None, "error": None}
        expired = threading.Event()

        def run():
            try:
                state["result"] = self._read_exchange(method, url, headers, data, timeout, timeout_ms, deadline,
                                                      state, expired)
            except Exception as e:
                state["error"] = e

        worker = threading.Thread(target=run, daemon=True)
        worker.start()
        worker.join(timeout)
        if worker.is_alive():
            expired.set()
            _abort(state["resp"])
            raise requests.exceptions.ReadTimeout(f"deadline of {timeout_ms}ms elapsed before the response was read")
        if state["error"] is not None:
            raise state["error"]
        return state["result"]

    def _read_exchange(self, method, url, headers, data, timeout, timeout_ms, deadline, state, expired):
        resp = self.sess.request(
            method,
            url,
            headers=headers,
            data=data,
            timeout=timeout,
            allow_redirects=bool(self.settings.get("allow_redirects", True)),
            stream=True,
        )
        state["resp"] = resp
        try:
            chunks = []
            for chunk in resp.iter_content(CHUNK_SIZE):
                if expired.is_set():
                    break
                chunks.append(chunk)
                _check_deadline(deadline, timeout_ms)
            _check_deadline(deadline, timeout_ms)
            return resp, b"".join(chunks)
        finally:
            resp.close()

    def close(self):
        self.sess.close()
