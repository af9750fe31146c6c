import re
from typing import Iterable, Optional

from requests.exceptions import InvalidURL, MissingSchema
from requests.models import PreparedRequest
from urllib3.exceptions import LocationParseError
from urllib3.util import parse_url

from .errors import EmptyUrl, InvalidUrl
from .models import KeyValue, active_rows

SCHEMES = ("http://", "https://")
_FORBIDDEN_HOST_CHARS = re.compile(r"[\s<>\\^`{|}\"]")


def _check_host(url: str):
    try:
        host = parse_url(url).host
    except LocationParseError as e:
        raise InvalidUrl(str(e)) from e
    if not host:
        raise InvalidUrl("empty host")
    if _FORBIDDEN_HOST_CHARS.search(host):
        raise InvalidUrl(f"invalid character in host {host!r}")


def _prepare(url: str, params=None) -> str:
    req = PreparedRequest()
    try:
        req.prepare_url(url, params)
    except (InvalidURL, MissingSchema) as e:
        raise InvalidUrl(str(e)) from e
    return req.url


def normalize(raw: str) -> str:
    """Trim, default the scheme to https and validate.

    Returns the normalized text itself (``"https://example.com"``), not the
    re-serialized form; serialization happens in :func:`merge_query`.
    """
    url = (raw or "").strip()
    if not url:
        raise EmptyUrl()
    if not url.startswith(SCHEMES):
        url = "https://" + url
    _check_host(url)
    _prepare(url)
    return url


def merge_query(base_url: str, params: Iterable[KeyValue]) -> str:
    pairs = [(p.key, p.value) for p in active_rows(params)]
    _check_host(base_url)
    return _prepare(base_url, pairs)


def is_valid(raw: str) -> bool:
    try:
        normalize(raw)
    except (EmptyUrl, InvalidUrl):
        return False
    return True


def extract_domain(url: str) -> Optional[str]:
    try:
        return parse_url(url).host
    except LocationParseError:
        return None
