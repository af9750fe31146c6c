import json
from datetime import datetime

from .models import HttpResponse


def format_json(text: str) -> str:
    try:
        return json.dumps(json.loads(text), indent=2, ensure_ascii=False)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}") from e


def is_valid_json(text: str) -> bool:
    try:
        json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return False
    return True


def minify_json(text: str) -> str:
    try:
        return json.dumps(json.loads(text), separators=(",", ":"), ensure_ascii=False)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}") from e


def pretty_or_raw(text: str) -> str:
    try:
        return format_json(text)
    except ValueError:
        return text


def format_duration(ms: int) -> str:
    if ms < 1000:
        return f"{ms}ms"
    if ms < 60_000:
        return f"{ms / 1000:.2f}s"
    seconds = ms // 1000
    return f"{seconds // 60}m {seconds % 60}s"


def format_bytes(n: int) -> str:
    kb, mb, gb = 1024.0, 1024.0 ** 2, 1024.0 ** 3
    if n < kb:
        return f"{n} B"
    if n < mb:
        return f"{n / kb:.2f} KB"
    if n < gb:
        return f"{n / mb:.2f} MB"
    return f"{n / gb:.2f} GB"


def format_timestamp(ts: int) -> str:
    return datetime.fromtimestamp(ts).strftime("%d/%m/%Y %H:%M:%S")


def truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def status_category(code: int) -> str:
    if 100 <= code < 300:
        return "success"
    if 300 <= code < 400:
        return "redirect"
    if 400 <= code < 500:
        return "client_error"
    return "server_error"


def status_line(response: HttpResponse) -> str:
    return (
        f"Status: {response.status} {response.status_text} | "
        f"Time: {format_duration(response.duration_ms)} | "
        f"Size: {format_bytes(response.size_bytes)}"
    )
