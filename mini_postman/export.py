import json
from typing import Iterable

from .client import build_headers, should_include_body
from .models import BodyType, HttpRequest, KeyValue, active_rows
from .urls import merge_query, normalize


def shell_quote(s: str) -> str:
    if not s:
        return "''"
    if any(ch in s for ch in " \t\n\"'\\$`&|;<>()*?[]#~"):
        return "'" + s.replace("'", "'\"'\"'") + "'"
    return s


def headers_to_string(rows: Iterable[KeyValue]) -> str:
    return "\n".join(f"{r.key}: {r.value}" for r in active_rows(rows))


def to_curl(request: HttpRequest) -> str:
    """Equivalent curl command for what ``HttpClient.send`` would transmit."""
    url = merge_query(normalize(request.url), request.query_params)
    curl = ["curl", "-X", request.method.value]
    for k, v in build_headers(request.headers).items():
        curl += ["-H", f"{k}: {v}"]
    if should_include_body(request):
        curl += ["--data-raw", request.body]
    if request.timeout_ms:
        curl += ["--max-time", f"{request.timeout_ms / 1000:g}"]
    curl.append(url)
    return " ".join(shell_quote(x) for x in curl)


def to_requests_snippet(request: HttpRequest) -> str:
    url = merge_query(normalize(request.url), request.query_params)
    headers = dict(build_headers(request.headers).items())
    req_args = [json.dumps(request.method.value), "url", "headers=headers"]
    body_block = ""
    if should_include_body(request):
        comment = "  # JSON" if request.body_type is BodyType.JSON else ""
        body_block = f"data = {request.body!r}.encode(\"utf-8\"){comment}\n\n"
        req_args.append("data=data")
    req_args.append(f"timeout={request.timeout_ms / 1000:g}")
    req_args_str = ",\n    ".join(req_args)
    return f"""import requests

url = {json.dumps(url)}
headers = {json.dumps(headers, indent=4)}
{body_block}response = requests.request(
    {req_args_str}
)

print(f"Status Code: {{response.status_code}}")
print(response.text)"""
