import pytest

from mini_postman.models import BodyType, HttpMethod, HttpRequest, HttpResponse, KeyValue


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    monkeypatch.setenv("MINI_POSTMAN_HOME", str(home))
    return home


def make_request(url="https://api.example.com/items", **kwargs) -> HttpRequest:
    return HttpRequest(url=url, **kwargs)


def make_response(status=200, body="{}", **kwargs) -> HttpResponse:
    kwargs.setdefault("status_text", "OK")
    kwargs.setdefault("headers", {"content-type": "application/json"})
    kwargs.setdefault("duration_ms", 12)
    return HttpResponse(status=status, body=body, **kwargs)


@pytest.fixture
def sample_request():
    return make_request(
        method=HttpMethod.POST,
        headers=[KeyValue("Content-Type", "application/json"), KeyValue("X-Debug", "1", False)],
        query_params=[KeyValue("page", "2")],
        body='{"name": "widget"}',
        body_type=BodyType.JSON,
    )
