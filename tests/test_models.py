import dataclasses

import pytest

from conftest import make_response
from mini_postman.draft import RequestDraft
from mini_postman.models import (
    DEFAULT_TIMEOUT_MS,
    BodyType,
    HistoryItem,
    HttpMethod,
    HttpRequest,
    HttpResponse,
    KeyValue,
    parse_timeout,
)
from mini_postman.settings import DEFAULT_SETTINGS, load_settings


@pytest.mark.parametrize(
    "text, expected",
    [("5000", 5000), (" 250 ", 250), ("", DEFAULT_TIMEOUT_MS), ("abc", DEFAULT_TIMEOUT_MS),
     ("-5", DEFAULT_TIMEOUT_MS), ("0", DEFAULT_TIMEOUT_MS), (None, DEFAULT_TIMEOUT_MS), (1200, 1200)],
)
def test_parse_timeout(text, expected):
    assert parse_timeout(text) == expected


def test_only_get_forbids_body():
    assert [m for m in HttpMethod if not m.allows_body()] == [HttpMethod.GET]


def test_request_defaults_and_row_coercion():
    req = HttpRequest(url="example.com", headers=[("X", "1", False)], query_params=[KeyValue("a", "1")])
    assert req.method is HttpMethod.GET
    assert req.body_type is BodyType.NONE
    assert req.timeout_ms == 30000
    assert req.headers == (KeyValue("X", "1", False),)
    assert HttpRequest(timeout_ms="nope").timeout_ms == DEFAULT_TIMEOUT_MS


def test_snapshots_are_immutable():
    item = HistoryItem(HttpRequest(url="x"), make_response(), 1)
    with pytest.raises(dataclasses.FrozenInstanceError):
        item.timestamp = 2
    with pytest.raises(dataclasses.FrozenInstanceError):
        item.request.url = "y"


def test_response_status_range():
    with pytest.raises(ValueError):
        HttpResponse(status=70000, status_text="Unknown")


def test_history_item_from_dict_fills_defaults():
    item = HistoryItem.from_dict({
        "request": {"method": "DELETE", "url": "https://x.com/1"},
        "response": {"status": 204},
        "timestamp": 1700000000,
    })
    assert item.request.method is HttpMethod.DELETE
    assert item.request.timeout_ms == DEFAULT_TIMEOUT_MS
    assert item.response.status_text == "Unknown"
    assert item.response.headers == {}


def test_draft_defaults_and_bad_timeout():
    draft = RequestDraft(url="example.com", timeout_text="fast")
    req = draft.to_request()
    assert req.timeout_ms == DEFAULT_TIMEOUT_MS
    assert req.headers == (KeyValue("Content-Type", "application/json"),)
    assert req.body_type is BodyType.JSON


def test_draft_loads_history_item_and_resets(sample_request):
    draft = RequestDraft()
    draft.load_history_item(HistoryItem(sample_request, make_response(), 1))
    assert draft.method is HttpMethod.POST
    assert draft.timeout_text == "30000"
    assert draft.to_request() == sample_request
    draft.headers.append(KeyValue("X-Extra", "1"))
    assert len(sample_request.headers) == 2
    draft.reset()
    assert draft == RequestDraft()


def test_draft_from_settings_uses_configured_timeout():
    draft = RequestDraft.from_settings(load_settings())
    assert draft.timeout_text == str(DEFAULT_SETTINGS["timeout_ms"])
    draft = RequestDraft.from_settings({"timeout_ms": 5000})
    assert draft.timeout_text == "5000"
    draft.timeout_text = "bad"
    assert draft.to_request().timeout_ms == 5000
    draft.timeout_text = "-1"
    assert draft.to_request().timeout_ms == 5000
    draft.reset()
    assert draft.timeout_text == "5000"
    assert draft.default_timeout_ms == 5000


def test_draft_from_settings_ignores_unusable_timeout():
    assert RequestDraft.from_settings({"timeout_ms": "soon"}).default_timeout_ms == DEFAULT_TIMEOUT_MS
    assert RequestDraft.from_settings({}).timeout_text == str(DEFAULT_TIMEOUT_MS)
