import threading

import pytest

from conftest import make_request, make_response
from mini_postman.client import HttpClient
from mini_postman.errors import EmptyUrl, Other
from mini_postman.history import RequestHistory
from mini_postman.worker import RequestWorker


class BlockingClient:
    def __init__(self, response=None, exc=None):
        self.release = threading.Event()
        self.response = response or make_response()
        self.exc = exc

    def send(self, request):
        self.release.wait(5)
        if self.exc is not None:
            raise self.exc
        return self.response


def test_success_delivers_single_event_and_records_history():
    history = RequestHistory()
    client = BlockingClient()
    worker = RequestWorker(client, on_success=history.add)
    request = make_request()
    thread = worker.submit(request)
    assert worker.busy
    assert worker.poll() is None
    client.release.set()
    thread.join(5)
    assert worker.wait(1) == ("success", (request, client.response))
    assert worker.poll() is None
    assert history.get(0).request == request
    assert not worker.busy


def test_validation_error_is_delivered_as_error_event():
    worker = RequestWorker(HttpClient())
    request = make_request(url="")
    worker.submit(request).join(5)
    kind, (req, exc) = worker.wait(1)
    assert kind == "error"
    assert req is request
    assert isinstance(exc, EmptyUrl)


def test_unexpected_exception_becomes_other():
    client = BlockingClient(exc=RuntimeError("boom"))
    client.release.set()
    worker = RequestWorker(client)
    worker.submit(make_request()).join(5)
    kind, (_, exc) = worker.wait(1)
    assert kind == "error"
    assert isinstance(exc, Other) and exc.detail == "boom"


def test_only_one_submission_at_a_time():
    client = BlockingClient()
    worker = RequestWorker(client)
    thread = worker.submit(make_request())
    with pytest.raises(RuntimeError):
        worker.submit(make_request())
    client.release.set()
    thread.join(5)


def test_cancel_discards_outcome():
    history = RequestHistory()
    client = BlockingClient()
    worker = RequestWorker(client, on_success=history.add)
    thread = worker.submit(make_request())
    worker.cancel()
    assert not worker.busy
    client.release.set()
    thread.join(5)
    assert worker.poll() is None
    assert history.is_empty()


def test_cancel_during_delivery_waits_for_it():
    entered = threading.Event()
    proceed = threading.Event()
    history = RequestHistory()

    def slow_record(request, response):
        entered.set()
        proceed.wait(5)
        history.add(request, response)

    client = BlockingClient()
    client.release.set()
    worker = RequestWorker(client, on_success=slow_record)
    request = make_request()
    thread = worker.submit(request)
    assert entered.wait(5)
    canceller = threading.Thread(target=worker.cancel)
    canceller.start()
    canceller.join(0.2)
    assert canceller.is_alive()
    proceed.set()
    canceller.join(5)
    thread.join(5)
    assert worker.poll() == ("success", (request, client.response))
    assert history.get(0).request == request


def test_cancel_from_success_callback_does_not_deadlock():
    client = BlockingClient()
    client.release.set()
    worker = RequestWorker(client, on_success=lambda req, resp: worker.cancel())
    thread = worker.submit(make_request())
    thread.join(5)
    assert not thread.is_alive()
    assert worker.wait(1)[0] == "success"
