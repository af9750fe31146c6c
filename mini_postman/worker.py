import logging
import queue
import threading
from typing import Callable, Optional, Tuple

from .client import HttpClient
from .errors import Other, TransportError, ValidationError
from .models import HttpRequest, HttpResponse

log = logging.getLogger(__name__)

Event = Tuple[str, tuple]


class RequestWorker:
    """Runs one submission at a time off the caller's thread.

    The outcome arrives on ``events`` as a single terminal event,
    ``("success", (request, response))`` or ``("error", (request, exc))``.
    ``cancel()`` only stops delivery; the request itself keeps running
    until it completes or hits its timeout.
    Cancellation and delivery share a lock, so once ``cancel()`` returns
    no further event or ``on_success`` call happens for that submission.
    """
    def __init__(self, client: HttpClient, on_success: Callable[[HttpRequest, HttpResponse], None] = None):
        self.client = client
        self.on_success = on_success
        self.events: "queue.Queue[Event]" = queue.Queue()
        self._cancel_evt: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.RLock()

    @property
    def busy(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._cancel_evt.is_set()

    def submit(self, request: HttpRequest) -> threading.Thread:
        if self.busy:
            raise RuntimeError("a request is already in progress")
        cancel_evt = threading.Event()
        thread = threading.Thread(target=self._run, args=(request, cancel_evt), daemon=True)
        self._cancel_evt = cancel_evt
        self._thread = thread
        thread.start()
        return thread

    def cancel(self):
        with self._lock:
            if self._cancel_evt is not None and not self._cancel_evt.is_set():
                self._cancel_evt.set()
                log.info("Cancel requested; the running request will finish in the background")

    def poll(self) -> Optional[Event]:
        try:
            return self.events.get_nowait()
        except queue.Empty:
            return None

    def wait(self, timeout: float = None) -> Optional[Event]:
        try:
            return self.events.get(timeout=timeout)
        except queue.Empty:
            return None

    def _run(self, request: HttpRequest, cancel_evt: threading.Event):
        try:
            response = self.client.send(request)
        except (ValidationError, TransportError) as e:
            event = ("error", (request, e))
        except Exception as e:
            log.exception("Unexpected failure while sending request")
            event = ("error", (request, Other(str(e))))
        else:
            event = ("success", (request, response))
        with self._lock:
            if cancel_evt.is_set():
                log.debug("Discarding outcome of cancelled request to %s", request.url)
                return
            if event[0] == "success" and self.on_success is not None:
                try:
                    self.on_success(request, event[1][1])
                except Exception:
                    log.exception("on_success callback failed")
            self.events.put(event)
