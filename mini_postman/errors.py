from typing import Optional


class MiniPostmanError(Exception):
    """Base exception for request and history errors."""
    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail


# Validation: raised before any network attempt
class ValidationError(MiniPostmanError):
    pass


class EmptyUrl(ValidationError):
    def __init__(self):
        super().__init__("URL cannot be empty")


class InvalidUrl(ValidationError):
    def __init__(self, detail: str):
        super().__init__(f"Invalid URL: {detail}", detail)


# Transport: raised only after the call was issued
class TransportError(MiniPostmanError):
    pass


class Timeout(TransportError):
    def __init__(self, detail: Optional[str] = None):
        super().__init__("Request timeout - the server took too long to respond", detail)


class ConnectionFailed(TransportError):
    def __init__(self, detail: str):
        super().__init__(f"Connection failed: {detail}", detail)


class RequestError(TransportError):
    def __init__(self, detail: str):
        super().__init__(f"Request error: {detail}", detail)


class Other(TransportError):
    def __init__(self, detail: str):
        super().__init__(f"HTTP error: {detail}", detail)


class PersistenceWarning(UserWarning):
    """Category for history file read/write/parse problems. Logged, never raised."""
