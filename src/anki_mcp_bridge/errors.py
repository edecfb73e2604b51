"""Error taxonomy shared by the client, the schema cache and the tool layer."""

from enum import Enum

import httpx

CONNECTION_MESSAGE = (
    "Anki is not running. Please start Anki and ensure AnkiConnect plugin is enabled."
)
TIMEOUT_MESSAGE = "Connection to Anki timed out. Please check if Anki is responsive."
COLLECTION_MESSAGE = "Anki collection is unavailable. Please close any open dialogs in Anki."

_CONNECTION_SIGNATURES = ("connection refused", "econnrefused")
_TIMEOUT_SIGNATURES = ("timeout", "timed out", "etimedout")
_COLLECTION_SIGNATURES = ("collection unavailable", "collection is not available")


class ErrorKind(str, Enum):
    """Failure classes a caller can act on."""

    CONNECTION = "connection"  # Anki not running or unreachable
    TIMEOUT = "timeout"  # Anki did not answer within the deadline
    API = "api"  # AnkiConnect rejected the action
    VALIDATION = "validation"  # Caller arguments are invalid, never retried


class AnkiError(Exception):
    """Classified failure talking to Anki.

    A single exception type tagged with an ErrorKind. Match on ``error.kind``
    rather than on subclasses.
    """

    def __init__(self, kind: ErrorKind, message: str, code: str | None = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.code = code

    def __repr__(self) -> str:
        return f"AnkiError(kind={self.kind.value!r}, message={self.message!r}, code={self.code!r})"

    @classmethod
    def connection(cls, message: str = CONNECTION_MESSAGE) -> "AnkiError":
        return cls(ErrorKind.CONNECTION, message)

    @classmethod
    def timeout(cls, message: str = TIMEOUT_MESSAGE) -> "AnkiError":
        return cls(ErrorKind.TIMEOUT, message)

    @classmethod
    def api(cls, message: str, code: str | None = None) -> "AnkiError":
        return cls(ErrorKind.API, message, code)

    @classmethod
    def validation(cls, message: str) -> "AnkiError":
        return cls(ErrorKind.VALIDATION, message)


def _matches(text: str, signatures: tuple[str, ...]) -> bool:
    return any(signature in text for signature in signatures)


def normalize_error(error: object) -> Exception:
    """Classify a raw failure from one request attempt.

    Rules are checked in order: connection refused, timeout, collection
    unavailable. Other exceptions are returned unchanged and anything that is
    not an exception is wrapped with its string form.

    Args:
        error: Whatever the attempt raised

    Returns:
        An AnkiError with a remediation message, or the original exception
    """
    if not isinstance(error, Exception):
        return Exception(str(error))

    text = str(error).lower()

    if isinstance(error, httpx.ConnectError) or _matches(text, _CONNECTION_SIGNATURES):
        return AnkiError.connection()

    if isinstance(error, httpx.TimeoutException) or _matches(text, _TIMEOUT_SIGNATURES):
        return AnkiError.timeout()

    if _matches(text, _COLLECTION_SIGNATURES):
        code = error.code if isinstance(error, AnkiError) else None
        return AnkiError.api(COLLECTION_MESSAGE, code)

    return error
