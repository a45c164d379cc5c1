from __future__ import annotations

import functools
import json
from enum import IntEnum
from typing import TYPE_CHECKING
from typing import Any
from typing import NoReturn
from typing import Optional
from typing import Protocol
from typing import runtime_checkable

if TYPE_CHECKING:
    from httpx import ConnectError
    from httpx import RequestError
    from httpx import Response as HTTPResponse
    from pydantic import ValidationError


class ZbxError(Exception):
    """Base exception class for zbx exceptions."""


class ConfigError(ZbxError):
    """Error with configuration file."""


class InvalidVersion(ZbxError, ValueError):
    """Version string does not match the Zabbix API version grammar."""


class ZabbixAPIException(ZbxError):
    # Extracted from pyzabbix, hence *Exception suffix instead of *Error
    """Base exception class for Zabbix API exceptions."""

    def reason(self) -> str:
        return str(self)


class ErrorCode(IntEnum):
    """Reserved JSON-RPC and Zabbix API error codes."""

    NONE = 0
    """Not a server error (client-side fault)."""
    PARSE = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL = -32603
    APPLICATION = -32500
    SYSTEM = -32400
    TRANSPORT = -32300


class APIError(ZabbixAPIException):
    """Error reported by the Zabbix API in the `error` object of a response."""

    def __init__(self, code: int, message: str, data: Optional[str] = None) -> None:
        self.code = code
        self.message = message
        self.data = data
        super().__init__(code, message, data)

    def __str__(self) -> str:
        msg = f"({self.code}) {self.message}"
        if self.data:
            msg += f" {self.data}"
        return msg

    def reason(self) -> str:
        return str(self)


class ZabbixAPIClientError(ZabbixAPIException):
    """Client-side fault. The request never produced a usable API response."""


class ZabbixAPIRequestError(ZabbixAPIClientError):
    """Failed to send a request or receive its response."""

    def __init__(self, *args: Any, response: Optional[HTTPResponse] = None) -> None:
        super().__init__(*args)
        self.response = response

    def reason(self) -> str:
        if self.response is not None and self.response.text:
            return f"{self} {self.response.text}"
        return str(self)


class ZabbixAPIResponseParsingError(ZabbixAPIClientError):
    """Response body could not be parsed as a JSON-RPC response."""


class ZabbixAPIResponseIDMismatch(ZabbixAPIClientError):
    """Response ID does not match the request ID."""

    def __init__(self, request_id: int, response_id: Optional[int]) -> None:
        self.request_id = request_id
        self.response_id = response_id
        super().__init__(
            f"Response ID {response_id} does not match request ID {request_id}"
        )


class ZabbixAPIEmptyTokenError(ZabbixAPIClientError):
    """Login succeeded without returning a session token."""


REDACTED_PARAMS = ("password", "auth", "token")


def redact_params(params: Any) -> Any:
    """Return a copy of `params` with secret values masked."""
    if isinstance(params, dict):
        return {
            k: "**********" if k in REDACTED_PARAMS else redact_params(v)
            for k, v in params.items()
        }
    if isinstance(params, list):
        return [redact_params(p) for p in params]
    return params


class CallError(ZabbixAPIException):
    """A Zabbix API call failed.

    Carries the request that was sent. The failure itself is the `cause`,
    which is either an `APIError` (reported by the server) or a
    `ZabbixAPIClientError` (detected by the client).
    """

    def __init__(
        self,
        request_id: int,
        method: str,
        params: Any,
        cause: ZabbixAPIException,
    ) -> None:
        self.request_id = request_id
        self.method = method
        self.params = params
        self.cause = cause
        super().__init__(request_id, method, cause)

    def unwrap(self) -> ZabbixAPIException:
        """Return the underlying error."""
        return self.cause

    @property
    def api_error(self) -> Optional[APIError]:
        """The server-reported error, if the call failed on the server."""
        if isinstance(self.cause, APIError):
            return self.cause
        return None

    @property
    def is_client_fault(self) -> bool:
        return isinstance(self.cause, ZabbixAPIClientError)

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.request_id,
            "method": self.method,
            "params": redact_params(self.params),
            "error": self.cause.reason(),
        }

    def __str__(self) -> str:
        return json.dumps(self.as_dict(), default=str)

    def reason(self) -> str:
        return self.cause.reason()


class ZabbixNotFoundError(ZabbixAPIException):
    """A Zabbix API resource was not found."""


def get_error_code(e: Optional[BaseException]) -> int:
    """Returns the API error code from the first `APIError` in
    the cause chain of `e`, or `ErrorCode.NONE` if there is none."""
    while e is not None:
        if isinstance(e, APIError):
            return e.code
        if isinstance(e, CallError):
            e = e.cause
        else:
            e = e.__cause__
    return ErrorCode.NONE


class Exiter(Protocol):
    """Protocol class for exit function that can be passed to an
    exception handler function.
    """

    def __call__(
        self,
        message: str,
        code: int = ...,
        exception: Optional[Exception] = ...,
        **kwargs: Any,
    ) -> NoReturn: ...


@runtime_checkable
class HandleFunc(Protocol):
    """Interface for exception handler functions.

    They take any exception as the argument and exit with the
    appropriate message after running any necessary logging.
    """

    def __call__(self, e: Any) -> NoReturn: ...


def get_cause_args(e: Optional[BaseException]) -> list[str]:
    """Retrieves all args as strings from all exceptions in the cause chain.
    Flattens the args into a single list.
    """
    args: list[str] = []
    while e:
        args.extend(get_exc_args(e))
        e = e.__cause__
    return args


def get_exc_args(e: BaseException) -> list[str]:
    """Returns the error message as a list of strings."""
    if isinstance(e, CallError):
        # The cause is the next link in the chain
        return [f"{e.method} (request {e.request_id}) failed"]
    if isinstance(e, ZabbixAPIException):
        return [e.reason()]
    return [str(arg) for arg in e.args]


def handle_notraceback(e: Exception) -> NoReturn:
    """Handles an exception with no traceback in console.
    The exception is logged with a traceback in the log file.
    """
    get_exit_err()(str(e), exception=e, exc_info=True)


def handle_call_error(e: CallError) -> NoReturn:
    """Handles a failed API call, printing the method and the reason."""
    get_exit_err()(f"{e.method}: {e.reason()}", exception=e, exc_info=True)


def handle_validation_error(e: ValidationError) -> NoReturn:
    """Handles a Pydantic validation error."""
    get_exit_err()(str(e), exception=e, exc_info=True)


def _fmt_request_error(e: RequestError, exc_type: str, reason: str) -> str:
    method = e.request.method
    url = e.request.url
    return f"{exc_type}: {method} {url} - {reason}"


def handle_connect_error(e: ConnectError) -> NoReturn:
    """Handles an httpx ConnectError."""
    if e.args and "connection refused" in str(e.args[0]).casefold():
        reason = "Connection refused"
    else:
        reason = str(e)
    msg = _fmt_request_error(e, "Connection error", reason)
    get_exit_err()(msg, exception=e, exc_info=False)


def get_exception_handler(type_: type[Exception]) -> Optional[HandleFunc]:
    """Returns the exception handler for the given exception type."""
    from httpx import ConnectError
    from pydantic import ValidationError

    # Defined inline for performance reasons (httpx and pydantic imports)
    EXC_HANDLERS: dict[type[Exception], HandleFunc] = {
        CallError: handle_call_error,
        ZabbixAPIException: handle_notraceback,
        ZbxError: handle_notraceback,
        ValidationError: handle_validation_error,
        ConnectError: handle_connect_error,
    }
    """Mapping of exception types to exception handling strategies."""

    handler = EXC_HANDLERS.get(type_, None)
    if handler:
        return handler
    if type_.__bases__:
        for base in type_.__bases__:
            handler = get_exception_handler(base)
            if handler:
                return handler
    return None


def handle_exception(e: Exception) -> NoReturn:
    """Handles an exception and exits with the appropriate message."""
    handler = get_exception_handler(type(e))
    if not handler:
        raise e
    handler(e)


@functools.lru_cache(maxsize=1)
def get_exit_err() -> Exiter:
    """Cached lazy-import of `zbx.output.console.exit_err`.
    Avoids circular imports.
    """
    from zbx.output.console import exit_err as _exit_err

    return _exit_err
