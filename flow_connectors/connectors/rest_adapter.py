"""
REST Adapter Module

This module defines the common contract for flow connectors. Every connector
performs the same steps: validate its arguments and secret, build one HTTP
request, send it, classify the response, and write either the result or an
error object to the conversation.

The steps are implemented once in perform_rest_call. A connector only declares
its required fields, how to build its request and how to read a successful
response, plus the argument schema shown to flow authors.
"""

import enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

import httpx
from pydantic import BaseModel, Field

from flow_connectors.memory.flow_context import FlowContext
from flow_connectors.utils.logger import setup_logger

# Initialize logger
logger = setup_logger(__name__)

SECRET_NOT_DEFINED = "Secret not defined."
STORE_NOT_DEFINED = "Context store not defined."
STOP_ON_ERROR_NOT_DEFINED = "Stop on error flag not defined."

# Errors

class ConnectorError(Exception):
    """Base exception for connector errors."""

    def __init__(self, message: str, connector: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.connector = connector


class ArgumentValidationError(ConnectorError):
    """A required argument or secret field is missing."""

    pass


class ConnectorCallError(ConnectorError):
    """The outbound call failed or returned an unusable payload."""

    pass


# Argument schema

class ArgumentType(str, enum.Enum):
    """Types of arguments a flow author can declare for a connector."""
    STRING = "string"
    BOOLEAN = "boolean"
    NUMBER = "number"
    SELECT = "select"
    JSON = "json"
    SECRET = "secret"

class ArgumentSpec(BaseModel):
    """A single argument of a connector as presented to flow authors."""
    name: str = Field(..., description="Argument name as passed in args")
    type: ArgumentType = Field(..., description="Argument type")
    description: str = Field(..., description="Human-readable description")
    required: bool = Field(False, description="Whether the connector rejects a missing value")
    choices: Optional[List[str]] = Field(None, description="Allowed values for select arguments")

class ConnectorSpec(BaseModel):
    """Metadata describing one connector."""
    module: str = Field(..., description="Connector module, e.g. 'jira'")
    name: str = Field(..., description="Connector name within the module")
    description: str = Field(..., description="What the connector does")
    arguments: List[ArgumentSpec] = Field(default_factory=list)

    model_config = {"use_enum_values": True}


def secret_argument() -> ArgumentSpec:
    return ArgumentSpec(name="secret", type=ArgumentType.SECRET, required=True,
                        description="The configured secret to use")

def stop_on_error_argument() -> ArgumentSpec:
    return ArgumentSpec(name="stopOnError", type=ArgumentType.BOOLEAN, required=True,
                        description="Whether to stop on error or continue")

def store_argument(name: str = "store") -> ArgumentSpec:
    return ArgumentSpec(name=name, type=ArgumentType.STRING, required=True,
                        description="Where to store the result")


# Registry of connectors, keyed by (module, name)
_connectors: Dict[Tuple[str, str], Callable[..., Awaitable[FlowContext]]] = {}

def register_connector(
    module: str, name: str, description: str, arguments: Sequence[ArgumentSpec]
) -> Callable:
    """
    Decorator registering a connector function together with its argument schema.

    The spec is attached to the function as ``func.spec``.
    """
    spec = ConnectorSpec(module=module, name=name, description=description, arguments=list(arguments))

    def decorator(func):
        func.spec = spec
        _connectors[(module, name)] = func
        logger.debug(f"Registered connector {module}.{name}")
        return func

    return decorator

def get_connector(module: str, name: str) -> Optional[Callable[..., Awaitable[FlowContext]]]:
    """
    Get a connector function by module and name.

    Returns:
        The connector, or None if not registered
    """
    return _connectors.get((module, name))

def list_connectors() -> List[ConnectorSpec]:
    """Return the specs of all registered connectors, sorted by module and name."""
    return [_connectors[key].spec for key in sorted(_connectors)]


# Requests and results

class StoreTarget(str, enum.Enum):
    """Where a connector writes its result."""
    CONTEXT = "context"            # through add_to_context
    FULL_CONTEXT = "full_context"  # direct assignment in the full context map
    INPUT = "input"                # direct assignment in the input map

class RestRequest(BaseModel):
    """One outbound HTTP request."""
    method: str
    url: str
    params: Dict[str, Any] = Field(default_factory=dict)
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Any = Field(None, description="JSON body")
    data: Optional[Dict[str, Any]] = Field(None, description="Form body")
    files: Optional[Dict[str, Any]] = Field(None, description="Multipart files")
    auth: Optional[Tuple[str, str]] = Field(None, description="Basic auth credentials")

    def query_params(self) -> Dict[str, Any]:
        """Query parameters without unset values."""
        return {key: value for key, value in self.params.items() if value is not None}


def validate_arguments(
    connector: str,
    args: Dict[str, Any],
    required: Dict[str, str],
    secret_fields: Sequence[str] = (),
    store_key: str = "store",
) -> Dict[str, Any]:
    """
    Validate per-call arguments and the secret.

    Args:
        connector: Connector name, used on raised errors
        args: Invocation arguments
        required: Required argument names mapped to the message raised when missing
        secret_fields: Fields the secret must provide; empty when no secret is used
        store_key: Name of the argument holding the store destination

    Returns:
        The secret mapping (empty when the connector needs none)

    Raises:
        ArgumentValidationError: On the first missing argument or secret field
    """
    secret = args.get("secret") or {}
    if secret_fields and not secret:
        raise ArgumentValidationError(SECRET_NOT_DEFINED, connector)

    for name, message in required.items():
        if not args.get(name):
            raise ArgumentValidationError(message, connector)

    if not args.get(store_key):
        raise ArgumentValidationError(STORE_NOT_DEFINED, connector)
    if args.get("stopOnError") is None:
        raise ArgumentValidationError(STOP_ON_ERROR_NOT_DEFINED, connector)

    for field in secret_fields:
        if not secret.get(field):
            raise ArgumentValidationError(f"Secret is missing the '{field}' field.", connector)

    return secret


def extract_error_message(payload: Any) -> Optional[str]:
    """
    Pull a message out of a structured API error payload.

    Recognises Jira (``errorMessages`` list or ``errorMessage``), ServiceNow and
    Azure (``error.message``), Bing (``errors[].message``) and Yext
    (``meta.errors[].message``).
    Returns None when the shape is not recognised.
    """
    if not isinstance(payload, dict):
        return None

    messages = payload.get("errorMessages")
    if isinstance(messages, list) and messages:
        return str(messages[0])
    if payload.get("errorMessage"):
        return str(payload["errorMessage"])

    error = payload.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error

    # Bing search (ErrorResponse)
    errors = payload.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict) and errors[0].get("message"):
        return str(errors[0]["message"])

    errors = (payload.get("meta") or {}).get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict) and errors[0].get("message"):
        return str(errors[0]["message"])

    return None


def write_result(flow: FlowContext, target: StoreTarget, store: str, value: Any) -> None:
    """Write a result to the configured store location."""
    if target == StoreTarget.CONTEXT:
        flow.add_to_context(store, value, "simple")
    elif target == StoreTarget.FULL_CONTEXT:
        flow.get_full_context()[store] = value
    else:
        flow.input[store] = value


def handle_error(
    flow: FlowContext,
    args: Dict[str, Any],
    error: ConnectorCallError,
    store_key: str = "store",
    target: StoreTarget = StoreTarget.CONTEXT,
    abort_template: str = "{message}",
) -> FlowContext:
    """
    Apply the stopOnError policy to a failed call.

    Raises the error when stopOnError is set, otherwise records
    ``{"error": message}`` in the store and returns the flow.
    """
    if args.get("stopOnError"):
        raise ConnectorCallError(abort_template.format(message=error.message), error.connector) from error

    write_result(flow, target, args[store_key], {"error": error.message})
    return flow


def parse_json(response: httpx.Response, args: Dict[str, Any]) -> Any:
    """Return the decoded JSON body unchanged."""
    return response.json()


def _classify_failure(
    connector: str, flow: FlowContext, response: httpx.Response, fallback_error: Optional[str]
) -> ConnectorCallError:
    try:
        payload = response.json()
    except ValueError:
        payload = None

    message = extract_error_message(payload)
    if message is None:
        message = fallback_error or f"Request failed with status code {response.status_code}"
        logger.warning(f"{connector}: unrecognized error response (status {response.status_code})")
        flow.log("error", f"{connector}: unrecognized error response from the API")

    return ConnectorCallError(message, connector)


async def perform_rest_call(
    flow: FlowContext,
    args: Dict[str, Any],
    *,
    connector: str,
    required: Dict[str, str],
    secret_fields: Sequence[str],
    build_request: Callable[[Dict[str, Any], Dict[str, Any]], RestRequest],
    parse_response: Callable[[httpx.Response, Dict[str, Any]], Any] = parse_json,
    prepare_request: Optional[Callable[[httpx.AsyncClient, RestRequest, Dict[str, Any]], Awaitable[RestRequest]]] = None,
    store_key: str = "store",
    target: StoreTarget = StoreTarget.CONTEXT,
    abort_template: str = "{message}",
    fallback_error: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FlowContext:
    """
    Run one validated REST call and write its outcome to the flow.

    Args:
        flow: The flow context to write into
        args: Invocation arguments, including secret, store and stopOnError
        connector: Connector name, used in errors and logs
        required: Required argument names mapped to their validation messages
        secret_fields: Fields the secret must provide
        build_request: Builds the request from validated args and secret
        parse_response: Turns a successful response into the stored result;
            raises ConnectorCallError for empty or unusable payloads
        prepare_request: Optional coroutine run with the call's client before
            sending, for requests that need data fetched first
        store_key: Argument holding the store destination
        target: Where the result is written
        abort_template: Format of the message raised when stopOnError is set
        fallback_error: Message used when an error response is not recognised
        transport: Optional httpx transport, used by tests

    Returns:
        The flow context

    Raises:
        ArgumentValidationError: When validation fails, before any request
        ConnectorCallError: When the call fails and stopOnError is set
    """
    secret = validate_arguments(connector, args, required, secret_fields, store_key)
    request = build_request(args, secret)

    try:
        async with httpx.AsyncClient(transport=transport, follow_redirects=True) as client:
            if prepare_request is not None:
                request = await prepare_request(client, request, args)

            response = await client.request(
                request.method,
                request.url,
                params=request.query_params(),
                headers=request.headers,
                json=request.body,
                data=request.data,
                files=request.files,
                auth=request.auth,
            )

        if not response.is_success:
            raise _classify_failure(connector, flow, response, fallback_error)

        try:
            result = parse_response(response, args)
        except ValueError as e:
            logger.warning(f"{connector}: malformed response body: {e}")
            flow.log("error", f"{connector}: malformed response body")
            raise ConnectorCallError(f"Malformed response from the API: {e}", connector)

    # InvalidURL is not an HTTPError subclass
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.error(f"{connector}: request failed: {e}")
        flow.log("error", f"{connector}: request failed")
        error = ConnectorCallError(str(e) or f"Request failed: {e.__class__.__name__}", connector)
        return handle_error(flow, args, error, store_key, target, abort_template)
    except ConnectorCallError as e:
        return handle_error(flow, args, e, store_key, target, abort_template)

    write_result(flow, target, args[store_key], result)
    return flow
