import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from aibtcauth.errors import AccessDeniedError, AuthenticationError, ValidationError
from aibtcauth.web.routers.auth import BASE_PATH, SUPPORTED_ENDPOINTS

logger = structlog.get_logger(__name__)


def create_json_error_response(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    """Create the JSON error envelope."""
    return JSONResponse(status_code=status_code, content={"success": False, "error": message}, headers=headers)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    if isinstance(exc, AuthenticationError):
        status_code = 401
    elif isinstance(exc, AccessDeniedError):
        status_code = 403
    elif isinstance(exc, ValidationError):
        status_code = 400
    else:
        # Default for any other UserError subclass
        status_code = 400

    return create_json_error_response(status_code=status_code, message=str(exc))


async def configuration_error_handler(request: Request, exc: Exception) -> Response:
    """Fail closed when shared keys or the store are unavailable."""
    logger.error("configuration_error", path=request.url.path, error=str(exc))
    return create_json_error_response(status_code=401, message="Unable to verify service credentials")


async def request_validation_error_handler(_: Request, exc: Exception) -> Response:
    """Report missing or unparseable request fields as 400."""
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    if any(error["type"] == "json_invalid" for error in errors):
        return create_json_error_response(status_code=400, message="Request body is not valid JSON")

    fields = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        name = loc[-1] if loc else "body"
        if name not in fields:
            fields.append(name)
    problem = "Missing required" if all(error["type"] == "missing" for error in errors) else "Invalid"
    return create_json_error_response(status_code=400, message=f"{problem} parameters: {', '.join(fields)}")


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Render routing errors (unknown endpoint, wrong method) in the error envelope."""
    if not isinstance(exc, StarletteHTTPException):
        raise exc
    path = request.url.path
    if exc.status_code == 404:
        if path == BASE_PATH or path.startswith(BASE_PATH + "/"):
            endpoint = path.removeprefix(BASE_PATH)
            message = f"Unsupported endpoint: {endpoint}, supported endpoints: {', '.join(SUPPORTED_ENDPOINTS)}"
        else:
            message = f"Request at {path} does not start with base path {BASE_PATH}"
    elif exc.status_code == 405:
        allowed = (exc.headers or {}).get("Allow", "")
        message = f"Unsupported method: {request.method}, supported method: {allowed}"
    else:
        message = str(exc.detail)
    return create_json_error_response(status_code=exc.status_code, message=message, headers=exc.headers)


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("unexpected_error", error=str(exc))
    return create_json_error_response(status_code=500, message="An unexpected error occurred.")
