from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from aibtcauth.core.modules.session.models import AddressSession, SessionInfo
from aibtcauth.web.deps import AppDep, ServiceAuthDep
from aibtcauth.web.openapi import ApiResponse, ErrorResponse

BASE_PATH = "/auth"
SUPPORTED_ENDPOINTS = ["/request-auth-token", "/verify-address", "/verify-session-token"]

router = APIRouter(prefix=BASE_PATH, tags=["auth"])

ERROR_RESPONSES: dict[int | str, dict[str, object]] = {
    400: {"model": ErrorResponse, "description": "Missing or malformed parameters"},
    401: {"model": ErrorResponse, "description": "Invalid shared key, signature or session"},
}


class EndpointList(BaseModel):
    endpoints: list[str] = Field(..., description="Endpoints served under /auth")


class RequestAuthTokenRequest(BaseModel):
    """Signed challenge submitted on behalf of a wallet."""

    signature: str = Field(..., description="Hex RSV signature over the challenge")
    public_key: str = Field(..., alias="publicKey", description="Hex public key of the signer")

    model_config = ConfigDict(populate_by_name=True)


class DataRequest(BaseModel):
    data: str = Field(..., description="Address or session token to look up")


@router.get("", summary="List endpoints", operation_id="listAuthEndpoints")
@router.get("/", include_in_schema=False)
async def list_endpoints() -> ApiResponse[EndpointList]:
    return ApiResponse(data=EndpointList(endpoints=SUPPORTED_ENDPOINTS))


@router.post(
    "/request-auth-token",
    summary="Exchange a signature for a session token",
    description="Verify the wallet signature of the challenge and issue a session token for its address.",
    operation_id="requestAuthToken",
    dependencies=[ServiceAuthDep],
    responses=ERROR_RESPONSES,
)
async def request_auth_token(body: RequestAuthTokenRequest, app: AppDep) -> ApiResponse[SessionInfo]:
    session = await app.request_auth_token(body.signature, body.public_key)
    return ApiResponse(data=session)


@router.post(
    "/verify-address",
    summary="Get the session token of an address",
    operation_id="verifyAddress",
    dependencies=[ServiceAuthDep],
    responses=ERROR_RESPONSES,
)
async def verify_address(body: DataRequest, app: AppDep) -> ApiResponse[AddressSession]:
    session_key = await app.verify_address(body.data)
    return ApiResponse(data=AddressSession(address=body.data, session_key=session_key))


@router.post(
    "/verify-session-token",
    summary="Get the address of a session token",
    operation_id="verifySessionToken",
    dependencies=[ServiceAuthDep],
    responses=ERROR_RESPONSES,
)
async def verify_session_token(body: DataRequest, app: AppDep) -> ApiResponse[SessionInfo]:
    address = await app.verify_session_token(body.data)
    return ApiResponse(data=SessionInfo(address=address, session_token=body.data))
