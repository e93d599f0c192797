from typing import Annotated, cast

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader

from aibtcauth.app import App

# The shared secret is sent as the raw Authorization header value, no scheme
shared_key_scheme = APIKeyHeader(name="Authorization", auto_error=False)


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


AppDep = Annotated[App, Depends(get_app)]


async def authorize_service(
    app: AppDep,
    authorization: Annotated[str | None, Depends(shared_key_scheme)] = None,
) -> None:
    """Reject the request unless it carries a trusted caller's shared secret."""
    await app.authorize_service(authorization)


ServiceAuthDep = Depends(authorize_service)
