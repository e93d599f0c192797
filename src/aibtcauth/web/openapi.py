from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="aibtcdev auth API",
            version="0.1.0",
            summary="Wallet signature authentication and session tokens",
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "SharedKey": {
                "type": "apiKey",
                "in": "header",
                "name": "Authorization",
                "description": "Shared secret of a trusted calling service",
            },
        }
        openapi_schema["security"] = [{"SharedKey": []}]

        public_endpoints = {
            ("GET", "/auth"),
            ("GET", "/health"),
        }

        for path, path_item in openapi_schema["paths"].items():
            for method, operation in path_item.items():
                if (method.upper(), path) in public_endpoints:
                    operation["security"] = []

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ApiResponse[T](BaseModel):
    """Success envelope."""

    success: bool = Field(True, description="Always true for successful responses")
    data: T


class ErrorResponse(BaseModel):
    """Error envelope."""

    success: bool = Field(False, description="Always false for errors")
    error: str = Field(..., description="Human-readable error message")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"success": False, "error": "Invalid Authorization key"},
                {"success": False, "error": "Missing required parameters: signature, publicKey"},
            ]
        }
    }
