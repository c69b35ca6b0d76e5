"""
Custom APIRouter with response_model_by_alias=False default.

Models keep the MongoDB alias ``_id`` for storage (model_dump(by_alias=True)),
while API responses use the field name ``id``. Every route also documents
the shared error envelope for the error statuses the membership API returns.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter
from fastapi.routing import APIRoute
from pydantic import BaseModel


class ErrorBody(BaseModel):
    kind: str
    code: str
    message: str
    field: Optional[str] = None


class ErrorEnvelope(BaseModel):
    error: ErrorBody


ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: {"model": ErrorEnvelope, "description": "Precondition failed"},
    403: {"model": ErrorEnvelope, "description": "Not allowed for this participant"},
    404: {"model": ErrorEnvelope, "description": "Not found"},
    409: {"model": ErrorEnvelope, "description": "Duplicate entry or team busy"},
    422: {"model": ErrorEnvelope, "description": "Invalid request data"},
}


class APIRouteByFieldName(APIRoute):
    """APIRoute that forces response_model_by_alias=False."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs["response_model_by_alias"] = False
        super().__init__(*args, **kwargs)


class CustomAPIRouter(APIRouter):
    """
    APIRouter that serializes responses by field name and documents the
    error envelope on every route.

    Usage:
        from teamsync.api.router import CustomAPIRouter

        router = CustomAPIRouter()
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("route_class", APIRouteByFieldName)
        kwargs.setdefault("responses", ERROR_RESPONSES)
        super().__init__(*args, **kwargs)
