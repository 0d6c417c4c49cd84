import json
import logging
from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel, ValidationError
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.core.errors import ValidationFailed

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, PATCH, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

AUDIO_CONTENT_TYPES = {
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
}


class PreflightMiddleware(BaseHTTPMiddleware):
    """Answer every CORS preflight with 204 before routing"""

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=CORS_HEADERS)
        return await call_next(request)


async def parse_body(request: Request) -> Dict[str, Any]:
    """Parse the body by content type; anything unreadable yields ``{}``"""
    content_type = request.headers.get("content-type", "")
    try:
        if "application/json" in content_type:
            data = json.loads(await request.body() or b"{}")
            return data if isinstance(data, dict) else {}
        if "multipart/form-data" in content_type or "application/x-www-form-urlencoded" in content_type:
            form = await request.form()
            return {key: value for key, value in form.multi_items()}
    except (ValueError, HTTPException) as e:
        logger.debug("Ignoring unreadable request body: %s", e)
    return {}


def validate_body(model: Type[ModelT], body: Dict[str, Any], message: str) -> ModelT:
    """Validate a parsed body, raising ``ValidationFailed(message)`` with the field errors"""
    try:
        return model.model_validate(body)
    except ValidationError as e:
        raise ValidationFailed(
            message,
            details=[{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()],
        )


def query_params(request: Request) -> Dict[str, str]:
    return dict(request.query_params)


def is_upload(value: Any) -> bool:
    return isinstance(value, UploadFile)


def audio_content_type(filename: str) -> str:
    for extension, content_type in AUDIO_CONTENT_TYPES.items():
        if filename.endswith(extension):
            return content_type
    return "audio/webm"
