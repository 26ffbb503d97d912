from typing import Any
from urllib.parse import parse_qsl
from fastapi import Request

from mock_backend.config.settings import Settings
from mock_backend.store.document_store import DocumentStore
from mock_backend.utils.helpers import parse_json_bytes

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def get_store(request: Request) -> DocumentStore:
    """The store handle the app was built with"""
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def read_body(request: Request) -> Any:
    """
    Decode a JSON or url-encoded request body, chosen by Content-Type.

    Returns None for an empty body or any other content type. Raises
    ValueError for a JSON body that does not decode or whose top level is
    neither an object nor an array.
    """
    raw = await request.body()
    if not raw.strip():
        return None

    media_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if media_type == FORM_CONTENT_TYPE:
        return dict(parse_qsl(raw.decode("utf-8"), keep_blank_values=True))
    if media_type != JSON_CONTENT_TYPE:
        return None

    body = parse_json_bytes(raw)
    if not isinstance(body, (dict, list)):
        raise ValueError("JSON body must be an object or an array")
    return body
