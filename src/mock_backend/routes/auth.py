from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from loguru import logger

from mock_backend.config.settings import Settings
from mock_backend.routes.deps import get_settings, get_store, read_body
from mock_backend.store.document_store import DocumentStore
from mock_backend.utils.errors import BadRequestError, InvalidCredentialsError, error_body
from mock_backend.utils.helpers import js_str, strict_equals

_MISSING = object()


class LoginResponse(BaseModel):
    token: str
    user: Dict[str, Any]


class ErrorResponse(BaseModel):
    message: str


def find_user(store: DocumentStore, collection: str, phone: Any, password: Any) -> Optional[Dict[str, Any]]:
    """First user whose phone and password strictly equal the given ones"""
    if phone is _MISSING or password is _MISSING:
        return None
    if not store.is_collection(collection):
        return None

    for user in store.collection(collection):
        if not isinstance(user, dict):
            continue
        if "phone" not in user or "password" not in user:
            continue
        if strict_equals(user["phone"], phone) and strict_equals(user["password"], password):
            return user
    return None


def login_payload(user: Dict[str, Any], id_field: str, token_prefix: str) -> Dict[str, Any]:
    """Token plus the user record without its password"""
    return {
        "token": token_prefix + (js_str(user[id_field]) if id_field in user else "undefined"),
        "user": {k: v for k, v in user.items() if k != "password"},
    }


async def login(
    request: Request,
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """Exchange phone + password for a mock token"""
    try:
        body = await read_body(request)
    except ValueError:
        raise BadRequestError("Malformed JSON body")
    if not isinstance(body, dict):
        body = {}

    user = find_user(
        store,
        settings.USERS_COLLECTION,
        body.get("phone", _MISSING),
        body.get("password", _MISSING),
    )

    if user is None:
        logger.info("Login rejected: invalid credentials")
        return JSONResponse(
            status_code=InvalidCredentialsError.status_code,
            content=error_body(InvalidCredentialsError.default_message),
        )

    payload = login_payload(user, store.id_field, settings.TOKEN_PREFIX)
    logger.info(f"Login succeeded for user {js_str(user.get(store.id_field))}")
    return JSONResponse(content=payload)


def build_auth_router(path: str) -> APIRouter:
    """Login handler mounted at its full (prefixed) path"""
    router = APIRouter(tags=["auth"])
    router.add_api_route(
        path,
        login,
        methods=["POST"],
        response_model=LoginResponse,
        responses={401: {"model": ErrorResponse}},
        name="auth_login",
    )
    return router
