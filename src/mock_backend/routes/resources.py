"""
Generic REST surface over the document store.

Every top-level key of the database is served at ``/{name}``: lists as
collections with per-record routes, objects as singular resources.
"""
from typing import Any, Dict
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from mock_backend.config.settings import Settings
from mock_backend.routes.deps import get_settings, get_store, read_body
from mock_backend.store.document_store import DocumentStore
from mock_backend.store.query import apply_query
from mock_backend.utils.errors import BadRequestError, MethodNotAllowedError, NotFoundError

router = APIRouter(tags=["resources"])


async def _object_body(request: Request) -> Dict[str, Any]:
    try:
        body = await read_body(request)
    except ValueError:
        raise BadRequestError("Malformed JSON body")
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise BadRequestError("Request body must be a JSON object")
    return body


def _require(store: DocumentStore, name: str):
    if not store.has(name):
        raise NotFoundError()


@router.get("/")
async def root(store: DocumentStore = Depends(get_store), settings: Settings = Depends(get_settings)):
    """Service info and collection sizes"""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "prefix": settings.API_PREFIX,
        "login": f"POST {settings.login_route}",
        "resources": store.summary(),
        "singular": [name for name in store.names() if store.is_singular(name)],
    }


@router.get("/db")
async def database(store: DocumentStore = Depends(get_store)):
    """The whole database document"""
    return store.snapshot()


@router.get("/{name}")
async def list_resource(name: str, request: Request, store: DocumentStore = Depends(get_store)):
    _require(store, name)
    if store.is_singular(name):
        return store.singular(name)
    records = store.collection(name)
    return apply_query(records, list(request.query_params.multi_items()))


@router.post("/{name}")
async def create_resource(name: str, request: Request, store: DocumentStore = Depends(get_store)):
    _require(store, name)
    body = await _object_body(request)
    if store.is_singular(name):
        return store.replace_singular(name, body)
    record = store.insert(name, body)
    return JSONResponse(status_code=201, content=record)


@router.put("/{name}")
async def replace_singular(name: str, request: Request, store: DocumentStore = Depends(get_store)):
    _require(store, name)
    if not store.is_singular(name):
        raise MethodNotAllowedError()
    return store.replace_singular(name, await _object_body(request))


@router.patch("/{name}")
async def update_singular(name: str, request: Request, store: DocumentStore = Depends(get_store)):
    _require(store, name)
    if not store.is_singular(name):
        raise MethodNotAllowedError()
    return store.update_singular(name, await _object_body(request))


@router.get("/{name}/{record_id}")
async def get_record(name: str, record_id: str, store: DocumentStore = Depends(get_store)):
    return store.get(name, record_id)


@router.put("/{name}/{record_id}")
async def replace_record(name: str, record_id: str, request: Request, store: DocumentStore = Depends(get_store)):
    store.get(name, record_id)
    return store.replace(name, record_id, await _object_body(request))


@router.patch("/{name}/{record_id}")
async def update_record(name: str, record_id: str, request: Request, store: DocumentStore = Depends(get_store)):
    store.get(name, record_id)
    return store.update(name, record_id, await _object_body(request))


@router.delete("/{name}/{record_id}")
async def delete_record(name: str, record_id: str, store: DocumentStore = Depends(get_store)):
    store.delete(name, record_id)
    return {}


@router.get("/{name}/{record_id}/{child}")
async def list_children(name: str, record_id: str, child: str, request: Request,
                        store: DocumentStore = Depends(get_store)):
    """Records of ``child`` belonging to ``name/record_id`` (/users/1/bookings)"""
    _require(store, name)
    records = store.collection(child)
    params = [(store.foreign_key(name), record_id)] + list(request.query_params.multi_items())
    return apply_query(records, params)


@router.post("/{name}/{record_id}/{child}")
async def create_child(name: str, record_id: str, child: str, request: Request,
                       store: DocumentStore = Depends(get_store)):
    _require(store, name)
    body = await _object_body(request)
    parent = store.find(name, record_id) if store.is_collection(name) else None
    body[store.foreign_key(name)] = parent[store.id_field] if parent is not None else record_id
    record = store.insert(child, body)
    return JSONResponse(status_code=201, content=record)
