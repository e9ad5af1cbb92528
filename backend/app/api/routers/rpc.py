"""JSON-RPC 2.0 endpoint exposing the entry store operations.

Request:
    {"jsonrpc": "2.0", "method": "entry.Add", "params": {"userID": "u1", ...}, "id": 1}

Response:
    {"jsonrpc": "2.0", "result": {"message": "..."}, "id": 1}

Domain failures travel inside ``result``; only envelope, parameter and fatal
operation failures use the ``error`` member.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from starlette.concurrency import run_in_threadpool

from ...config.loader import DEFAULT_RPC_PATH
from ...domain.entrystore.errors import FatalError
from ...domain.entrystore.gateway import EntryStoreGateway
from ...infra.logging import get_logger
from ..dependencies import get_entry_gateway
from ..schemas import (
    AddEntryParams,
    CleanupParams,
    DeleteEntryParams,
    DeleteResponse,
    MessageResponse,
    SearchEntryParams,
    SearchResponse,
    StatsParams,
    StatsResponse,
    UpdateEntryParams,
)

logger = get_logger(__name__)

JSONRPC_VERSION = "2.0"
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
SERVER_ERROR = -32000


class RpcError(Exception):
    """Transport-level failure rendered into the JSON-RPC ``error`` member."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def _add(gateway: EntryStoreGateway, params: AddEntryParams) -> BaseModel:
    result = gateway.add(
        params.user_id,
        entry_type=params.type,
        content=params.content,
        tags=params.tags,
        metadata=params.metadata.to_domain() if params.metadata else None,
        scheduled=params.scheduled,
        deadline=params.deadline,
        priority=params.priority,
        todo_status=params.todo_status,
    )
    return MessageResponse.from_result(result)


def _update(gateway: EntryStoreGateway, params: UpdateEntryParams) -> BaseModel:
    result = gateway.update(params.user_id, params.uuid, params.to_patch())
    return MessageResponse.from_result(result)


def _delete(gateway: EntryStoreGateway, params: DeleteEntryParams) -> BaseModel:
    return DeleteResponse.from_result(gateway.delete(params.user_id, params.uuids))


def _cleanup(gateway: EntryStoreGateway, params: CleanupParams) -> BaseModel:
    return DeleteResponse.from_result(gateway.cleanup(params.user_id, params.types))


def _stats(gateway: EntryStoreGateway, params: StatsParams) -> BaseModel:
    return StatsResponse.from_result(
        gateway.stats(params.user_id, detailed=params.detailed)
    )


def _search(gateway: EntryStoreGateway, params: SearchEntryParams) -> BaseModel:
    result = gateway.search(
        params.user_id,
        types=params.types,
        content=params.content,
        tags=params.tags,
        priority=params.priority,
    )
    return SearchResponse.from_result(result)


# method name -> (params model, handler)
METHODS: Dict[str, tuple[type[BaseModel], Callable[..., BaseModel]]] = {
    "entry.Add": (AddEntryParams, _add),
    "entry.Update": (UpdateEntryParams, _update),
    "entry.Delete": (DeleteEntryParams, _delete),
    "entry.Cleanup": (CleanupParams, _cleanup),
    "entry.Stats": (StatsParams, _stats),
    "entry.Search": (SearchEntryParams, _search),
}


def _fold_field_names(
    params_model: type[BaseModel], params: Dict[str, Any]
) -> Dict[str, Any]:
    """Map argument keys onto the model's wire names, ignoring case.

    ``UserID`` and ``userid`` both land on ``userID``; an exact match wins
    over a case-folded one.
    """

    wire_names: Dict[str, str] = {}
    for name, model_field in params_model.model_fields.items():
        wire_name = model_field.alias or name
        wire_names.setdefault(wire_name.lower(), wire_name)
        wire_names.setdefault(name.lower(), wire_name)

    folded: Dict[str, Any] = {}
    for key, value in params.items():
        if key in params_model.model_fields or key in wire_names.values():
            continue
        folded[wire_names.get(key.lower(), key)] = value
    for key, value in params.items():
        if key in params_model.model_fields or key in wire_names.values():
            folded[key] = value
    return folded


def dispatch(gateway: EntryStoreGateway, method: str, params: Any) -> Dict[str, Any]:
    """Validate ``params`` for ``method``, call the gateway, return the result."""

    registered = METHODS.get(method)
    if registered is None:
        raise RpcError(METHOD_NOT_FOUND, f"Method not found: {method}")
    params_model, handler = registered

    # A single-element array wrapping the argument object is also accepted.
    if isinstance(params, list):
        if len(params) != 1:
            raise RpcError(INVALID_PARAMS, "params array must hold exactly one object")
        params = params[0]
    if params is None:
        params = {}
    if not isinstance(params, dict):
        raise RpcError(INVALID_PARAMS, "params must be an object")

    try:
        parsed = params_model.model_validate(_fold_field_names(params_model, params))
    except ValidationError as exc:
        raise RpcError(INVALID_PARAMS, f"Invalid params: {exc}") from exc

    try:
        response = handler(gateway, parsed)
    except FatalError as exc:
        logger.warning("rpc_fatal_error", extra={"method": method, "error": str(exc)})
        raise RpcError(SERVER_ERROR, str(exc)) from exc
    return response.model_dump(mode="json", by_alias=True)


def make_response(
    result: Any = None,
    error: Optional[Dict[str, Any]] = None,
    request_id: Any = None,
) -> JSONResponse:
    payload: Dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": request_id}
    if error is not None:
        payload["error"] = error
    else:
        payload["result"] = result
    return JSONResponse(content=payload)


def make_error(code: int, message: str, request_id: Any = None) -> JSONResponse:
    return make_response(
        error={"code": code, "message": message}, request_id=request_id
    )


async def handle_rpc(
    request: Request,
    gateway: EntryStoreGateway = Depends(get_entry_gateway),
) -> JSONResponse:
    """Decode one JSON-RPC call, run it off the event loop, encode the reply."""

    raw = await request.body()
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.warning("rpc_parse_error", extra={"error": str(exc)})
        return make_error(PARSE_ERROR, f"Parse error: {exc}")

    if not isinstance(payload, dict):
        return make_error(INVALID_REQUEST, "Request must be an object")
    request_id = payload.get("id")
    if payload.get("jsonrpc") != JSONRPC_VERSION:
        return make_error(
            INVALID_REQUEST, "Missing or invalid jsonrpc version", request_id
        )
    method = payload.get("method")
    if not method or not isinstance(method, str):
        return make_error(INVALID_REQUEST, "Missing or invalid method", request_id)

    try:
        result = await run_in_threadpool(
            dispatch, gateway, method, payload.get("params")
        )
    except RpcError as exc:
        return make_error(exc.code, exc.message, request_id)
    except Exception as exc:
        logger.exception("rpc_method_error", extra={"method": method})
        return make_error(INTERNAL_ERROR, f"Internal error: {exc}", request_id)
    return make_response(result=result, request_id=request_id)


def build_router(path: str = DEFAULT_RPC_PATH) -> APIRouter:
    """Return a router serving the JSON-RPC endpoint at ``path``."""

    router = APIRouter(tags=["rpc"])
    router.add_api_route(
        path,
        handle_rpc,
        methods=["POST"],
        summary="Entry store JSON-RPC endpoint",
    )
    return router
