"""FastAPI tests for the JSON-RPC entry endpoint."""

from __future__ import annotations

from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from backend.app.api.dependencies import get_entry_gateway
from backend.app.api.routers import rpc
from backend.app.domain.entrystore.gateway import EntryStoreGateway
from backend.app.domain.entrystore.repository import InMemoryEntryRepository

pytestmark = [pytest.mark.rpc, pytest.mark.entrystore]

RPC_PATH = "/mentat/v1/"


def _build_client(gateway: EntryStoreGateway) -> TestClient:
    app = FastAPI()
    app.include_router(rpc.build_router())
    app.dependency_overrides[get_entry_gateway] = lambda: gateway
    return TestClient(app)


@pytest.fixture()
def gateway() -> EntryStoreGateway:
    return EntryStoreGateway(InMemoryEntryRepository())


@pytest.fixture()
def client(gateway) -> TestClient:
    return _build_client(gateway)


def _call(client: TestClient, method: str, params: Any, request_id: int = 1) -> dict:
    response = client.post(
        RPC_PATH,
        json={"jsonrpc": "2.0", "method": method, "params": params, "id": request_id},
    )
    assert response.status_code == 200
    return response.json()


def test_add_then_search_round_trip(client):
    added = _call(
        client,
        "entry.Add",
        {
            "userID": "alice",
            "type": "org",
            "content": "Write report",
            "tags": ["Work"],
            "priority": "#A",
            "todoStatus": "todo",
            "scheduled": "2024-03-01T09:30:00.000Z",
            "metadata": {"description": "Quarterly", "from": "inbox"},
        },
    )
    uuid = added["result"]["message"]

    found = _call(client, "entry.Search", {"userID": "alice", "tags": ["work"]}, 2)

    assert found["id"] == 2
    result = found["result"]
    assert result["error"] == ""
    assert result["count"] == 1
    entry = result["entries"][0]
    assert entry["uuid"] == uuid
    assert entry["tags"] == ["work"]
    assert entry["todoStatus"] == "TODO"
    assert entry["metadata"]["from"] == "inbox"
    assert entry["addedAt"] == entry["modifiedAt"]
    assert entry["scheduled"].startswith("2024-03-01T09:30:00")


def test_params_may_be_wrapped_in_single_element_array(client):
    body = _call(
        client,
        "entry.Add",
        [{"userID": "alice", "type": "pim", "content": "note"}],
    )

    assert len(body["result"]["message"]) == 36


def test_domain_failures_travel_in_result(client):
    body = _call(client, "entry.Add", {"type": "pim", "content": "note"})

    assert "error" not in body
    assert body["result"] == {"message": "User ID is missing"}


def test_update_delete_and_stats(client):
    uuid = _call(
        client, "entry.Add", {"userID": "alice", "type": "bookmark", "content": "a"}
    )["result"]["message"]

    updated = _call(
        client, "entry.Update", {"userID": "alice", "uuid": uuid, "content": "b"}
    )
    stats = _call(client, "entry.Stats", {"userID": "alice", "detailed": True})
    deleted = _call(client, "entry.Delete", {"userID": "alice", "uuids": [uuid]})

    assert updated["result"]["message"] == "updated"
    assert stats["result"] == {
        "error": "",
        "whole": 1,
        "bookmarks": 1,
        "pim": 0,
        "org": 0,
    }
    assert deleted["result"] == {"error": "", "deletedCount": 1}


def test_cleanup_reports_deleted_count(client):
    for content in ("one", "two"):
        _call(client, "entry.Add", {"userID": "bob", "type": "pim", "content": content})

    body = _call(client, "entry.Cleanup", {"userID": "bob", "types": ["pim"]})

    assert body["result"] == {"error": "", "deletedCount": 2}


def test_malformed_timestamp_is_a_server_error(client):
    body = _call(
        client,
        "entry.Add",
        {"userID": "alice", "type": "org", "content": "x", "deadline": "soon"},
    )

    assert body["error"]["code"] == rpc.SERVER_ERROR
    assert "deadline" in body["error"]["message"]
    assert "result" not in body


def test_unknown_method(client):
    body = _call(client, "entry.Nope", {})

    assert body["error"]["code"] == rpc.METHOD_NOT_FOUND


def test_invalid_params(client):
    body = _call(client, "entry.Stats", {"userID": "alice", "detailed": "maybe"})

    assert body["error"]["code"] == rpc.INVALID_PARAMS


def test_params_array_with_two_objects_is_rejected(client):
    body = _call(client, "entry.Stats", [{}, {}])

    assert body["error"]["code"] == rpc.INVALID_PARAMS


def test_parse_error(client):
    response = client.post(
        RPC_PATH, content=b"{not json", headers={"content-type": "application/json"}
    )

    assert response.json()["error"]["code"] == rpc.PARSE_ERROR


@pytest.mark.parametrize(
    "payload",
    [
        [1, 2],
        {"method": "entry.Stats", "id": 3},
        {"jsonrpc": "2.0", "id": 3},
    ],
)
def test_invalid_request_envelope(client, payload):
    body = client.post(RPC_PATH, json=payload).json()

    assert body["error"]["code"] == rpc.INVALID_REQUEST


def test_unexpected_failure_is_internal_error(gateway):
    def explode(*args, **kwargs):
        raise RuntimeError("boom")

    gateway.stats = explode
    client = _build_client(gateway)

    body = _call(client, "entry.Stats", {"userID": "alice"})

    assert body["error"]["code"] == rpc.INTERNAL_ERROR
    assert "boom" in body["error"]["message"]


def test_router_honors_custom_path(gateway):
    app = FastAPI()
    app.include_router(rpc.build_router("/rpc"))
    app.dependency_overrides[get_entry_gateway] = lambda: gateway
    client = TestClient(app)

    response = client.post(
        "/rpc",
        json={"jsonrpc": "2.0", "method": "entry.Stats", "params": {}, "id": 9},
    )

    assert response.json()["result"]["error"] == "User ID is missing"


def test_argument_names_match_ignoring_case(client):
    uuid = _call(
        client,
        "entry.Add",
        {"UserID": "alice", "Type": "pim", "Content": "note", "TODOSTATUS": "todo"},
    )["result"]["message"]

    found = _call(client, "entry.Search", {"userid": "alice"}, 2)["result"]
    deleted = _call(client, "entry.Delete", {"UserID": "alice", "UUIDs": [uuid]}, 3)

    assert found["entries"][0]["todoStatus"] == "TODO"
    assert deleted["result"] == {"error": "", "deletedCount": 1}


def test_exact_argument_name_wins_over_case_folded_one(client):
    body = _call(client, "entry.Stats", {"userID": "alice", "USERID": ""})

    assert body["result"]["error"] == ""
    assert body["result"]["whole"] == 0


def test_json_with_charset_content_type_is_accepted(client):
    response = client.post(
        RPC_PATH,
        content=(
            b'{"jsonrpc": "2.0", "method": "entry.Stats",'
            b' "params": {"userID": "alice"}, "id": 4}'
        ),
        headers={"content-type": "application/json;charset=UTF-8"},
    )

    body = response.json()
    assert response.status_code == 200
    assert body["id"] == 4
    assert body["result"]["whole"] == 0
