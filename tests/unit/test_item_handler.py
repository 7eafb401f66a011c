import itertools
import json
import threading
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from items_service.core.item_handler import ItemHandler
from items_service.dal.in_memory import ItemDataAccessInMemory
from items_service.errors import StoreUnavailableError
from items_service.models.item import CORS_HEADERS, ItemRequest


class FakeClock:
    def __init__(self):
        self._ticks = itertools.count(1)

    def __call__(self) -> str:
        return f"2026-01-01T00:00:{next(self._ticks):02d}+00:00"


@pytest.fixture
def store():
    return ItemDataAccessInMemory(primary_key="id")


@pytest.fixture
def item_handler(store):
    return ItemHandler(data_access=store, primary_key="id", clock=FakeClock())


def request(method, item_id=None, body=None):
    raw = json.dumps(body) if isinstance(body, dict) else body
    return ItemRequest(method=method, item_id=item_id, body=raw)


class TestDispatch:
    def test_unsupported_method(self, item_handler):
        response = item_handler.handle(request("PATCH", "item-1"))

        assert response.status_code == 405
        assert response.body == {"error": 'Unsupported method: "PATCH"'}

    def test_missing_method(self, item_handler):
        response = item_handler.handle(ItemRequest(resource="/items"))

        assert response.status_code == 405
        assert response.body == {"error": 'Unsupported method: ""'}

    def test_options_is_not_a_business_operation(self, item_handler):
        response = item_handler.handle(request("OPTIONS"))
        assert response.status_code == 405

    @pytest.mark.parametrize("method", ["PUT", "DELETE"])
    def test_missing_identifier(self, item_handler, method):
        response = item_handler.handle(request(method, body={"name": "x"}))

        assert response.status_code == 400
        assert response.body == {"error": "Missing item ID"}

    def test_get_on_item_resource_without_id(self, item_handler):
        response = item_handler.handle(ItemRequest(method="GET", resource="/items/{id}"))

        assert response.status_code == 400
        assert response.body == {"error": "Missing item ID"}

    def test_get_on_collection_resource_lists(self, item_handler):
        response = item_handler.handle(ItemRequest(method="GET", resource="/items"))
        assert response.status_code == 200

    def test_responses_carry_cors_headers(self, item_handler):
        response = item_handler.handle(request("GET"))
        assert response.headers == CORS_HEADERS

    def test_unexpected_error_echoes_message(self):
        data_access = MagicMock()
        data_access.get_item.side_effect = RuntimeError("boom")
        item_handler = ItemHandler(data_access=data_access)

        response = item_handler.handle(request("GET", "item-1"))

        assert response.status_code == 500
        assert response.body == {"error": "boom"}


class TestList:
    def test_list_items(self, item_handler, store):
        store.put_item_if_absent({"id": "a"})
        store.put_item_if_absent({"id": "b"})

        response = item_handler.handle(request("GET"))

        assert response.status_code == 200
        assert sorted(item["id"] for item in response.body) == ["a", "b"]

    def test_list_empty(self, item_handler):
        response = item_handler.handle(request("GET"))
        assert response.status_code == 200
        assert response.body == []

    def test_list_store_failure(self):
        data_access = MagicMock()
        data_access.scan_items.side_effect = StoreUnavailableError("Failed to scan items: timeout")
        item_handler = ItemHandler(data_access=data_access)

        response = item_handler.handle(request("GET"))

        assert response.status_code == 500
        assert response.body == {"error": "Failed to list items"}


class TestGet:
    def test_get_item(self, item_handler, store):
        store.put_item_if_absent({"id": "item-1", "name": "widget"})

        response = item_handler.handle(request("GET", "item-1"))

        assert response.status_code == 200
        assert response.body == {"id": "item-1", "name": "widget"}

    def test_get_item_not_found(self, item_handler):
        response = item_handler.handle(request("GET", "nonexistent"))

        assert response.status_code == 404
        assert response.body == {"error": "Item not found"}

    def test_get_store_failure(self):
        data_access = MagicMock()
        data_access.get_item.side_effect = StoreUnavailableError("Failed to get item: timeout")
        item_handler = ItemHandler(data_access=data_access)

        response = item_handler.handle(request("GET", "item-1"))

        assert response.status_code == 500
        assert response.body == {"error": "Failed to get item: timeout"}


class TestCreate:
    def test_create_generates_id_and_created_at(self, item_handler, store):
        response = item_handler.handle(request("POST", body={"name": "x"}))

        assert response.status_code == 200
        assert response.body["id"]
        assert response.body["name"] == "x"
        assert response.body["createdAt"] == "2026-01-01T00:00:01+00:00"
        assert "updatedAt" not in response.body
        assert store.get_item(response.body["id"]) == response.body

    def test_create_generates_distinct_ids(self, item_handler):
        ids = [item_handler.handle(request("POST", body={"n": i})).body["id"] for i in range(25)]

        assert all(ids)
        assert len(set(ids)) == 25

    def test_create_with_empty_id_generates_one(self, store):
        item_handler = ItemHandler(data_access=store, id_factory=lambda: "generated-1")

        response = item_handler.handle(request("POST", body={"id": "", "name": "x"}))

        assert response.body["id"] == "generated-1"

    def test_create_keeps_explicit_id(self, item_handler):
        response = item_handler.handle(request("POST", body={"id": "explicit", "name": "x"}))
        assert response.body["id"] == "explicit"

    def test_create_is_write_once(self, item_handler, store):
        item_handler.handle(request("POST", body={"id": "item-1", "name": "original"}))

        response = item_handler.handle(request("POST", body={"id": "item-1", "name": "overwrite"}))

        assert response.status_code == 500
        assert response.body == {"error": "Item with id item-1 already exists"}
        assert store.get_item("item-1")["name"] == "original"

    def test_create_generated_id_collision_is_server_error(self, store):
        store.put_item_if_absent({"id": "fixed"})
        item_handler = ItemHandler(data_access=store, id_factory=lambda: "fixed")

        response = item_handler.handle(request("POST", body={"name": "x"}))

        assert response.status_code == 500

    def test_create_discards_caller_timestamps(self, item_handler):
        response = item_handler.handle(
            request("POST", body={"name": "x", "createdAt": "forged", "updatedAt": "forged"})
        )

        assert response.body["createdAt"] != "forged"
        assert "updatedAt" not in response.body

    def test_create_rejects_non_string_id(self, item_handler):
        response = item_handler.handle(request("POST", body={"id": 42}))

        assert response.status_code == 400
        assert response.body == {"error": "id must be a string"}

    @pytest.mark.parametrize(
        "body, message",
        [
            (None, "Request body is required"),
            ("", "Request body is required"),
            ("{not json", "Invalid JSON body"),
            ("[1, 2]", "Request body must be a JSON object"),
        ],
    )
    def test_create_invalid_body(self, item_handler, body, message):
        response = item_handler.handle(request("POST", body=body))

        assert response.status_code == 400
        assert response.body["error"].startswith(message)

    def test_create_parses_numbers_as_decimal(self, item_handler):
        response = item_handler.handle(request("POST", body='{"price": 9.99, "qty": 3}'))

        assert response.body["price"] == Decimal("9.99")
        assert response.body["qty"] == 3


class TestUpdate:
    def test_update_replaces_fields(self, item_handler, store):
        store.put_item_if_absent({"id": "item-1", "name": "x", "color": "red", "createdAt": "t0"})

        response = item_handler.handle(request("PUT", "item-1", {"name": "y"}))

        assert response.status_code == 200
        assert response.body == {
            "id": "item-1",
            "name": "y",
            "createdAt": "t0",
            "updatedAt": "2026-01-01T00:00:01+00:00",
        }
        assert store.get_item("item-1") == response.body

    def test_update_requires_existence(self, item_handler, store):
        response = item_handler.handle(request("PUT", "nonexistent", {"name": "y"}))

        assert response.status_code == 404
        assert response.body == {"error": "Item not found"}
        assert store.get_item("nonexistent") is None

    def test_update_path_wins(self, item_handler, store):
        store.put_item_if_absent({"id": "a", "name": "x"})
        store.put_item_if_absent({"id": "b", "name": "untouched"})

        response = item_handler.handle(request("PUT", "a", {"id": "b", "name": "y"}))

        assert response.body["id"] == "a"
        assert store.get_item("a")["name"] == "y"
        assert store.get_item("b")["name"] == "untouched"

    def test_update_cannot_overwrite_created_at(self, item_handler, store):
        store.put_item_if_absent({"id": "item-1", "createdAt": "t0"})

        response = item_handler.handle(request("PUT", "item-1", {"createdAt": "forged"}))

        assert response.body["createdAt"] == "t0"

    def test_update_invalid_body(self, item_handler, store):
        store.put_item_if_absent({"id": "item-1"})

        response = item_handler.handle(request("PUT", "item-1", "oops"))

        assert response.status_code == 400


class TestDelete:
    def test_delete_returns_prior_item(self, item_handler, store):
        store.put_item_if_absent({"id": "item-1", "name": "y"})

        response = item_handler.handle(request("DELETE", "item-1"))

        assert response.status_code == 200
        assert response.body == {"id": "item-1", "name": "y"}
        assert store.get_item("item-1") is None
        assert store.scan_items() == []

    def test_delete_requires_existence(self, item_handler):
        response = item_handler.handle(request("DELETE", "nonexistent"))

        assert response.status_code == 404
        assert response.body == {"error": "Item not found"}


class TestTimestamps:
    def test_created_at_survives_update(self, item_handler):
        created = item_handler.handle(request("POST", body={"name": "x"})).body
        assert "updatedAt" not in created

        updated = item_handler.handle(request("PUT", created["id"], {"name": "y"})).body

        assert updated["createdAt"] == created["createdAt"]
        assert updated["updatedAt"]
        assert updated["updatedAt"] != created["createdAt"]


WORKERS = 16


def run_concurrently(call):
    """Run ``call`` on WORKERS threads released together by a barrier."""
    barrier = threading.Barrier(WORKERS)

    def worker(_):
        barrier.wait()
        return call()

    with ThreadPoolExecutor(max_workers=WORKERS) as executor:
        return list(executor.map(worker, range(WORKERS)))


class TestConcurrentRequests:
    def test_concurrent_creates_with_same_id_store_one_item(self, item_handler, store):
        responses = run_concurrently(lambda: item_handler.handle(request("POST", body={"id": "shared", "name": "x"})))

        statuses = [response.status_code for response in responses]
        assert statuses.count(200) == 1
        assert statuses.count(500) == WORKERS - 1
        assert all(
            response.body == {"error": "Item with id shared already exists"}
            for response in responses
            if response.status_code == 500
        )
        assert [item["id"] for item in store.scan_items()] == ["shared"]

    def test_concurrent_updates_keep_created_at(self, item_handler, store):
        store.put_item_if_absent({"id": "item-1", "name": "x", "createdAt": "t0"})
        names = iter(range(WORKERS))
        lock = threading.Lock()

        def update():
            with lock:
                name = f"name-{next(names)}"
            return item_handler.handle(request("PUT", "item-1", {"name": name}))

        responses = run_concurrently(update)

        assert all(response.status_code == 200 for response in responses)
        stored = store.get_item("item-1")
        assert stored["createdAt"] == "t0"
        assert stored["name"] in {response.body["name"] for response in responses}
        assert len(store.scan_items()) == 1

    def test_concurrent_updates_of_missing_item_create_nothing(self, item_handler, store):
        responses = run_concurrently(lambda: item_handler.handle(request("PUT", "ghost", {"name": "y"})))

        assert all(response.status_code == 404 for response in responses)
        assert store.get_item("ghost") is None

    def test_only_one_concurrent_delete_succeeds(self, item_handler, store):
        store.put_item_if_absent({"id": "item-1", "name": "y"})

        responses = run_concurrently(lambda: item_handler.handle(request("DELETE", "item-1")))

        statuses = [response.status_code for response in responses]
        assert statuses.count(200) == 1
        assert statuses.count(404) == WORKERS - 1
        assert next(response.body for response in responses if response.status_code == 200) == {
            "id": "item-1",
            "name": "y",
        }
        assert store.scan_items() == []


def test_end_to_end_scenario(item_handler):
    created = item_handler.handle(request("POST", body={"name": "x"}))
    assert created.status_code == 200
    item_id = created.body["id"]
    assert created.body["createdAt"]

    fetched = item_handler.handle(request("GET", item_id))
    assert fetched.status_code == 200
    assert fetched.body == created.body

    updated = item_handler.handle(request("PUT", item_id, {"name": "y"}))
    assert updated.status_code == 200
    assert updated.body["name"] == "y"
    assert updated.body["updatedAt"]

    deleted = item_handler.handle(request("DELETE", item_id))
    assert deleted.status_code == 200
    assert deleted.body["name"] == "y"

    gone = item_handler.handle(request("GET", item_id))
    assert gone.status_code == 404
