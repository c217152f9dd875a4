import threading

import pytest

from tillbook.errors import NotFound, ValidationError
from tillbook.services.live_collection import LiveCollection


def _product(name="Butter Cake", stock=10):
    return {
        "name": name,
        "category": "sweets",
        "supplier": "Golden Flour Co.",
        "purchase_price": 300,
        "bulk_price": 400,
        "individual_price": 500,
        "stock": stock,
        "sales_count": 0,
    }


class TestCrud:
    def test_create_get_update_delete(self, store):
        product_id = store.create("products", _product())

        record = store.get("products", product_id)
        assert record["name"] == "Butter Cake"
        assert record["version_id"] == 1

        updated = store.update("products", product_id, {"stock": 4})
        assert updated["stock"] == 4
        assert updated["version_id"] == 2

        store.delete("products", product_id)
        assert store.get("products", product_id) is None

    def test_unknown_collection(self, store):
        with pytest.raises(ValidationError):
            store.list_all("invoices")

    def test_unknown_field(self, store):
        with pytest.raises(ValidationError):
            store.create("products", {**_product(), "colour": "red"})

    def test_store_managed_fields_are_ignored(self, store):
        product_id = store.create("products", _product())
        store.update("products", product_id, {"id": 999, "version_id": 50, "stock": 3})

        record = store.get("products", product_id)
        assert record["id"] == product_id
        assert record["version_id"] == 2

    def test_update_missing_record(self, store):
        with pytest.raises(NotFound):
            store.update("products", 12345, {"stock": 1})
        with pytest.raises(NotFound):
            store.delete("products", 12345)


class TestOwnerScoping:
    def test_owner_required(self, store):
        with pytest.raises(ValidationError):
            store.list_all("held_carts")
        with pytest.raises(ValidationError):
            store.create("held_carts", {"items": [], "customer_name": "Walk-in Customer"})

    def test_records_are_per_owner(self, store):
        held_id = store.create(
            "held_carts",
            {"items": [], "customer_name": "Walk-in Customer", "customer_class": "retail"},
            owner_id="cashier-1",
        )

        assert store.get("held_carts", held_id, owner_id="cashier-2") is None
        assert store.list_all("held_carts", owner_id="cashier-2") == []
        assert store.get("held_carts", held_id, owner_id="cashier-1")["owner_id"] == "cashier-1"
        with pytest.raises(NotFound):
            store.delete("held_carts", held_id, owner_id="cashier-2")


class TestAtomic:
    def test_rollback_discards_every_write(self, store):
        first = store.create("products", _product("First"))

        with pytest.raises(RuntimeError):
            with store.atomic():
                store.update("products", first, {"stock": 0})
                store.create("products", _product("Second"))
                raise RuntimeError("boom")

        assert store.get("products", first)["stock"] == 10
        assert [p["name"] for p in store.list_all("products")] == ["First"]

    def test_nested_blocks_commit_once(self, store):
        seen = []
        unsubscribe = store.subscribe("products", seen.append)

        with store.atomic():
            store.create("products", _product("A"))
            with store.atomic():
                store.create("products", _product("B"))
            assert len(seen) == 1

        assert len(seen) == 2
        assert [p["name"] for p in seen[-1]] == ["A", "B"]
        unsubscribe()

    def test_rollback_notifies_nobody(self, store):
        seen = []
        unsubscribe = store.subscribe("products", seen.append)

        with pytest.raises(RuntimeError):
            with store.atomic():
                store.create("products", _product())
                raise RuntimeError("boom")

        assert seen == [[]]
        unsubscribe()


class TestSubscriptions:
    def test_snapshot_on_subscribe_and_after_write(self, store):
        store.create("products", _product("Existing"))
        seen = []

        unsubscribe = store.subscribe("products", seen.append)
        assert [p["name"] for p in seen[0]] == ["Existing"]

        store.create("products", _product("New"))
        assert [p["name"] for p in seen[-1]] == ["Existing", "New"]

        unsubscribe()
        store.create("products", _product("Unseen"))
        assert len(seen) == 2

    def test_other_collections_do_not_notify(self, store):
        seen = []
        unsubscribe = store.subscribe("products", seen.append)
        store.create("customers", {"name": "Ko Aung", "credit": 0})
        assert len(seen) == 1
        unsubscribe()

    def test_failing_subscriber_does_not_undo_write(self, store):
        def broken(snapshot):
            if snapshot:
                raise RuntimeError("listener down")

        unsubscribe = store.subscribe("products", broken)
        product_id = store.create("products", _product())
        assert store.get("products", product_id) is not None
        unsubscribe()

    def test_subscriber_may_unsubscribe_during_notification(self, store):
        before = store.subscriber_count("products")
        seen = []
        handles = {}

        def once(snapshot):
            seen.append(snapshot)
            if len(seen) == 2:
                handles["once"]()

        handles["once"] = store.subscribe("products", once)
        store.create("products", _product("First"))
        store.create("products", _product("Second"))

        assert len(seen) == 2
        assert store.subscriber_count("products") == before

    def test_unsubscribe_from_many_threads(self, store):
        before = store.subscriber_count("products")
        handles = [store.subscribe("products", lambda snapshot: None) for _ in range(100)]
        assert store.subscriber_count("products") == before + 100

        def drop(chunk):
            for unsubscribe in chunk:
                unsubscribe()

        workers = [threading.Thread(target=drop, args=(handles[n::8],)) for n in range(8)]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join()

        assert store.subscriber_count("products") == before


class TestLiveCollection:
    def test_tracks_store(self, store):
        live = LiveCollection(store, "products")
        assert len(live) == 0

        product_id = store.create("products", _product(stock=3))
        assert live.get(product_id)["stock"] == 3
        assert live.get(str(product_id))["stock"] == 3

        store.update("products", product_id, {"stock": 1})
        assert live.get(product_id)["stock"] == 1

        store.delete("products", product_id)
        assert live.get(product_id) is None
        live.close()

    def test_close_unsubscribes(self, store):
        before = store.subscriber_count("products")
        live = LiveCollection(store, "products")
        assert store.subscriber_count("products") == before + 1
        live.close()
        assert store.subscriber_count("products") == before

    def test_lookup_of_bad_ids(self, store):
        live = LiveCollection(store, "products")
        assert live.get(None) is None
        assert live.get("abc") is None
        live.close()
