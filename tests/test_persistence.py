"""Snapshot storage and store rehydration."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from pytienda.exceptions import TiendaStorageError
from pytienda.models.product import Product
from pytienda.state.auth import AuthStore
from pytienda.state.cart import CartStore
from pytienda.state.favorites import FavoritesStore
from pytienda.storage import JsonFileStorage, MemoryStorage, dump_snapshot, load_snapshot


def _product(product_id: str, price: str = "10.50") -> Product:
    return Product(id=product_id, name=f"Product {product_id}", price=price, category="Hogar")


def test_load_snapshot_missing_returns_none() -> None:
    assert load_snapshot(None) is None


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        json.dumps([1, 2]),
        json.dumps({"version": 0}),
        json.dumps({"state": {}, "version": 99}),
    ],
)
def test_load_snapshot_rejects_malformed_envelopes(raw: str) -> None:
    with pytest.raises(TiendaStorageError):
        load_snapshot(raw, key="cart-storage")


def test_json_file_storage_writes_one_file_per_key(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path / "state")

    assert storage.get_item("cart-storage") is None
    storage.set_item("cart-storage", dump_snapshot({"items": []}))
    storage.set_item("shop-a:auth-storage", dump_snapshot({"user": None}))

    assert sorted(p.name for p in (tmp_path / "state").iterdir()) == ["cart-storage.json", "shop-a_auth-storage.json"]
    assert load_snapshot(storage.get_item("cart-storage")) == {"items": []}

    storage.remove_item("cart-storage")
    storage.remove_item("cart-storage")
    assert storage.get_item("cart-storage") is None


@pytest.mark.asyncio
async def test_cart_rehydrates_items_in_order(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path)
    first = CartStore(storage=storage)
    first.add_item(_product("p1"))
    first.add_item(_product("p2", "3"))
    first.add_item(_product("p1"))

    second = CartStore(storage=storage)
    assert second.hydrated is False
    await second.rehydrate()

    assert second.hydrated is True
    assert [(item.product.id, item.quantity) for item in second.items] == [("p1", 2), ("p2", 1)]
    assert second.get_total_price() == first.get_total_price()
    assert second.items[0].product.category == "Hogar"


@pytest.mark.asyncio
async def test_rehydrate_merges_duplicate_lines() -> None:
    product = _product("p1").to_wire()
    storage = MemoryStorage(
        {
            "cart-storage": dump_snapshot(
                {"items": [{"product": product, "quantity": 1}, {"product": product, "quantity": 2}]}
            )
        }
    )
    cart = CartStore(storage=storage)

    await cart.rehydrate()

    assert len(cart.items) == 1
    assert cart.items[0].quantity == 3


@pytest.mark.asyncio
async def test_favorites_and_auth_rehydrate() -> None:
    storage = MemoryStorage()
    favorites = FavoritesStore(storage=storage)
    favorites.add_to_favorites(_product("p9"))
    auth = AuthStore(storage=storage)
    await auth.login("admin@tienda.com", "admin123")

    restored_favorites = FavoritesStore(storage=storage)
    restored_auth = AuthStore(storage=storage)
    await restored_favorites.rehydrate()
    await restored_auth.rehydrate()

    assert restored_favorites.is_favorite("p9")
    assert restored_auth.check_auth() is True
    assert restored_auth.authenticated is True


@pytest.mark.asyncio
async def test_auth_flag_is_derived_from_user_on_rehydrate() -> None:
    storage = MemoryStorage({"auth-storage": dump_snapshot({"user": None, "isAuthenticated": True})})
    auth = AuthStore(storage=storage)

    await auth.rehydrate()

    assert auth.authenticated is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw",
    [
        "{broken",
        dump_snapshot({"items": [{"product": {"id": "p1"}, "quantity": 1}]}),
        dump_snapshot({"items": [{"product": {"id": "p1", "name": "x", "price": 1}, "quantity": 0}]}),
        dump_snapshot({"items": [{"quantity": 1}]}),
        dump_snapshot({"items": {"a": 1}}),
        dump_snapshot({"items": None}),
    ],
)
async def test_corrupt_snapshot_falls_back_to_empty(raw: str) -> None:
    storage = MemoryStorage()
    cart = CartStore(storage=storage)
    cart.add_item(_product("p1"))
    storage.set_item("cart-storage", raw)

    await cart.rehydrate()

    assert cart.items == ()
    assert cart.hydrated is True


class _BrokenStorage(MemoryStorage):
    def set_item(self, key: str, value: str) -> None:
        raise TiendaStorageError("disk full", key=key)


def test_write_failure_does_not_abort_mutation() -> None:
    cart = CartStore(storage=_BrokenStorage())

    cart.add_item(_product("p1"))

    assert cart.get_total_items() == 1


@pytest.mark.asyncio
async def test_rehydrate_callbacks_run_after_hydrated_flag() -> None:
    cart = CartStore(storage=MemoryStorage())
    seen: list[bool] = []
    cart.on_rehydrate(lambda: seen.append(cart.hydrated))

    await cart.rehydrate()

    assert seen == [True]
