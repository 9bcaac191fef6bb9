#!/usr/bin/env python3
"""Dump the storefront catalog and the persisted client-side state.

This script runs the full startup sequence (rehydrate persisted stores,
fetch categories and products) and prints what the stores hold afterwards,
so you can check what a fresh client would see.

Usage
-----
Set environment variables and run::

    export TIENDA_BASE_URL="http://localhost:3000"
    export TIENDA_STORAGE_DIR="$HOME/.tienda"
    python scripts/dump_catalog.py

Options::

    --json               Output as machine-readable JSON
    --output FILE        Write output to FILE instead of stdout
    --timeout SECONDS    Deadline for each catalog fetch
    -v, --verbose        Enable DEBUG logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pytienda import Storefront, TiendaConfig  # noqa: E402


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _collect(shop: Storefront) -> dict[str, Any]:
    return {
        "phase": str(shop.hydration.phase),
        "catalog_error": shop.catalog.state.error,
        "categories": [c.to_wire() for c in shop.catalog.categories],
        "products": [p.to_wire() for p in shop.catalog.products],
        "cart": {
            "items": [{"id": i.product.id, "name": i.product.name, "quantity": i.quantity} for i in shop.cart.items],
            "total_items": shop.cart.get_total_items(),
            "total_price": str(shop.cart.get_total_price()),
        },
        "favorites": [p.id for p in shop.favorites.favorites],
        "auth": {
            "user": shop.auth.user.model_dump(mode="json") if shop.auth.user else None,
            "is_admin": shop.auth.check_auth(),
        },
    }


def _format_text(data: dict[str, Any]) -> str:
    lines = [_section("Startup"), f"  phase: {data['phase']}", f"  catalog error: {data['catalog_error']}"]

    lines.append(_section(f"Categories ({len(data['categories'])})"))
    for category in data["categories"]:
        parent = f" (parent {category['parentId']})" if category.get("parentId") else ""
        lines.append(f"  [{category['id']}] {category['name']} /{category.get('slug', '')}{parent}")

    lines.append(_section(f"Products ({len(data['products'])})"))
    for product in data["products"]:
        lines.append(f"  [{product['id']}] {product['name']}  {product['price']}  stock={product.get('stock')}")

    cart = data["cart"]
    lines.append(_section("Cart"))
    for item in cart["items"]:
        lines.append(f"  {item['quantity']} x {item['name']} [{item['id']}]")
    lines.append(f"  total items: {cart['total_items']}  total price: {cart['total_price']}")

    lines.append(_section("Favorites"))
    lines.append(f"  {', '.join(data['favorites']) or '(none)'}")

    lines.append(_section("Auth"))
    lines.append(f"  user: {data['auth']['user']}")
    lines.append(f"  admin: {data['auth']['is_admin']}")
    return "\n".join(lines)


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, Any] = {}
    if args.timeout is not None:
        overrides["fetch_timeout"] = args.timeout
    config = TiendaConfig.from_env(**overrides)

    async with Storefront(config) as shop:
        data = _collect(shop)

    text = json.dumps(data, indent=2, ensure_ascii=False) if args.json else _format_text(data)
    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
    else:
        print(text)
    return 0 if data["catalog_error"] is None else 1


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    parser.add_argument("--output", help="Write output to FILE")
    parser.add_argument("--timeout", type=float, default=None, help="Per-fetch deadline in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable DEBUG logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
