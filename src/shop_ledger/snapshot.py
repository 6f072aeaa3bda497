"""
Snapshot codec for ledger backups.

Two formats are supported:

text (default, compatible with existing backup files)::

    <id> <name> <price> <quantity>

    One record per line. Reading treats the file as a stream of
    whitespace-separated tokens, four per record, so a name containing
    whitespace does not survive a round trip.

json (delimiter-safe)::

    {"format": "shop-ledger", "version": 1,
     "products": [{"id": 1, "name": "Green tea", "price": "2.50", "quantity": 4}]}

Both formats list products head-first. Reading returns them in file order;
the ledger re-inserts each one at the head, so a restored ledger comes back
in reverse file order.

Parsing stops at the first record that cannot be read. In lenient mode the
records before it are kept and the problem is returned as an issue string;
in strict mode MalformedSnapshotError is raised instead.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from decimal import Decimal
from pathlib import Path
from typing import Any

from .errors import MalformedSnapshotError, NotFoundError
from .models import Product, format_price, to_price

logger = logging.getLogger(__name__)

TEXT = "text"
JSON = "json"
FORMATS = (TEXT, JSON)

JSON_FORMAT_NAME = "shop-ledger"
JSON_VERSION = 1

FIELDS_PER_RECORD = 4


def _parse_int(value: Any) -> int:
    # bool is an int subclass; true/false in JSON is never a valid id
    if isinstance(value, bool):
        raise ValueError(f"expected an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value)
    raise ValueError(f"expected an integer, got {value!r}")


def _parse_price(value: Any) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ValueError(f"expected a price, got {value!r}")
    return to_price(value)


def _stop(position: int, detail: str, strict: bool, issues: list[str]) -> None:
    """Record why parsing stopped, or raise in strict mode."""
    if strict:
        raise MalformedSnapshotError(position, detail)
    logger.warning("Snapshot parsing stopped at record #%d: %s", position, detail)
    issues.append(f"record #{position}: {detail}")


def detect_format(text: str) -> str:
    """Return JSON if the content looks like a JSON document, TEXT otherwise."""
    return JSON if text.lstrip().startswith("{") else TEXT


def dump_text(products: Iterable[Product]) -> str:
    """Serialize products in the legacy space-separated format."""
    lines = []
    for product in products:
        if not product.name or any(ch.isspace() for ch in product.name):
            logger.warning(
                "Product %d name %r will not survive a text snapshot round trip",
                product.id, product.name,
            )
        lines.append(f"{product.id} {product.name} {format_price(product.price)} {product.quantity}\n")
    return "".join(lines)


def dump_json(products: Iterable[Product]) -> str:
    """Serialize products as a JSON document."""
    data = {
        "format": JSON_FORMAT_NAME,
        "version": JSON_VERSION,
        "products": [product.to_dict() for product in products],
    }
    return json.dumps(data, ensure_ascii=False, indent=2) + "\n"


def dumps(products: Iterable[Product], fmt: str = TEXT) -> str:
    """Serialize products in the given format."""
    if fmt == TEXT:
        return dump_text(products)
    if fmt == JSON:
        return dump_json(products)
    raise ValueError(f"Unknown snapshot format: {fmt}. Available: {list(FORMATS)}")


def parse_text(text: str, strict: bool = False) -> tuple[list[Product], list[str]]:
    """Parse a legacy text snapshot.

    Returns:
        Tuple of (products in file order, issues).
    """
    tokens = text.split()
    products: list[Product] = []
    issues: list[str] = []

    for start in range(0, len(tokens), FIELDS_PER_RECORD):
        position = start // FIELDS_PER_RECORD + 1
        record = tokens[start:start + FIELDS_PER_RECORD]
        if len(record) < FIELDS_PER_RECORD:
            _stop(position, f"incomplete record {' '.join(record)!r}", strict, issues)
            break
        id_token, name, price_token, quantity_token = record
        try:
            product = Product(
                id=_parse_int(id_token),
                name=name,
                price=_parse_price(price_token),
                quantity=_parse_int(quantity_token),
            )
        except ValueError as e:
            _stop(position, str(e), strict, issues)
            break
        products.append(product)

    return products, issues


def parse_json(text: str, strict: bool = False) -> tuple[list[Product], list[str]]:
    """Parse a JSON snapshot.

    Accepts either the full document or a bare list of product objects.

    Returns:
        Tuple of (products in file order, issues).
    """
    products: list[Product] = []
    issues: list[str] = []

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        _stop(1, f"invalid JSON: {e}", strict, issues)
        return products, issues

    records = data.get("products") if isinstance(data, dict) else data
    if not isinstance(records, list):
        _stop(1, "no 'products' list in snapshot", strict, issues)
        return products, issues

    for position, record in enumerate(records, start=1):
        try:
            if not isinstance(record, dict):
                raise ValueError(f"expected an object, got {record!r}")
            name = record["name"]
            if not isinstance(name, str):
                raise ValueError(f"expected a name string, got {name!r}")
            product = Product(
                id=_parse_int(record["id"]),
                name=name,
                price=_parse_price(record["price"]),
                quantity=_parse_int(record["quantity"]),
            )
        except KeyError as e:
            _stop(position, f"missing field {e}", strict, issues)
            break
        except ValueError as e:
            _stop(position, str(e), strict, issues)
            break
        products.append(product)

    return products, issues


def loads(text: str, strict: bool = False) -> tuple[list[Product], list[str]]:
    """Parse a snapshot in whichever format it is written in."""
    if detect_format(text) == JSON:
        return parse_json(text, strict)
    return parse_text(text, strict)


def write_snapshot(path: Path | str, products: Iterable[Product], fmt: str = TEXT) -> int:
    """Write a snapshot file, replacing any previous content.

    Returns:
        Number of products written.
    """
    path = Path(path)
    products = list(products)
    path.write_text(dumps(products, fmt), encoding="utf-8")
    logger.info("Wrote %d products to %s (%s)", len(products), path, fmt)
    return len(products)


def read_snapshot(path: Path | str, strict: bool = False) -> tuple[list[Product], list[str]]:
    """Read a snapshot file.

    Raises:
        NotFoundError: If the file does not exist.
        MalformedSnapshotError: In strict mode, if any record is malformed
            or the file is not valid UTF-8. In lenient mode undecodable
            bytes become U+FFFD and parsing goes on.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except FileNotFoundError as e:
        raise NotFoundError(path, f"Backup file not found: {path}") from e

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        if strict:
            position = len(raw[:e.start].decode("utf-8").split()) // FIELDS_PER_RECORD + 1
            raise MalformedSnapshotError(position, f"not valid UTF-8 at byte {e.start}") from e
        logger.warning("%s is not valid UTF-8 (byte %d), undecodable bytes replaced", path, e.start)
        text = raw.decode("utf-8", errors="replace")

    products, issues = loads(text, strict)
    logger.info("Read %d products from %s", len(products), path)
    return products, issues
