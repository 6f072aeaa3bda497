"""
Inventory ledger.

Holds the products of a small shop in head-first order (the most recently
added product comes first) and provides the operations over them: add,
list, find, update, delete, totals, billing, and backup/restore through
the snapshot codec.

Ids are not required to be unique. Every lookup scans from the head and
acts on the first match, so with duplicate ids the most recently added
product wins.
"""
from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Iterator
from dataclasses import replace
from decimal import Decimal
from pathlib import Path
from typing import Any

from . import snapshot
from .errors import AllocationError, NotFoundError
from .models import Bill, BillDate, BillLine, Product, to_price

logger = logging.getLogger(__name__)


class Ledger:
    """Ordered, exclusively owned collection of products.

    Products handed in are copied on the way in, and products handed out
    are copies, so the only way to change a stored record is update().
    """

    def __init__(self, products: Iterable[Product] | None = None):
        self._products: deque[Product] = deque()
        for product in products or ():
            self.add(product)

    def __len__(self) -> int:
        return len(self._products)

    def __iter__(self) -> Iterator[Product]:
        return iter(self.list())

    def __contains__(self, product_id: object) -> bool:
        return any(product.id == product_id for product in self._products)

    def __repr__(self) -> str:
        return f"Ledger({len(self._products)} products)"

    def _index_of(self, product_id: int) -> int:
        for index, product in enumerate(self._products):
            if product.id == product_id:
                return index
        raise NotFoundError(product_id)

    def add(self, product: Product) -> Product:
        """Insert a product at the head of the ledger.

        Raises:
            AllocationError: If the record could not be stored. The ledger
                is left unchanged.
        """
        try:
            record = replace(product)
            self._products.appendleft(record)
        except MemoryError as e:
            raise AllocationError("Memory allocation failed") from e
        logger.debug("Added product %d (%s)", record.id, record.name)
        return replace(record)

    def list(self) -> list[Product]:
        """Return all products, head-first. Empty list for an empty ledger."""
        return [replace(product) for product in self._products]

    def find(self, product_id: int) -> Product:
        """Return the first product with the given id.

        Raises:
            NotFoundError: If no product has that id.
        """
        return replace(self._products[self._index_of(product_id)])

    def delete(self, product_id: int) -> Product:
        """Remove and return the first product with the given id.

        Raises:
            NotFoundError: If no product has that id. The ledger is unchanged.
        """
        index = self._index_of(product_id)
        removed = self._products[index]
        del self._products[index]
        logger.debug("Deleted product %d (%s)", removed.id, removed.name)
        return removed

    def update(self, product_id: int, name: str, price: Any, quantity: int) -> Product:
        """Overwrite name, price and quantity of the first product with the id.

        The id itself never changes.

        Raises:
            NotFoundError: If no product has that id.
            ValueError: If the price is not a usable number. The product is
                unchanged.
        """
        new_price = to_price(price)
        record = self._products[self._index_of(product_id)]
        record.name = name
        record.price = new_price
        record.quantity = quantity
        logger.debug("Updated product %d (%s)", record.id, record.name)
        return replace(record)

    def total_sales(self) -> Decimal:
        """Sum of price * quantity over all products."""
        return sum((product.line_total for product in self._products), Decimal("0"))

    def generate_bill(self, as_of: BillDate) -> Bill:
        """Build a bill of every product, stamped with the given date."""
        lines = [
            BillLine(
                id=product.id,
                name=product.name,
                price=product.price,
                quantity=product.quantity,
                line_total=product.line_total,
            )
            for product in self._products
        ]
        total = sum((line.line_total for line in lines), Decimal("0"))
        return Bill(date=as_of, lines=lines, total=total)

    def export_snapshot(self, fmt: str = snapshot.TEXT) -> str:
        """Serialize the whole ledger, head-first."""
        return snapshot.dumps(self._products, fmt)

    def _replace_all(self, products: Iterable[Product]) -> None:
        # Build the new content first so a failure leaves the ledger as it was
        content: deque[Product] = deque()
        try:
            for product in products:
                content.appendleft(product)
        except MemoryError as e:
            raise AllocationError("Memory allocation failed") from e
        self._products = content

    def import_snapshot(self, text: str, strict: bool = False) -> list[str]:
        """Replace the ledger content with the products in a snapshot.

        Products are inserted head-first as they are read, so the ledger ends
        up in reverse file order.

        Returns:
            Parse issues. Empty when every record was read.

        Raises:
            MalformedSnapshotError: In strict mode, if any record is malformed.
                The ledger is unchanged.
        """
        products, issues = snapshot.loads(text, strict)
        self._replace_all(products)
        return issues

    def backup(self, path: Path | str, fmt: str = snapshot.TEXT) -> int:
        """Write the ledger to a backup file.

        Returns:
            Number of products written.
        """
        return snapshot.write_snapshot(path, self._products, fmt)

    def restore(self, path: Path | str, strict: bool = False) -> list[str]:
        """Replace the ledger content with a backup file.

        Returns:
            Parse issues. Empty when every record was read.

        Raises:
            NotFoundError: If the backup file does not exist. The ledger is
                unchanged.
            MalformedSnapshotError: In strict mode, if any record is malformed.
        """
        products, issues = snapshot.read_snapshot(path, strict)
        self._replace_all(products)
        logger.info("Restored %d products from %s", len(self._products), path)
        return issues
