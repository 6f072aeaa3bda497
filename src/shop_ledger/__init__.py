"""
shop-ledger - An in-memory inventory ledger for a small shop

Features:
- Add, list, search, update and delete products
- Total sales and dated bills
- Backup and restore to a flat text file (or a JSON snapshot)
- Menu-driven console and a command-line interface
"""

from ._version import __version__
from .errors import AllocationError, LedgerError, MalformedSnapshotError, NotFoundError
from .ledger import Ledger
from .models import Bill, BillDate, BillLine, Product

__all__ = [
    "__version__",
    "Ledger",
    "Product",
    "Bill",
    "BillDate",
    "BillLine",
    "LedgerError",
    "NotFoundError",
    "AllocationError",
    "MalformedSnapshotError",
]
