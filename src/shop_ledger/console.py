"""
Interactive console for the inventory ledger.

A numbered menu over the ledger's public operations. The shell owns all
prompting and rendering; the ledger never talks to the terminal. Nothing is
saved automatically on exit, only an explicit backup writes the file.
"""
from __future__ import annotations

from collections.abc import Callable, Iterable
from decimal import Decimal
from pathlib import Path

from . import snapshot
from .config import DEFAULT_EMPLOYEES
from .errors import LedgerError
from .ledger import Ledger
from .models import MAX_NAME_LENGTH, Bill, BillDate, Product, format_price, to_price

SEPARATOR = "-" * 45

MENU = """
-- Inventory Management System --
1. Add Product
2. View Products
3. Delete Product
4. Generate Bill
5. Calculate Total Sales
6. Search Product
7. Update Product
8. Backup & Restore Inventory
9. Management Info
0. Exit"""

EMPTY_MESSAGE = "Inventory is empty."
INVALID_CHOICE_MESSAGE = "Invalid choice. Please try again."


def format_products_table(products: Iterable[Product]) -> list[str]:
    """Render products as table lines (header first)."""
    lines = [f"{'ID':>8}  {'Name':<30} {'Price':>10} {'Quantity':>9}"]
    for product in products:
        lines.append(
            f"{product.id:>8}  {product.name:<30} {format_price(product.price):>10} {product.quantity:>9}"
        )
    return lines


def format_bill(bill: Bill) -> list[str]:
    """Render a bill as printable lines."""
    lines = [f"Bill generated on {bill.date}:", "*" * len(SEPARATOR)]
    lines.append(f"{'ID':>8}  {'Name':<24} {'Price':>9} {'Qty':>5} {'Total':>10}")
    for line in bill.lines:
        lines.append(
            f"{line.id:>8}  {line.name:<24} {format_price(line.price):>9} "
            f"{line.quantity:>5} {format_price(line.line_total):>10}"
        )
    lines.append(SEPARATOR)
    lines.append(f"{'Total':<50} {format_price(bill.total):>10}")
    lines.append("*" * len(SEPARATOR))
    return lines


class ConsoleShell:
    """Menu-driven read-eval loop around a Ledger.

    Args:
        ledger: The ledger to operate on.
        backup_file: File used by the backup and restore menu entries.
        snapshot_format: Format written on backup (text or json).
        strict: Fail a restore on the first malformed record.
        access_code: Shared numeric code that unlocks the management views.
        employees: Staff leave roster shown in the management views.
            Empty or None shows the default roster.
        input_func: Replacement for input(), mainly for tests.
        output: Replacement for print(), mainly for tests.
    """

    def __init__(
        self,
        ledger: Ledger,
        backup_file: Path | str = "inventory_backup.txt",
        snapshot_format: str = snapshot.TEXT,
        strict: bool = False,
        access_code: int = 189,
        employees: dict[str, str] | None = None,
        input_func: Callable[[str], str] | None = None,
        output: Callable[[str], None] | None = None,
    ):
        self.ledger = ledger
        self.backup_file = Path(backup_file)
        self.snapshot_format = snapshot_format
        self.strict = strict
        self.access_code = access_code
        self.employees = dict(employees or DEFAULT_EMPLOYEES)
        self._input = input_func or input
        self._print = output or print

        self._actions: dict[int, Callable[[], None]] = {
            1: self.add_product,
            2: self.view_products,
            3: self.delete_product,
            4: self.generate_bill,
            5: self.total_sales,
            6: self.search_product,
            7: self.update_product,
            8: self.backup_menu,
            9: self.management_menu,
        }

    # Prompting

    def _ask_int(self, prompt: str) -> int:
        while True:
            raw = self._input(prompt).strip()
            try:
                return int(raw)
            except ValueError:
                self._print("❌ Please enter a whole number.")

    def _ask_price(self, prompt: str) -> Decimal:
        while True:
            raw = self._input(prompt).strip()
            try:
                return to_price(raw)
            except ValueError as e:
                self._print(f"❌ Please enter a price, e.g. 2.50 ({e})")

    def _ask_name(self, prompt: str) -> str:
        while True:
            name = self._input(prompt).strip()
            if name:
                return name[:MAX_NAME_LENGTH]
            self._print("❌ Name cannot be empty.")

    def _ask_choice(self, prompt: str = "Enter your choice: ") -> int | None:
        """Read a menu number; None for anything that is not a number."""
        raw = self._input(prompt).strip()
        try:
            return int(raw)
        except ValueError:
            return None

    def _boxed(self, *lines: str) -> None:
        self._print(SEPARATOR)
        for line in lines:
            self._print(line)
        self._print(SEPARATOR)

    # Menu entries

    def add_product(self) -> None:
        product = Product(
            id=self._ask_int("Enter product ID: "),
            name=self._ask_name("Enter product name: "),
            price=self._ask_price("Enter product price: "),
            quantity=self._ask_int("Enter product quantity: "),
        )
        try:
            self.ledger.add(product)
        except LedgerError as e:
            self._boxed(f"❌ {e}")
            return
        self._boxed("✅ Product added successfully.")

    def view_products(self) -> None:
        products = self.ledger.list()
        if not products:
            self._boxed(f"⚠️  {EMPTY_MESSAGE}")
            return
        self._boxed(*format_products_table(products))

    def delete_product(self) -> None:
        product_id = self._ask_int("Enter product ID to delete: ")
        try:
            self.ledger.delete(product_id)
        except LedgerError as e:
            self._boxed(f"❌ {e}.")
            return
        self._boxed(f"✅ Product with ID {product_id} deleted successfully.")

    def generate_bill(self) -> None:
        if not len(self.ledger):
            self._boxed(f"⚠️  {EMPTY_MESSAGE}")
            return
        as_of = BillDate(
            day=self._ask_int("Enter day: "),
            month=self._ask_int("Enter month: "),
            year=self._ask_int("Enter year: "),
        )
        for line in format_bill(self.ledger.generate_bill(as_of)):
            self._print(line)

    def total_sales(self) -> None:
        self._print(f"Total Sales: {format_price(self.ledger.total_sales())}")

    def search_product(self) -> None:
        product_id = self._ask_int("Enter product ID to search: ")
        try:
            product = self.ledger.find(product_id)
        except LedgerError as e:
            self._boxed(f"❌ {e}.")
            return
        self._boxed("Product found:", *format_products_table([product]))

    def update_product(self) -> None:
        product_id = self._ask_int("Enter product ID to update: ")
        if product_id not in self.ledger:
            self._boxed(f"❌ Product with ID {product_id} not found.")
            return
        name = self._ask_name("Enter new product name: ")
        price = self._ask_price("Enter new product price: ")
        quantity = self._ask_int("Enter new product quantity: ")
        try:
            self.ledger.update(product_id, name, price, quantity)
        except LedgerError as e:
            self._boxed(f"❌ {e}.")
            return
        self._boxed("✅ Product details updated successfully.")

    def backup_menu(self) -> None:
        self._print("1. Backup Inventory")
        self._print("2. Restore Inventory")
        self._print(SEPARATOR)
        choice = self._ask_choice()
        if choice == 1:
            self.backup()
        elif choice == 2:
            self.restore()
        else:
            self._print(f"❌ {INVALID_CHOICE_MESSAGE}")

    def backup(self) -> None:
        try:
            count = self.ledger.backup(self.backup_file, self.snapshot_format)
        except (OSError, ValueError) as e:
            self._boxed(f"❌ Error creating backup file: {e}")
            return
        self._boxed(f"✅ Inventory backup created successfully ({count} products in {self.backup_file}).")

    def restore(self) -> None:
        try:
            issues = self.ledger.restore(self.backup_file, strict=self.strict)
        except LedgerError as e:
            self._boxed(f"❌ {e}")
            return
        except OSError as e:
            self._boxed(f"❌ Could not read {self.backup_file}: {e}")
            return
        lines = [f"✅ Inventory restored successfully ({len(self.ledger)} products)."]
        lines.extend(f"⚠️  Stopped reading at {issue}" for issue in issues)
        self._boxed(*lines)

    def can_view_management(self, code: int) -> bool:
        return code == self.access_code

    def management_menu(self) -> None:
        code = self._ask_int("Enter password: ")
        if not self.can_view_management(code):
            self._print("❌ Password incorrect")
            return
        self._boxed("✅ Access granted")
        self._print("1. Sales and Income")
        self._print("2. Employees Details")
        self._print(SEPARATOR)
        choice = self._ask_choice()
        if choice == 1:
            self.sales_info()
        elif choice == 2:
            self.employee_info()
        else:
            self._print(f"❌ {INVALID_CHOICE_MESSAGE}")

    def sales_info(self) -> None:
        self._boxed(
            f"Products on record: {len(self.ledger)}",
            f"Total sales: {format_price(self.ledger.total_sales())}",
        )

    def employee_info(self) -> None:
        lines = ["Employees leave"]
        lines.extend(f"{name}\t{status}" for name, status in self.employees.items())
        self._boxed(*lines)

    # Loop

    def run(self) -> int:
        """Run the menu loop until 0 is chosen or input ends."""
        while True:
            self._print(MENU)
            self._print(SEPARATOR)
            try:
                choice = self._ask_choice()
                self._print(SEPARATOR)
                if choice == 0:
                    self._print("👋 Exiting...")
                    return 0
                action = self._actions.get(choice)
                if action is None:
                    self._print(f"❌ {INVALID_CHOICE_MESSAGE}")
                    continue
                action()
            except EOFError:
                self._print("")
                self._print("👋 Exiting...")
                return 0
