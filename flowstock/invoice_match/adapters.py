"""
Inventory Adapters - Where the restaurant stock list comes from.

The adapter pattern lets us swap implementations (file export for
offline runs, in-memory for tests) without changing matcher logic.
Adapters hand out tuples so the matcher always works on a snapshot.
"""

import csv
import json
import logging
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from pathlib import Path

from .models import InventoryItem

logger = logging.getLogger(__name__)


class InventoryAdapter(ABC):
    """Source of the inventory snapshot handed to match_many."""

    @abstractmethod
    def get_inventory(self) -> tuple[InventoryItem, ...]:
        """Snapshot of all inventory items."""
        pass


class FileInventoryAdapter(InventoryAdapter):
    """
    Loads an inventory export from CSV or JSON file.

    CSV format expected:
        id,name,quantity,unit
        ing-1,Brânză telemea,2.5,kg

    JSON format expected:
        [{"id": "ing-1", "name": "Brânză telemea", "quantity": 2.5, "unit": "kg"}, ...]
    """

    def __init__(self, data_path: str | Path):
        self._data_path = Path(data_path)
        self._items: list[InventoryItem] = []
        self._load_data()

    def _load_data(self):
        """Load inventory items from file."""
        if not self._data_path.exists():
            raise FileNotFoundError(f"Inventory data file not found: {self._data_path}")

        suffix = self._data_path.suffix.lower()
        if suffix == ".csv":
            self._load_csv()
        elif suffix == ".json":
            self._load_json()
        else:
            raise ValueError(f"Unsupported file format: {suffix}")

        logger.info(f"Loaded {len(self._items)} inventory items from {self._data_path.name}")

    def _load_csv(self):
        with open(self._data_path, "r", newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            for row in reader:
                self._add_row(row)

    def _load_json(self):
        with open(self._data_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        for row in data:
            self._add_row(row)

    def _add_row(self, row: dict):
        item = self._parse_row(row)
        if item is None:
            logger.warning(f"Skipping inventory row without id or name: {row}")
            return
        self._items.append(item)

    def _parse_row(self, row: dict) -> InventoryItem | None:
        """Parse a row dict into InventoryItem."""
        item_id = row.get("id")
        name = row.get("name")

        if not item_id or not name:
            return None

        quantity_val = row.get("quantity", 0)
        try:
            quantity = Decimal(str(quantity_val))
        except InvalidOperation:
            quantity = Decimal("0")
        if not quantity.is_finite():
            quantity = Decimal("0")

        return InventoryItem(
            id=str(item_id).strip(),
            name=str(name).strip(),
            quantity=quantity,
            unit=str(row.get("unit") or "").strip(),
        )

    def get_inventory(self) -> tuple[InventoryItem, ...]:
        return tuple(self._items)


class InMemoryInventoryAdapter(InventoryAdapter):
    """
    In-memory adapter for programmatic setup.

    Useful for unit tests where you want to control exact items.
    """

    def __init__(self, items: list[InventoryItem] | None = None):
        self._items = list(items or [])

    def add_item(self, item: InventoryItem):
        """Add a single item."""
        self._items.append(item)

    def add_items(self, items: list[InventoryItem]):
        """Add multiple items."""
        for item in items:
            self.add_item(item)

    def clear(self):
        """Remove all items."""
        self._items = []

    def get_inventory(self) -> tuple[InventoryItem, ...]:
        return tuple(self._items)
