"""Centralized identifier allocation.

Each table gets its own monotonic counter. Allocation skips any candidate
already present in the table, so seeded or caller-supplied ids never
collide with generated ones.
"""

import itertools
import threading
from typing import Container, Dict, Iterator, Optional


# Table name -> id format. ``{n}`` is the counter value.
ID_FORMATS: Dict[str, str] = {
    "products": "prod-{n}",
    "exhibitions": "exh-{n}",
    "exhibition_codes": "EX-{n:04d}",
    "exhibition_products": "ep-{n}",
    "orders": "ord-{n}",
    "product_lists": "pl-{n}",
    "product_list_items": "pli-{n}",
}


class IdGenerator:
    """Hands out ids that are unique within each table."""

    def __init__(self, formats: Optional[Dict[str, str]] = None):
        self.formats = dict(formats or ID_FORMATS)
        self._counters: Dict[str, Iterator[int]] = {}
        self._lock = threading.Lock()

    def next_id(self, table: str, taken: Container[str] = ()) -> str:
        """Return the next free id for ``table``.

        Args:
            table: Table name, a key of ``formats``
            taken: Ids already in use in that table

        Raises:
            KeyError: If the table has no registered format
        """
        template = self.formats[table]
        with self._lock:
            counter = self._counters.setdefault(table, itertools.count(1))
            for n in counter:
                candidate = template.format(n=n)
                if candidate not in taken:
                    return candidate
