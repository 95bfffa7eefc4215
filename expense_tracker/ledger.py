"""
Session expense list.

Append-only and in-memory: one ledger per browser session, gone when the
session ends. There is no update or delete.
"""

from typing import Iterator

from expense_tracker.models.expense import ExpenseRecord


class ExpenseLedger:
    """Ordered, append-only sequence of ExpenseRecords."""

    def __init__(self):
        self._records: list[ExpenseRecord] = []

    def append(self, record: ExpenseRecord) -> ExpenseRecord:
        self._records.append(record)
        return record

    @property
    def records(self) -> list[ExpenseRecord]:
        """Copy of the records in insertion order."""
        return list(self._records)

    @property
    def total(self) -> float:
        return sum(record.amount for record in self._records)

    def __iter__(self) -> Iterator[ExpenseRecord]:
        return iter(list(self._records))

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)
