import asyncio
from typing import Any, Optional

import pytest
from pymongo.errors import ServerSelectionTimeoutError


class InMemoryReportStore:
    """
    A ReportStore over plain lists of documents.

    `fail` names the queries ("orders", "accounts", "totals") that raise a
    driver error; `delay` makes every query sleep first.
    """

    def __init__(self, orders=None, accounts=None, fail=(), delay: float = 0.0):
        self.orders = list(orders or [])
        self.accounts = list(accounts or [])
        self.fail = set(fail)
        self.delay = delay
        self.pipelines = []

    async def _query(self, name: str):
        if self.delay:
            await asyncio.sleep(self.delay)
        if name in self.fail:
            raise ServerSelectionTimeoutError(f"{name} query failed")

    async def recent_orders(self, limit: int) -> list[dict[str, Any]]:
        await self._query("orders")
        newest_first = sorted(self.orders, key=lambda doc: doc["_id"], reverse=True)
        return [dict(doc) for doc in newest_first[:limit]]

    async def employee_accounts(self) -> list[dict[str, Any]]:
        await self._query("accounts")
        return [dict(doc) for doc in self.accounts]

    async def aggregate(self, pipeline: list[dict[str, Any]]) -> Optional[dict[str, Any]]:
        await self._query("totals")
        self.pipelines.append(pipeline)
        if not self.orders:
            return None
        (stage,) = pipeline
        group = stage["$group"]
        row = {"_id": group["_id"]}
        for name, accumulator in group.items():
            if name == "_id":
                continue
            field = accumulator["$sum"].lstrip("$")
            # $sum ignores missing and non-numeric values
            row[name] = sum(
                doc[field] for doc in self.orders
                if isinstance(doc.get(field), (int, float)) and not isinstance(doc.get(field), bool)
            )
        return row


def make_order(key: int, qty: int, coffee_type: str = "latte", employee_id: str = "emp-1", amount: Optional[float] = None):
    return {
        "_id": key,
        "coffeetype": coffee_type,
        "coffeeqty": qty,
        "employeeId": employee_id,
        "amount": amount if amount is not None else qty * 2.5,
    }


def make_account(employee_id: str, name: str, balance: float = 10.0):
    return {"_id": f"acct-{employee_id}", "employeeId": employee_id, "balance": balance, "name": name}


@pytest.fixture
def seven_orders() -> list[dict[str, Any]]:
    """Orders with increasing keys 1..7 and quantities 1..7."""
    return [make_order(key, key) for key in range(1, 8)]


@pytest.fixture
def accounts() -> list[dict[str, Any]]:
    return [make_account("emp-1", "Ada", 12.5), make_account("emp-2", "Grace", 3.0)]


@pytest.fixture
def seeded_store(seven_orders, accounts) -> InMemoryReportStore:
    return InMemoryReportStore(orders=seven_orders, accounts=accounts)


@pytest.fixture
def report_store(seeded_store) -> InMemoryReportStore:
    return seeded_store


@pytest.fixture
def store_factory():
    return InMemoryReportStore


@pytest.fixture
def order_factory():
    return make_order
