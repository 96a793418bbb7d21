"""Storage collaborator for the report assembler.

The assembler only sees the narrow ``ReportStore`` protocol; the MongoDB
implementation lives here so queries stay declarative and in one place."""
import logging
from typing import Any, Optional, Protocol

from pymongo import DESCENDING
from pymongo.asynchronous.database import AsyncDatabase

logger = logging.getLogger(__name__)

Document = dict[str, Any]

# One bucket over the whole collection.
TOTALS_PIPELINE: list[Document] = [
    {
        "$group": {
            "_id": 0,
            "totalSales": {"$sum": "$coffeeqty"},
            "totalRevenue": {"$sum": "$amount"},
        }
    }
]


class ReportStore(Protocol):
    async def recent_orders(self, limit: int) -> list[Document]:
        """Most recent orders, newest first."""
        ...

    async def employee_accounts(self) -> list[Document]:
        ...

    async def aggregate(self, pipeline: list[Document]) -> Optional[Document]:
        """First row of the pipeline over the orders collection, or ``None``."""
        ...


class MongoReportStore:
    def __init__(
        self,
        database: AsyncDatabase,
        orders_collection: str = "orders",
        accounts_collection: str = "employeeAccounts",
    ):
        self.orders = database[orders_collection]
        self.accounts = database[accounts_collection]

    async def recent_orders(self, limit: int) -> list[Document]:
        cursor = self.orders.find({}).sort("_id", DESCENDING).limit(limit)
        return await cursor.to_list(length=limit)

    async def employee_accounts(self) -> list[Document]:
        cursor = self.accounts.find({})
        return await cursor.to_list(length=None)

    async def aggregate(self, pipeline: list[Document]) -> Optional[Document]:
        cursor = await self.orders.aggregate(pipeline)
        rows = await cursor.to_list(length=1)
        logger.debug("Aggregation returned %d row(s)", len(rows))
        return rows[0] if rows else None
