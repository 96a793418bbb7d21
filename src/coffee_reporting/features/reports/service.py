"""
Report Service Module

Assembles the coffee sales report from the document store. The three
queries run one after another under a single deadline. Store failures never
escape as exceptions: ``build_report`` returns a ``ReportResult`` holding
either the report or the error, and ``render_report`` maps every error to
the ``[]`` sentinel body.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, TypeVar

from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError
from bson.errors import BSONError
from pymongo.errors import PyMongoError

from .schemas import CoffeeOrder, EmployeeAccount, Report, SalesTotals
from .store import TOTALS_PIPELINE, Document, ReportStore

logger = logging.getLogger(__name__)

EMPTY_RESPONSE = "[]"
DEFAULT_ORDER_COUNT = 5
DEFAULT_TIMEOUT_SECONDS = 5.0

ModelT = TypeVar("ModelT", bound=BaseModel)


class ReportError(Exception):
    """A report could not be built. ``stage`` names the step that failed."""

    def __init__(self, stage: str, message: str):
        super().__init__(message)
        self.stage = stage

    def __str__(self) -> str:
        return f"{self.stage}: {super().__str__()}"


@dataclass(frozen=True)
class ReportResult:
    report: Optional[Report] = None
    error: Optional[ReportError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.report is not None

    @classmethod
    def success(cls, report: Report) -> "ReportResult":
        return cls(report=report)

    @classmethod
    def failure(cls, error: ReportError) -> "ReportResult":
        return cls(error=error)


def _decode_documents(model: type[ModelT], documents: list[Document]) -> list[ModelT]:
    """Validates documents in order, skipping the ones that do not decode."""
    decoded = []
    for document in documents:
        try:
            decoded.append(model.model_validate(document))
        except ValidationError as e:
            logger.debug("Skipping %s document %r: %s", model.__name__, document.get("_id"), e)
    return decoded


async def _assemble_report(store: ReportStore, order_count: int) -> Report:
    try:
        order_documents = await store.recent_orders(order_count)
    except (PyMongoError, BSONError) as e:
        raise ReportError("orders", f"Error querying recent orders: {e}") from e
    recent_sales = _decode_documents(CoffeeOrder, order_documents)

    try:
        account_documents = await store.employee_accounts()
    except (PyMongoError, BSONError) as e:
        raise ReportError("accounts", f"Error querying employee accounts: {e}") from e
    employee_accounts = _decode_documents(EmployeeAccount, account_documents)

    # A failed or empty aggregation discards everything gathered above.
    try:
        totals_document = await store.aggregate(TOTALS_PIPELINE)
    except (PyMongoError, BSONError) as e:
        raise ReportError("totals", f"Error aggregating sales totals: {e}") from e
    if totals_document is None:
        raise ReportError("totals", "Sales totals aggregation returned no rows")

    try:
        totals = SalesTotals.model_validate(totals_document)
    except ValidationError as e:
        # The report is still served, with zero totals.
        logger.error("Error decoding sales totals: %s", e)
        totals = SalesTotals(total_sales=0, total_revenue=0.0)

    return Report(
        total_sales=totals.total_sales,
        total_revenue=totals.total_revenue,
        recent_sales=recent_sales,
        employee_accounts=employee_accounts,
    )


async def build_report(
    store: Optional[ReportStore],
    *,
    order_count: int = DEFAULT_ORDER_COUNT,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> ReportResult:
    """
    Builds the sales report from the store.

    Args:
        store: The document store, or ``None`` when no connection is available
        order_count: How many of the most recent orders to include
        timeout: Deadline in seconds shared by all queries of this report

    Returns:
        ReportResult: The report, or the ``ReportError`` that stopped it.
            Totals always cover the whole orders collection, while
            ``recent_sales`` holds at most ``order_count`` orders, newest first.
    """
    if store is None:
        error = ReportError("connection", "No document store connection available")
        logger.error("Error building report: %s", error)
        return ReportResult.failure(error)

    try:
        report = await asyncio.wait_for(_assemble_report(store, order_count), timeout=timeout)
    except ReportError as e:
        logger.error("Error querying database: %s", e)
        return ReportResult.failure(e)
    except asyncio.TimeoutError:
        error = ReportError("deadline", f"Report queries did not finish within {timeout}s")
        logger.error("Error querying database: %s", error)
        return ReportResult.failure(error)

    logger.debug(
        "Built report with %d recent sale(s) and %d account(s)",
        len(report.recent_sales), len(report.employee_accounts),
    )
    return ReportResult.success(report)


def render_report(result: ReportResult) -> str:
    """
    Serializes a report result to the JSON response body.

    Every failure, including a serialization failure, renders as ``[]`` so
    the body is always parseable JSON. A bare ``null`` is never returned.
    """
    if not result.ok:
        return EMPTY_RESPONSE

    try:
        body = result.report.model_dump_json(by_alias=True)
    except PydanticSerializationError as e:
        error = ReportError("serialize", f"Error serializing report: {e}")
        logger.error("Error querying results from mongodb: %s", error)
        return EMPTY_RESPONSE

    if body == "null":
        return EMPTY_RESPONSE
    return body
