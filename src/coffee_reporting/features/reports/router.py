"""Reporting API endpoint

Serves the coffee sales report at ``GET /report``. The response is always
``200 application/json``: either the report object or ``[]`` when the
report could not be built (no connection, failed query, empty orders)."""
import logging
from typing import Annotated, Callable, Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.routing import APIRoute

from ...core.config import Settings
from .service import build_report, render_report
from .store import MongoReportStore, ReportStore

logger = logging.getLogger(__name__)


class LoggingRoute(APIRoute):
    """Logs each request before it is handled and marks its completion."""

    def get_route_handler(self) -> Callable:
        original_route_handler = super().get_route_handler()

        async def logging_route_handler(request: Request) -> Response:
            target = request.url.path
            if request.url.query:
                target = f"{target}?{request.url.query}"
            logger.info("Handling request: method=%s uri=%s", request.method, target)
            response = await original_route_handler(request)
            logger.debug("Finished handling request")
            return response

        return logging_route_handler


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_report_store(request: Request) -> Optional[ReportStore]:
    """Store over the process-wide connection, or ``None`` when it is unset."""
    settings: Settings = request.app.state.settings
    database = request.app.state.mongo.database(settings.database_name)
    if database is None:
        return None
    return MongoReportStore(database, settings.orders_collection, settings.accounts_collection)


router = APIRouter(
    tags=["Reports"],
    route_class=LoggingRoute,
)


@router.get("/report")
async def get_report(
    settings: Annotated[Settings, Depends(get_settings)],
    store: Annotated[Optional[ReportStore], Depends(get_report_store)],
):
    result = await build_report(
        store,
        order_count=settings.report_order_count,
        timeout=settings.db_timeout_seconds,
    )
    body = render_report(result)
    logger.debug("Sending response: %s", body)
    return Response(content=body, media_type="application/json")
