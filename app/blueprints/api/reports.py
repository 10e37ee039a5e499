"""Misting Reports API
======================

Routes:
    GET /api/reports/summary   - ?type=daily&date=YYYY-MM-DD | monthly&month=&year= | yearly&year=
    GET /api/reports/comfort   - Livestock comfort index (?month=&year=)
    GET /api/reports/export    - Summary as a CSV attachment (same query as /summary)
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response

from app.blueprints.api._common import (
    get_report_service as _report_service,
    query_args,
    success as _success,
)
from app.schemas import ComfortQuery, ReportQuery
from app.utils.http import safe_route
from app.utils.time import utc_now

logger = logging.getLogger(__name__)

reports_api = Blueprint("reports_api", __name__)


@reports_api.get("/summary")
@safe_route("Failed to build misting report")
def summary() -> Response:
    query = ReportQuery.model_validate(query_args())
    return _success(_report_service().summary(query))


@reports_api.get("/comfort")
@safe_route("Failed to build comfort index")
def comfort() -> Response:
    query = ComfortQuery.model_validate(query_args())
    return _success(_report_service().comfort_index(query.month, query.year))


@reports_api.get("/export")
@safe_route("Failed to export misting report")
def export() -> Response:
    query = ReportQuery.model_validate(query_args())
    csv_text = _report_service().export_csv(query)
    filename = f"misting_report_{query.type.value}_{utc_now():%Y%m%d%H%M%S}.csv"
    return Response(
        csv_text,
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
