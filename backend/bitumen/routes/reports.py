# Overview: Flask API routes for report downloads; CSV and PDF renderings of resource lists.

from flask import Blueprint, Response, g, jsonify, request

from ..decorators import require_auth
from ..services import export_service
from ..services.crud_service import ListFilters, MAX_LIMIT, service_for
from ..services.resources import RESOURCES
from bitumen.time_utils import utcnow


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _rows_for(name: str):
    service = service_for(name)
    args = request.args.to_dict()
    args.setdefault("limit", MAX_LIMIT)
    filters = ListFilters.from_args(service.spec, args)
    return service.spec, service.list(g.current_user, filters)


def _filename(name: str, ext: str) -> str:
    return f"{name}-{utcnow().strftime('%Y%m%d')}.{ext}"


@reports_bp.get("/<name>.csv")
@require_auth
def csv_report_route(name: str):
    """Accepts the same filter parameters as the resource's list endpoint."""
    if name not in RESOURCES:
        return jsonify({"error": "Report not found"}), 404
    spec, rows = _rows_for(name)
    return Response(
        export_service.export_csv(spec, rows),
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{_filename(name, "csv")}"'},
    )


@reports_bp.get("/<name>.pdf")
@require_auth
def pdf_report_route(name: str):
    if name not in RESOURCES:
        return jsonify({"error": "Report not found"}), 404
    spec, rows = _rows_for(name)
    title = request.args.get("title") or f"{spec.label} report"
    return Response(
        export_service.export_pdf(spec, rows, title=title),
        mimetype="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{_filename(name, "pdf")}"'},
    )
