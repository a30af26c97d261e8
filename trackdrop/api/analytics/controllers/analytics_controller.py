"""Analytics controller - stats, dashboard and export routes."""

import csv
import io

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from trackdrop.api.access.dto.access import AccessEvent, AccessEventCreate, display
from trackdrop.api.analytics.dto.analytics import DashboardStats, UploadStats
from trackdrop.dependencies import Services, get_services

router = APIRouter(prefix="/api", tags=["Analytics"])

CSV_COLUMNS = ["id", *AccessEventCreate.model_fields]
# Columns where an absent value means "could not be determined"
UNKNOWN_COLUMNS = {
    "country", "city", "device_type", "device_vendor", "device_model",
    "os_name", "os_version", "browser_name", "browser_version", "language",
}


def _csv_value(column: str, value):
    if column in UNKNOWN_COLUMNS:
        return display(value)
    if column == "timestamp":
        return value.isoformat()
    return "" if value is None else value


def events_to_csv(events: list[AccessEvent]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_COLUMNS)
    for event in events:
        row = event.model_dump()
        writer.writerow([_csv_value(c, row[c]) for c in CSV_COLUMNS])
    return buffer.getvalue()


@router.get("/stats/{upload_id}", response_model=UploadStats)
def upload_stats(upload_id: str, services: Services = Depends(get_services)):
    stats = services.analytics.upload_stats(upload_id)
    if stats is None:
        raise HTTPException(status_code=404, detail="Upload not found")
    return stats


@router.get("/dashboard", response_model=DashboardStats)
def dashboard(services: Services = Depends(get_services)):
    return services.analytics.dashboard_stats()


@router.get("/export", response_model=list[AccessEvent])
def export_json(services: Services = Depends(get_services)):
    return services.analytics.export_all()


@router.get("/export/csv")
def export_csv(services: Services = Depends(get_services)):
    events = services.analytics.export_all()
    if not events:
        raise HTTPException(status_code=404, detail="No data to export")
    return Response(
        content=events_to_csv(events),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="access_logs.csv"'},
    )
