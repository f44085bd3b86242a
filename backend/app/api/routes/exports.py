import csv
import io
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from openpyxl import Workbook
from sqlalchemy.orm import Session

from app.api.deps import get_analytics_cache, get_db, get_window
from app.services.analytics import AnalyticsResult, get_analytics
from app.services.cache import AnalyticsCache
from app.services.records import AnalyticsWindow


router = APIRouter(tags=["exports"])

EXPORT_COLUMNS = ["date", "revenue", "invoiceCount", "status"]
EXPORT_STATUS = "Active"


def build_export_rows(result: AnalyticsResult) -> list[dict]:
    return [
        {
            "date": point.date.isoformat(),
            "revenue": point.revenue,
            "invoiceCount": point.invoice_count,
            "status": EXPORT_STATUS,
        }
        for point in result.revenue_chart
    ]


def render_csv(result: AnalyticsResult) -> str:
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=EXPORT_COLUMNS, lineterminator="\n")
    writer.writeheader()
    writer.writerows(build_export_rows(result))
    return output.getvalue()


def _filename(account_id: str, window: AnalyticsWindow, extension: str) -> str:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"revenue-{account_id}-{window.start.isoformat()}-{window.end.isoformat()}-{stamp}.{extension}"


@router.get("/analytics/exports/csv")
def export_csv(
    account_id: str = Query(..., min_length=1),
    window: AnalyticsWindow = Depends(get_window),
    db: Session = Depends(get_db),
    cache: AnalyticsCache[AnalyticsResult] = Depends(get_analytics_cache),
):
    result = get_analytics(db, cache, account_id, window)
    filename = _filename(account_id, window, "csv")
    return StreamingResponse(
        iter([render_csv(result)]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/analytics/exports/excel")
def export_excel(
    account_id: str = Query(..., min_length=1),
    window: AnalyticsWindow = Depends(get_window),
    db: Session = Depends(get_db),
    cache: AnalyticsCache[AnalyticsResult] = Depends(get_analytics_cache),
):
    result = get_analytics(db, cache, account_id, window)
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Revenue"
    sheet.append(EXPORT_COLUMNS)
    for row in build_export_rows(result):
        sheet.append([row[key] for key in EXPORT_COLUMNS])

    stream = io.BytesIO()
    workbook.save(stream)
    stream.seek(0)
    filename = _filename(account_id, window, "xlsx")
    return StreamingResponse(
        stream,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
