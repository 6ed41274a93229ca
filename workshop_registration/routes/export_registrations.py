import csv
import io
import logging
from datetime import datetime
from io import BytesIO

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from openpyxl import Workbook

from workshop_registration.sheets import get_row_store

logger = logging.getLogger(__name__)

router = APIRouter()

HEADER = ["Name", "Email", "Contact", "Affiliated", "Affiliation ID", "Slot"]


def _padded(row: list) -> list:
    # the Sheets API drops trailing blanks
    return (list(row) + [""] * len(HEADER))[:len(HEADER)]


def load_rows(store) -> list[list]:
    try:
        rows = store.get_rows()
    except Exception as e:
        logger.exception("Could not read registrations for export")
        raise HTTPException(status_code=502, detail=f"Sheets error: {str(e)}")
    if not rows:
        raise HTTPException(status_code=404, detail="No registrations found in sheet")
    return [_padded(r) for r in rows]


def build_excel(rows: list[list]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Registrations"

    ws.append(HEADER)
    for r in rows:
        ws.append(r)

    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


def build_csv(rows: list[list]) -> str:
    buf = io.StringIO()
    w = csv.writer(buf)
    w.writerow(HEADER)
    w.writerows(rows)
    return buf.getvalue()


def _filename(ext: str) -> str:
    return f"registrations_{datetime.now().strftime('%Y%m%d_%H%M%S')}.{ext}"


@router.get("/registrations/export.csv")
def export_registrations_csv(store=Depends(get_row_store)):
    rows = load_rows(store)
    return StreamingResponse(
        iter([build_csv(rows)]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{_filename("csv")}"'},
    )


@router.get("/registrations/export.xlsx")
def export_registrations_xlsx(store=Depends(get_row_store)):
    rows = load_rows(store)
    return StreamingResponse(
        iter([build_excel(rows)]),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{_filename("xlsx")}"'},
    )
