"""
services/export_service.py
---------------------------
Generates JSON, CSV and Excel exports of a subscription collection.
"""

import io
import json
from datetime import date, datetime
from typing import Iterable, Optional

import pandas as pd
from openpyxl.utils import get_column_letter

from models.subscription import Subscription
from services.currency import to_reference
from utils.logger import get_logger

logger = get_logger(__name__)

SHEET_NAME = "Subscriptions"

# Column header -> width (in characters) for the table exports
TABLE_COLUMNS: dict[str, int] = {
    "Service Name": 20,
    "Amount": 10,
    "Currency": 8,
    "Amount (SAR)": 12,
    "Frequency": 12,
    "Next Payment": 12,
    "Start Date": 12,
    "Website": 25,
    "Auto Renewal": 12,
    "Labels": 20,
    "Comment": 30,
    "Created": 12,
    "Updated": 12,
}


def export_filename(extension: str, today: Optional[date] = None) -> str:
    """e.g. 'subscriptions-2024-06-15.json'."""
    stamp = (today or date.today()).isoformat()
    return f"subscriptions-{stamp}.{extension.lstrip('.')}"


def _day(value: Optional[datetime]) -> str:
    return value.date().isoformat() if value is not None else ""


def _table_row(sub: Subscription) -> dict:
    return {
        "Service Name": sub.name,
        "Amount": sub.amount,
        "Currency": sub.currency,
        "Amount (SAR)": round(to_reference(sub.amount, sub.currency), 2),
        "Frequency": sub.frequency,
        "Next Payment": sub.next_payment.isoformat(),
        "Start Date": sub.start_date.isoformat() if sub.start_date else "",
        "Website": sub.url or "",
        "Auto Renewal": "Yes" if sub.auto_renewal else "No",
        "Labels": ", ".join(sub.labels),
        "Comment": sub.comment or "",
        "Created": _day(sub.created_at),
        "Updated": _day(sub.updated_at),
    }


def _table_frame(subs: Iterable[Subscription]) -> pd.DataFrame:
    return pd.DataFrame([_table_row(s) for s in subs], columns=list(TABLE_COLUMNS))


class ExportService:
    """Serializes subscriptions for download. Stateless; never touches storage."""

    def export_json(self, subs: Iterable[Subscription]) -> bytes:
        """
        Full-fidelity export: a pretty-printed JSON array of every field.
        This is the only format `ImportService` reads back.
        """
        records = [s.to_dict() for s in subs]
        payload = json.dumps(records, indent=2, ensure_ascii=False).encode("utf-8")
        logger.info(f"Exported {len(records)} subscriptions as JSON")
        return payload

    def export_csv(self, subs: Iterable[Subscription]) -> io.BytesIO:
        """
        Export the table columns as CSV (UTF-8 with BOM, so spreadsheet
        apps detect the encoding).

        Returns:
            A BytesIO buffer containing the CSV data.
        """
        df = _table_frame(subs)
        buffer = io.BytesIO()
        df.to_csv(buffer, index=False, encoding="utf-8-sig")
        buffer.seek(0)
        logger.info(f"Exported {len(df)} subscriptions as CSV")
        return buffer

    def export_table(self, subs: Iterable[Subscription]) -> io.BytesIO:
        """
        Export a human-readable Excel (.xlsx) sheet, one row per subscription.
        Lossy: derived columns are formatted for reading, not for re-import.

        Returns:
            A BytesIO buffer containing the Excel data.
        """
        df = _table_frame(subs)

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name=SHEET_NAME, index=False)

            sheet = writer.sheets[SHEET_NAME]
            for position, width in enumerate(TABLE_COLUMNS.values(), start=1):
                sheet.column_dimensions[get_column_letter(position)].width = width

        buffer.seek(0)
        logger.info(f"Exported {len(df)} subscriptions as Excel")
        return buffer
