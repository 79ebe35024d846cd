"""
handlers/export_handler.py
---------------------------
Handles data export commands (JSON, CSV, Excel) and JSON import
from an uploaded document. Delegates to ExportService and ImportService.
"""

import io

from telegram import Update
from telegram.ext import ContextTypes

from handlers.workspace import describe_error, service_for
from models.exceptions import SubscriptionTrackerError
from services.export_service import ExportService, export_filename
from services.import_service import ImportService
from utils.logger import get_logger

logger = get_logger(__name__)
export_service = ExportService()

MAX_IMPORT_BYTES = 5 * 1024 * 1024


async def _load_for_export(update: Update):
    try:
        return await service_for(update).load()
    except SubscriptionTrackerError as e:
        logger.error(f"Export failed for chat {update.effective_chat.id}: {e}")
        await update.message.reply_text(describe_error(e))
        return None


async def export_json_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /export_json - full backup that /import can read back."""
    subs = await _load_for_export(update)
    if subs is None:
        return

    payload = export_service.export_json(subs)
    await update.message.reply_document(
        document=io.BytesIO(payload),
        filename=export_filename("json"),
        caption=f"💾 Backup of {len(subs)} subscriptions - JSON",
    )


async def export_csv_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /export_csv - spreadsheet-friendly CSV."""
    subs = await _load_for_export(update)
    if subs is None:
        return

    await update.message.reply_text("📄 Preparing CSV file...")
    buffer = export_service.export_csv(subs)
    await update.message.reply_document(
        document=buffer,
        filename=export_filename("csv"),
        caption=f"📊 {len(subs)} subscriptions - CSV",
    )


async def export_excel_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /export_excel - formatted Excel sheet."""
    subs = await _load_for_export(update)
    if subs is None:
        return

    await update.message.reply_text("📊 Preparing Excel file...")
    buffer = export_service.export_table(subs)
    await update.message.reply_document(
        document=buffer,
        filename=export_filename("xlsx"),
        caption=f"📊 {len(subs)} subscriptions - Excel",
    )


async def import_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /import - explain how to send a backup file."""
    await update.message.reply_text(
        "📥 Send a JSON file exported with /export_json as a document.\n"
        "Subscriptions that already exist are skipped."
    )


async def import_document(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle an uploaded .json document - import its subscriptions."""
    document = update.message.document
    if document.file_size and document.file_size > MAX_IMPORT_BYTES:
        await update.message.reply_text("⚠️ File is too large to import (max 5 MB).")
        return

    telegram_file = await document.get_file()
    raw = bytes(await telegram_file.download_as_bytearray())

    service = service_for(update)
    try:
        result = await ImportService(service.repo).import_json(raw)
    except SubscriptionTrackerError as e:
        logger.error(f"Import failed for chat {update.effective_chat.id}: {e}")
        await update.message.reply_text(describe_error(e))
        return

    title = "📥 Import complete" if result.success else "⚠️ Import finished with problems"
    await update.message.reply_text(f"{title}\n\n{result.summary()}")
