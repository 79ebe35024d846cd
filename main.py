"""
main.py
-------
Entry point for the subscription tracker Telegram bot.

Responsibilities:
    - Initialize the database connection pool and schema (hosted backend).
    - Configure and start the Telegram bot with all handlers.
"""

from telegram import BotCommand
from telegram.ext import (
    Application,
    CommandHandler,
    MessageHandler,
    filters,
)

from config import STORAGE_BACKEND, TELEGRAM_BOT_TOKEN
from db.connection import close_pool, init_pool
from db.init_db import create_tables
from handlers.export_handler import (
    export_csv_command,
    export_excel_command,
    export_json_command,
    import_command,
    import_document,
)
from handlers.share_handler import share_command, shared_command, workspace_command
from handlers.start_handler import help_command, start_command
from handlers.subscription_handler import (
    add_command,
    calendar_command,
    delete_command,
    edit_command,
    labels_command,
    stats_command,
    subs_command,
)
from repositories.factory import uses_hosted_backend
from utils.logger import get_logger

logger = get_logger(__name__)


async def set_bot_commands(application: Application) -> None:
    """Register bot commands menu in Telegram on startup."""
    commands = [
        BotCommand("start", "🚀 Start"),
        BotCommand("help", "📖 Help"),
        BotCommand("subs", "📋 List subscriptions"),
        BotCommand("add", "➕ Add a subscription"),
        BotCommand("edit", "✏️ Edit a subscription"),
        BotCommand("delete", "🗑️ Delete a subscription"),
        BotCommand("stats", "📊 Spending overview"),
        BotCommand("calendar", "🗓️ Payment calendar"),
        BotCommand("labels", "🏷️ Labels in use"),
        BotCommand("export_json", "💾 JSON backup"),
        BotCommand("export_csv", "📄 Export CSV"),
        BotCommand("export_excel", "📊 Export Excel"),
        BotCommand("import", "📥 Import a JSON backup"),
        BotCommand("share", "🔗 Share this list"),
        BotCommand("shared", "👀 View a shared list"),
        BotCommand("workspace", "📁 Name this list"),
    ]
    await application.bot.set_my_commands(commands)
    logger.info("Bot commands menu registered successfully.")


def main() -> None:
    """Initialize and run the bot."""

    # ── 1. Storage setup ──────────────────────────────────
    if uses_hosted_backend():
        logger.info("Initializing database...")
        init_pool()
        create_tables()
    else:
        logger.info(f"Using '{STORAGE_BACKEND}' storage backend.")

    # ── 2. Build the Telegram application ─────────────────
    logger.info("Starting Telegram bot...")
    app = Application.builder().token(TELEGRAM_BOT_TOKEN).post_init(set_bot_commands).build()

    # ── 3. Register command handlers ──────────────────────
    app.add_handler(CommandHandler("start", start_command))
    app.add_handler(CommandHandler("help", help_command))
    app.add_handler(CommandHandler("subs", subs_command))
    app.add_handler(CommandHandler("add", add_command))
    app.add_handler(CommandHandler("edit", edit_command))
    app.add_handler(CommandHandler("delete", delete_command))
    app.add_handler(CommandHandler("stats", stats_command))
    app.add_handler(CommandHandler("calendar", calendar_command))
    app.add_handler(CommandHandler("labels", labels_command))
    app.add_handler(CommandHandler("export_json", export_json_command))
    app.add_handler(CommandHandler("export_csv", export_csv_command))
    app.add_handler(CommandHandler("export_excel", export_excel_command))
    app.add_handler(CommandHandler("import", import_command))
    app.add_handler(CommandHandler("share", share_command))
    app.add_handler(CommandHandler("shared", shared_command))
    app.add_handler(CommandHandler("workspace", workspace_command))

    # ── 4. JSON uploads are imports ───────────────────────
    app.add_handler(MessageHandler(filters.Document.FileExtension("json"), import_document))

    # ── 5. Start polling ──────────────────────────────────
    logger.info("🚀 Subscription tracker is running! Press Ctrl+C to stop.")
    app.run_polling(drop_pending_updates=True, allowed_updates=["message"])

    # ── 6. Cleanup on shutdown ────────────────────────────
    if uses_hosted_backend():
        close_pool()
    logger.info("Subscription tracker stopped.")


if __name__ == "__main__":
    main()
