"""
handlers/start_handler.py
--------------------------
Handles /start and /help commands.
"""

from telegram import Update
from telegram.ext import ContextTypes

from handlers.workspace import workspace_id_for
from utils.logger import get_logger

logger = get_logger(__name__)

HELP_TEXT = """
🤖 Subscription tracker

📋 Viewing:
/subs [sort] [labels] - list subscriptions
    sort: nextPayment-asc, name-desc, amount-desc, ...
    labels: comma-separated, e.g. streaming,work
/stats [labels] - monthly / yearly totals
/calendar [year month] - payments per day
/labels - labels in use

✏️ Editing:
/add name | amount | currency | frequency | YYYY-MM-DD | labels
/edit <id> | field=value | ...
/delete <id>

💾 Backup:
/export_json - full backup
/export_csv - CSV table
/export_excel - Excel table
/import - restore from a JSON backup

🔗 Sharing:
/share - read-only link to this list
/shared <token> - view a shared list
/workspace [name] - show or rename this list
"""


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command - show welcome message."""
    user = update.effective_user
    logger.info(f"User {user.id} started the bot in workspace {workspace_id_for(update)}.")

    await update.message.reply_text(
        f"Hi {user.first_name}! 👋\n"
        f"I keep track of your recurring subscriptions.\n"
        f"Overdue ones that auto-renew are moved to their next date automatically.\n\n"
        f"Type /help to see every command."
    )


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command - show all available commands."""
    await update.message.reply_text(HELP_TEXT)
