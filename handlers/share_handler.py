"""
handlers/share_handler.py
--------------------------
Read-only share links for a chat's subscription list.
Only available with the hosted (postgres) backend.
"""

from telegram import Update
from telegram.ext import ContextTypes

from config import SHARE_BASE_URL
from handlers.subscription_handler import format_subscription
from handlers.workspace import describe_error, workspace_id_for
from models.exceptions import SubscriptionTrackerError
from repositories.factory import uses_hosted_backend
from repositories.workspace_repo import SharedSubscriptionRepository, WorkspaceRepository
from services.currency import format_currency
from services.stats import total_monthly
from utils.logger import get_logger

logger = get_logger(__name__)
shared_repo = SharedSubscriptionRepository()

_LOCAL_ONLY = "ℹ️ Sharing needs the hosted storage backend."


def share_link(token: str) -> str:
    if SHARE_BASE_URL:
        return f"{SHARE_BASE_URL.rstrip('/')}/{token}"
    return token


async def share_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /share - create (or show) this chat's read-only share token."""
    if not uses_hosted_backend():
        await update.message.reply_text(_LOCAL_ONLY)
        return

    workspace = WorkspaceRepository(workspace_id_for(update))
    try:
        token = await workspace.generate_sharing_token()
    except SubscriptionTrackerError as e:
        await update.message.reply_text(describe_error(e))
        return

    await update.message.reply_text(
        f"🔗 Share link:\n{share_link(token)}\n\n"
        f"Anyone with it can run /shared {token} to view this list (read-only)."
    )


async def shared_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /shared <token> - view someone else's shared list."""
    if not uses_hosted_backend():
        await update.message.reply_text(_LOCAL_ONLY)
        return
    if not context.args:
        await update.message.reply_text("⚠️ Usage: /shared <token>")
        return

    token = context.args[0].rstrip("/").rsplit("/", 1)[-1]
    try:
        subs = await shared_repo.get_shared_subscriptions(token)
        name = await shared_repo.get_shared_workspace_name(token)
    except SubscriptionTrackerError as e:
        await update.message.reply_text(describe_error(e))
        return

    if name is None:
        await update.message.reply_text("⚠️ This share link is invalid or was revoked.")
        return
    if not subs:
        await update.message.reply_text(f"📭 {name} has no subscriptions.")
        return

    body = "\n\n".join(format_subscription(s, include_id=False) for s in subs)
    await update.message.reply_text(
        f"👀 {name} ({len(subs)})\n"
        f"📆 Monthly: {format_currency(total_monthly(subs))}\n\n{body}"
    )


async def workspace_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /workspace [new name] - show or rename this chat's list.
    The name is what viewers of a share link see.
    """
    if not uses_hosted_backend():
        await update.message.reply_text(_LOCAL_ONLY)
        return

    workspace = WorkspaceRepository(workspace_id_for(update))
    new_name = " ".join(context.args or []).strip()
    if not new_name:
        name = await workspace.get_workspace_name()
        await update.message.reply_text(f"📁 This list is called \"{name}\".\nRename it with /workspace <name>.")
        return
    if len(new_name) > 100:
        await update.message.reply_text("⚠️ Name is too long (max 100 characters).")
        return

    try:
        await workspace.rename(new_name)
    except SubscriptionTrackerError as e:
        await update.message.reply_text(describe_error(e))
        return
    logger.info(f"Workspace {workspace.workspace_id} renamed")
    await update.message.reply_text(f"📁 Renamed to \"{new_name}\".")
