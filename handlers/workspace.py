"""
handlers/workspace.py
---------------------
Maps a Telegram chat to its workspace. Each chat (private or group)
gets its own isolated subscription list.
"""

from telegram import Update

from models.exceptions import NotFoundError, SubscriptionTrackerError, ValidationError
from repositories.factory import get_repository
from services.subscription_service import SubscriptionService
from utils.logger import get_logger

logger = get_logger(__name__)


def workspace_id_for(update: Update) -> str:
    return str(update.effective_chat.id)


def service_for(update: Update) -> SubscriptionService:
    return SubscriptionService(get_repository(workspace_id_for(update)))


def describe_error(error: SubscriptionTrackerError) -> str:
    """User-facing text for a domain error."""
    if isinstance(error, ValidationError):
        lines = [f"  • {name}: {message}" for name, message in error.errors.items()]
        return "⚠️ Please fix the following:\n" + "\n".join(lines)
    if isinstance(error, NotFoundError):
        return f"⚠️ Subscription {error.subscription_id} was not found."
    return "❌ Storage is unavailable right now. Please try again."
