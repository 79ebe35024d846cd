"""
handlers/subscription_handler.py
---------------------------------
Handles subscription commands: list, add, edit, delete, stats, calendar.
Delegates all logic to SubscriptionService.
"""

from datetime import date, datetime
from typing import Optional

from telegram import Update
from telegram.ext import ContextTypes

from config import REFERENCE_CURRENCY
from handlers.workspace import describe_error, service_for
from models.exceptions import SubscriptionTrackerError
from models.subscription import Subscription
from services.currency import format_currency, format_in_reference
from services.filtering import DEFAULT_SORT, SORT_DIRECTIONS, SORT_KEYS
from services.recurrence import format_due_label, is_overdue
from utils.logger import get_logger

logger = get_logger(__name__)

# /edit keyword -> NewSubscription attribute
_EDIT_FIELDS = {
    "name": "name",
    "amount": "amount",
    "currency": "currency",
    "frequency": "frequency",
    "next": "next_payment",
    "start": "start_date",
    "renew": "auto_renewal",
    "labels": "labels",
    "url": "url",
    "comment": "comment",
}

_TRUE_WORDS = {"yes", "y", "true", "on", "1"}
_FALSE_WORDS = {"no", "n", "false", "off", "0"}

ADD_USAGE = (
    "📝 Add a subscription\n\n"
    "Format:\n"
    "/add name | amount | currency | frequency | YYYY-MM-DD | labels\n\n"
    "Examples:\n"
    "• /add Netflix | 45 | SAR | monthly | 2026-11-01 | streaming\n"
    "• /add iCloud | 2.99 | USD | monthly | 2026-11-05\n"
    "• /add Domain | 12 | USD | yearly | 2027-03-01 | work, web\n\n"
    "Frequency: weekly, monthly, quarterly, yearly"
)

EDIT_USAGE = (
    "✏️ Edit a subscription\n\n"
    "Format:\n"
    "/edit <id> | field=value | field=value\n\n"
    "Fields: " + ", ".join(_EDIT_FIELDS) + "\n"
    "Example: /edit 3f2a... | amount=55 | renew=no"
)


def _split_sort_and_labels(args: list[str]) -> tuple[str, list[str]]:
    """
    '/subs amount-desc work,home' -> ('amount-desc', ['work', 'home']).
    Any argument that is a valid sort option sets the order; the rest are labels.
    """
    sort_option = DEFAULT_SORT
    labels: list[str] = []
    for arg in args:
        key, _, direction = arg.partition("-")
        if key in SORT_KEYS and direction in SORT_DIRECTIONS:
            sort_option = arg
            continue
        labels.extend(part.strip() for part in arg.split(",") if part.strip())
    return sort_option, labels


def _parse_add(text: str) -> Optional[dict]:
    parts = [p.strip() for p in text.split("|")]
    if len(parts) < 5:
        return None
    return {
        "name": parts[0],
        "amount": parts[1],
        "currency": parts[2],
        "frequency": parts[3],
        "next_payment": parts[4],
        "labels": parts[5] if len(parts) > 5 else [],
    }


def _parse_edit_value(attr: str, raw: str):
    if attr == "auto_renewal":
        word = raw.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    return raw


def _parse_edit(parts: list[str]) -> tuple[dict, list[str]]:
    fields: dict = {}
    unknown: list[str] = []
    for part in parts:
        keyword, sep, value = part.partition("=")
        attr = _EDIT_FIELDS.get(keyword.strip().lower())
        if not sep or attr is None:
            unknown.append(part)
            continue
        fields[attr] = _parse_edit_value(attr, value.strip())
    return fields, unknown


def format_subscription(sub: Subscription, now: Optional[datetime] = None, include_id: bool = True) -> str:
    """One list entry: name, cost, frequency and due status. Shared views pass include_id=False."""
    status = "🔁" if sub.auto_renewal else "⏸"
    overdue = " ⚠️" if not sub.auto_renewal and is_overdue(sub.next_payment, now) else ""
    line = (
        f"{status} {sub.name}: {format_currency(sub.amount, sub.currency)} ({sub.frequency})\n"
        f"    📅 {sub.next_payment} - {format_due_label(sub.next_payment, now)}{overdue}"
    )
    if sub.currency != REFERENCE_CURRENCY:
        line += f"\n    ≈ {format_in_reference(sub.amount, sub.currency)}"
    if sub.labels:
        line += f"\n    🏷️ {', '.join(sub.labels)}"
    if include_id:
        line += f"\n    🔖 {sub.id}"
    return line


async def subs_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /subs [sort] [labels] - list subscriptions.
    Examples: /subs, /subs amount-desc, /subs name-asc streaming,work
    """
    sort_option, labels = _split_sort_and_labels(context.args or [])
    try:
        subs = await service_for(update).list_subscriptions(labels, sort_option)
    except SubscriptionTrackerError as e:
        await update.message.reply_text(describe_error(e))
        return

    if not subs:
        await update.message.reply_text("📭 No subscriptions yet. Use /add to create one.")
        return

    header = f"📋 Subscriptions ({len(subs)})"
    if labels:
        header += f" - labels: {', '.join(labels)}"
    body = "\n\n".join(format_subscription(s) for s in subs)
    await update.message.reply_text(f"{header}\n\n{body}")


async def add_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /add name | amount | currency | frequency | YYYY-MM-DD [| labels]."""
    if not context.args:
        await update.message.reply_text(ADD_USAGE)
        return

    data = _parse_add(" ".join(context.args))
    if data is None:
        await update.message.reply_text(ADD_USAGE)
        return

    try:
        sub = await service_for(update).create(data)
    except SubscriptionTrackerError as e:
        await update.message.reply_text(describe_error(e))
        return

    await update.message.reply_text(f"✅ Added:\n{format_subscription(sub)}")


async def edit_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /edit <id> | field=value ... - partial update."""
    parts = [p.strip() for p in " ".join(context.args or []).split("|")]
    if len(parts) < 2 or not parts[0]:
        await update.message.reply_text(EDIT_USAGE)
        return

    subscription_id = parts[0]
    fields, unknown = _parse_edit(parts[1:])
    if unknown or not fields:
        await update.message.reply_text(EDIT_USAGE)
        return

    try:
        await service_for(update).update(subscription_id, fields)
    except SubscriptionTrackerError as e:
        await update.message.reply_text(describe_error(e))
        return

    await update.message.reply_text(f"✏️ Updated {subscription_id}: {', '.join(sorted(fields))}")


async def delete_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /delete <id> - delete a subscription permanently.
    Usage: /delete 3f2a9c1e-...
    """
    if not context.args:
        await update.message.reply_text("⚠️ Usage: /delete <subscription id>")
        return

    subscription_id = context.args[0]
    try:
        await service_for(update).delete(subscription_id)
    except SubscriptionTrackerError as e:
        await update.message.reply_text(describe_error(e))
        return

    await update.message.reply_text(f"🗑️ Deleted subscription {subscription_id}.")


async def stats_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /stats [labels] - spending overview in the reference currency."""
    _, labels = _split_sort_and_labels(context.args or [])
    try:
        stats = await service_for(update).stats(labels)
    except SubscriptionTrackerError as e:
        await update.message.reply_text(describe_error(e))
        return

    lines = [
        "📊 Spending overview" + (f" ({', '.join(labels)})" if labels else ""),
        "",
        f"🔢 Subscriptions: {stats.count}",
        f"📆 Monthly: {format_currency(stats.monthly_total)}",
        f"🗓️ Yearly: {format_currency(stats.yearly_total)}",
        f"💳 Due this month: {format_currency(stats.due_this_month)}",
        f"⏳ Still to pay this month: {format_currency(stats.due_rest_of_month)}",
    ]
    await update.message.reply_text("\n".join(lines))


async def calendar_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /calendar [YYYY MM] - payments per day for one month.
    Defaults to the current month.
    """
    today = date.today()
    year, month = today.year, today.month

    if context.args and len(context.args) >= 2:
        try:
            year = int(context.args[0])
            month = int(context.args[1])
        except ValueError:
            month = 0
        if not 1 <= month <= 12:
            await update.message.reply_text("⚠️ Usage: /calendar [year month]\nExample: /calendar 2026 11")
            return

    try:
        days = await service_for(update).calendar(year, month)
    except SubscriptionTrackerError as e:
        await update.message.reply_text(describe_error(e))
        return

    if not days:
        await update.message.reply_text(f"📭 No payments in {month:02d}/{year}.")
        return

    lines = [f"🗓️ Payments in {month:02d}/{year}:\n"]
    for day, entries in days.items():
        lines.append(f"📅 {day}")
        lines.extend(f"    • {e.name}: {format_currency(e.amount, e.currency)}" for e in entries)
    await update.message.reply_text("\n".join(lines))


async def labels_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /labels - list every label in use."""
    try:
        labels = await service_for(update).labels()
    except SubscriptionTrackerError as e:
        await update.message.reply_text(describe_error(e))
        return

    if not labels:
        await update.message.reply_text("🏷️ No labels yet.")
        return
    await update.message.reply_text("🏷️ Labels:\n" + "\n".join(f"  • {label}" for label in labels))
