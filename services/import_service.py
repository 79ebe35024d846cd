"""
services/import_service.py
---------------------------
Reads a JSON export back into a workspace.

Records are validated one by one; a bad record is reported and skipped,
never aborting the batch. Imported records keep their original id, so
re-importing the same file reports every record as a duplicate.
"""

import json
from typing import Any, Iterable, Optional, Union

from models.exceptions import ImportRecordError, SubscriptionTrackerError
from models.import_result import ImportResult
from models.subscription import Subscription
from repositories.base import SubscriptionRepository
from services.validation import parse_record
from utils.logger import get_logger

logger = get_logger(__name__)


def _records_from(parsed: Any) -> list:
    """Accept a bare record, a bare array, or a {"version", "subscriptions"} envelope."""
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict) and isinstance(parsed.get("subscriptions"), list):
        return parsed["subscriptions"]
    return [parsed]


class ImportService:
    """Validates, de-duplicates and stores imported subscriptions."""

    def __init__(self, repo: SubscriptionRepository):
        self.repo = repo

    async def import_json(
        self,
        raw: Union[str, bytes],
        existing: Optional[Iterable[Subscription]] = None,
    ) -> ImportResult:
        """
        Import subscriptions from JSON text.

        Args:
            raw: File contents (UTF-8; a leading BOM is tolerated).
            existing: Subscriptions already in scope, used for duplicate
                detection. Read from the repository when omitted.

        Returns:
            An ImportResult with per-record outcomes.

        Raises:
            TransportError: If `existing` is omitted and listing fails.
        """
        result = ImportResult()

        try:
            text = raw.decode("utf-8-sig") if isinstance(raw, bytes) else raw
            parsed = json.loads(text)
        except (UnicodeDecodeError, json.JSONDecodeError):
            result.errors.append("Invalid JSON format")
            return result

        records = _records_from(parsed)
        if not records:
            result.errors.append("No subscription data found")
            return result

        if existing is None:
            existing = await self.repo.list_all()
        known_ids = {sub.id for sub in existing}

        for index, raw_record in enumerate(records):
            try:
                record = parse_record(raw_record, index)
            except ImportRecordError as e:
                result.errors.append(str(e))
                continue

            if record.id in known_ids:
                result.duplicates.append(record.name)
                result.skipped += 1
                continue

            try:
                await self.repo.create(record.as_new(), subscription_id=record.id)
            except SubscriptionTrackerError as e:
                logger.warning(f"Import of '{record.name}' #{record.id} failed: {e}")
                result.errors.append(f'Failed to import "{record.name}": {e}')
                continue

            result.imported += 1
            known_ids.add(record.id)

        logger.info(
            f"Import finished: {result.imported} imported, {result.skipped} skipped, "
            f"{len(result.errors)} errors"
        )
        return result
