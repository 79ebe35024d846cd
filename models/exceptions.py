"""
models/exceptions.py
--------------------
Domain-specific exceptions shared by repositories and services.
"""


class SubscriptionTrackerError(Exception):
    """Base exception for the subscription tracker."""
    pass


class ValidationError(SubscriptionTrackerError):
    """
    Raised when user input fails validation. Nothing is written.

    Attributes:
        errors: Mapping of field name to message, one entry per failing field.
    """

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))

    @property
    def field(self) -> str:
        """The first failing field."""
        return next(iter(self.errors), "")


class NotFoundError(SubscriptionTrackerError):
    """Raised when a subscription id does not exist in the current workspace."""

    def __init__(self, subscription_id: str):
        self.subscription_id = subscription_id
        super().__init__(f"Subscription {subscription_id} not found")


class TransportError(SubscriptionTrackerError):
    """Raised when the storage backend fails (database, disk, network)."""
    pass


class ImportRecordError(SubscriptionTrackerError):
    """Raised for a single malformed record during import. Never aborts the batch."""

    def __init__(self, index: int, message: str = "Invalid subscription data"):
        self.index = index
        super().__init__(f"{message} at index {index}")
