"""Errors raised by the notification use cases."""


class NotificationNotFoundError(ValueError):
    """The notification does not exist or belongs to another user.

    Both cases raise the same error so callers cannot probe for ids owned by
    someone else.
    """

    def __init__(self, message: str = "Notification not found") -> None:
        super().__init__(message)


__all__ = ["NotificationNotFoundError"]
