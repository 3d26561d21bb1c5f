"""Home services notification API package."""
