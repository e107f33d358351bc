"""Protocol for the page's persistent local storage (SQLAlchemy backed, or a plain dict in tests)."""

from typing import Any, Protocol


class LocalStorage(Protocol):
    """Synchronous key/value storage that outlives page navigations."""

    def get_item(self, key: str) -> Any | None:
        """Stored JSON value for key, if any."""
        ...

    def set_item(self, key: str, value: Any) -> None:
        """Create or overwrite the value for key."""
        ...

    def remove_item(self, key: str) -> None:
        """Forget key. Unknown keys are ignored."""
        ...
