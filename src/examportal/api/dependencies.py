"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends

from examportal.api.events import EventManager
from examportal.notifications import NotificationBroadcaster
from examportal.registration import RegistrationCoordinator
from examportal.store import PortalStore

# Global PortalStore instance (initialized on app startup)
_store: PortalStore | None = None


def init_store(db_path: str = "examportal.db", busy_timeout: float = 5.0) -> PortalStore:
    """Initialize the global PortalStore instance."""
    global _store  # noqa: PLW0603
    _store = PortalStore(db_path, busy_timeout=busy_timeout)
    return _store


def close_store() -> None:
    """Close the global PortalStore instance."""
    global _store  # noqa: PLW0603
    if _store is not None:
        _store.close()
        _store = None


def get_store() -> Generator[PortalStore, None, None]:
    """Dependency that provides the PortalStore instance."""
    if _store is None:
        raise RuntimeError("PortalStore not initialized. Call init_store() first.")
    yield _store


# Type alias for dependency injection
StoreDep = Annotated[PortalStore, Depends(get_store)]

# Global RegistrationCoordinator instance (initialized on app startup)
_coordinator: RegistrationCoordinator | None = None


def init_coordinator(coordinator: RegistrationCoordinator) -> None:
    """Initialize the global RegistrationCoordinator instance."""
    global _coordinator  # noqa: PLW0603
    _coordinator = coordinator


def close_coordinator() -> None:
    """Close the global RegistrationCoordinator instance."""
    global _coordinator  # noqa: PLW0603
    _coordinator = None


def get_coordinator() -> Generator[RegistrationCoordinator, None, None]:
    """Dependency that provides the RegistrationCoordinator instance."""
    if _coordinator is None:
        raise RuntimeError("Coordinator not initialized. Call init_coordinator() first.")
    yield _coordinator


# Type alias for dependency injection
CoordinatorDep = Annotated[RegistrationCoordinator, Depends(get_coordinator)]

# Global EventManager instance
_event_manager: EventManager | None = None


def init_event_manager() -> EventManager:
    """Initialize the global EventManager instance."""
    global _event_manager  # noqa: PLW0603
    _event_manager = EventManager()
    return _event_manager


def close_event_manager() -> None:
    """Close the global EventManager instance."""
    global _event_manager  # noqa: PLW0603
    _event_manager = None


def get_event_manager() -> Generator[EventManager, None, None]:
    """Dependency that provides the EventManager instance."""
    if _event_manager is None:
        raise RuntimeError("EventManager not initialized. Call init_event_manager() first.")
    yield _event_manager


# Type alias for dependency injection
EventManagerDep = Annotated[EventManager, Depends(get_event_manager)]

# Global NotificationBroadcaster instance (initialized on app startup)
_broadcaster: NotificationBroadcaster | None = None


def init_broadcaster(broadcaster: NotificationBroadcaster) -> None:
    """Initialize the global NotificationBroadcaster instance."""
    global _broadcaster  # noqa: PLW0603
    _broadcaster = broadcaster


def close_broadcaster() -> None:
    """Close the global NotificationBroadcaster instance."""
    global _broadcaster  # noqa: PLW0603
    _broadcaster = None


def get_broadcaster() -> Generator[NotificationBroadcaster, None, None]:
    """Dependency that provides the NotificationBroadcaster instance."""
    if _broadcaster is None:
        raise RuntimeError("Broadcaster not initialized. Call init_broadcaster() first.")
    yield _broadcaster


# Type alias for dependency injection
BroadcasterDep = Annotated[NotificationBroadcaster, Depends(get_broadcaster)]
