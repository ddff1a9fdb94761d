import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Iterable, Optional

from .services import (
    EMPTY_PERMISSION_STATE,
    PermissionState,
    can,
    can_all,
    can_any,
)

logger = logging.getLogger(__name__)

PermissionLoader = Callable[[str], Awaitable[PermissionState]]


class PermissionStatus(str, Enum):
    UNLOADED = "unloaded"
    LOADED = "loaded"


@dataclass(frozen=True)
class PermissionSnapshot:
    organisation_id: Optional[str]
    state: PermissionState
    status: PermissionStatus


_EMPTY_SNAPSHOT = PermissionSnapshot(
    organisation_id=None,
    state=EMPTY_PERMISSION_STATE,
    status=PermissionStatus.UNLOADED,
)


class PermissionStore:
    """
    Holds the permission state of the current member for the active organisation.

    The organisation id and state are replaced together as one snapshot, so a
    reader always sees a consistent pair. There is no partial update.
    """

    def __init__(self) -> None:
        self._snapshot = _EMPTY_SNAPSHOT
        self._generation = 0

    @property
    def snapshot(self) -> PermissionSnapshot:
        return self._snapshot

    @property
    def state(self) -> PermissionState:
        return self._snapshot.state

    @property
    def organisation_id(self) -> Optional[str]:
        return self._snapshot.organisation_id

    @property
    def is_loaded(self) -> bool:
        return self._snapshot.status is PermissionStatus.LOADED

    def load(self, organisation_id: str, state: PermissionState) -> None:
        self._generation += 1
        self._snapshot = PermissionSnapshot(
            organisation_id=organisation_id,
            state=state,
            status=PermissionStatus.LOADED,
        )

    def clear(self) -> None:
        self._generation += 1
        self._snapshot = _EMPTY_SNAPSHOT

    def switch_organisation(self, organisation_id: str) -> None:
        """Make ``organisation_id`` active; permissions of another org are dropped."""
        if self._snapshot.organisation_id == organisation_id:
            return
        self._generation += 1
        self._snapshot = PermissionSnapshot(
            organisation_id=organisation_id,
            state=EMPTY_PERMISSION_STATE,
            status=PermissionStatus.UNLOADED,
        )

    async def refresh(
        self, organisation_id: str, loader: PermissionLoader
    ) -> Optional[PermissionSnapshot]:
        """
        Fetch permissions for ``organisation_id`` and load them.

        A result that arrives after the store was cleared, switched to another
        organisation or refreshed again is discarded.

        Args:
            organisation_id: Organisation to load permissions for
            loader: Async permission source returning a PermissionState

        Returns:
            The new snapshot, or None if the result was discarded
        """
        self.switch_organisation(organisation_id)
        self._generation += 1
        generation = self._generation

        state = await loader(organisation_id)

        if generation != self._generation:
            logger.debug(
                f"Discarding stale permissions for organisation {organisation_id}"
            )
            return None

        self.load(organisation_id, state)
        return self._snapshot

    def can(self, permission: str) -> bool:
        return can(self._snapshot.state, permission)

    def can_any(self, permissions: Iterable[str]) -> bool:
        return can_any(self._snapshot.state, permissions)

    def can_all(self, permissions: Iterable[str]) -> bool:
        return can_all(self._snapshot.state, permissions)
