"""Progress reporting for the sync pipeline.

One cycle walks the ``SyncPhase`` members in declaration order. Consumers
such as the CLI's Rich progress bar implement ``SyncProgress`` to render them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import StrEnum


class SyncPhase(StrEnum):
    CATALOG = "Catalog"
    CHECK = "Check"
    MAPS = "Maps"
    STATIC = "Static"


class SyncProgress(ABC):
    """Observer for phase lifecycle events of one sync cycle."""

    @abstractmethod
    def phase_start(self, phase: SyncPhase, total: int | None = None) -> None:
        """*phase* begins; *total* is ``None`` when the item count is not known up front."""
        ...  # pragma: no cover

    @abstractmethod
    def item_done(self, phase: SyncPhase) -> None:
        """One map or collection of *phase* is finished, successfully or not."""
        ...  # pragma: no cover

    @abstractmethod
    def phase_done(self, phase: SyncPhase) -> None:
        ...  # pragma: no cover

    @abstractmethod
    def phase_error(self, phase: SyncPhase, error: BaseException) -> None:
        """*phase* stopped early because *error* escaped it."""
        ...  # pragma: no cover


class NullSyncProgress(SyncProgress):
    def phase_start(self, phase: SyncPhase, total: int | None = None) -> None:
        pass

    def item_done(self, phase: SyncPhase) -> None:
        pass

    def phase_done(self, phase: SyncPhase) -> None:
        pass

    def phase_error(self, phase: SyncPhase, error: BaseException) -> None:
        pass
