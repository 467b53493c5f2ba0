"""Abstract boundary contracts consumed by the release sync core.

Platform API clients, the work item tracker and the spreadsheet transport
live outside the core. They plug in by implementing these interfaces.
"""

from abc import ABC, abstractmethod

from ..models import (
    BlockReorderOperation,
    ChangeRequestRecord,
    FetchWindow,
    ReportRow,
    SyncOperation,
    WorkItemInfo,
)


class ChangeRequestSource(ABC):
    """Source of change requests for one platform or repository."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Name used in logs and platform status reports."""
        pass

    @abstractmethod
    async def fetch_change_requests(
        self, window: FetchWindow
    ) -> list[ChangeRequestRecord]:
        """Fetch change requests inside a time window.

        Args:
            window: Time window and target branches to query

        Returns:
            List of change request records
        """
        pass


class WorkItemSource(ABC):
    """Lookup of tracked work items by identifier."""

    @abstractmethod
    async def get_work_item(self, identifier: int) -> WorkItemInfo | None:
        """Fetch a work item.

        Args:
            identifier: Resolved work item identifier

        Returns:
            The work item, or None when it does not exist
        """
        pass


class SheetReader(ABC):
    """Reads the current report snapshot from the spreadsheet."""

    @abstractmethod
    async def read_rows(self) -> list[ReportRow]:
        """Read every data row below the header, with row numbers set."""
        pass


class SheetWriter(ABC):
    """Applies planned operations to the spreadsheet.

    Sync operations must be applied before block reorders, in emitted order.
    """

    @abstractmethod
    async def apply_sync_operations(self, operations: list[SyncOperation]) -> int:
        """Apply updates and inserts, returning the number applied."""
        pass

    @abstractmethod
    async def apply_reorders(self, reorders: list[BlockReorderOperation]) -> int:
        """Apply block reorders, returning the number applied."""
        pass
