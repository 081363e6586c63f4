"""Abstract interface (port) for the read-only team records store."""

from abc import ABC, abstractmethod

from scout_rag.domain.entities.team_record import TeamRecord


class TeamRecordSource(ABC):
    """Port for enumerating precomputed team records."""

    @abstractmethod
    async def load_all(self) -> list[TeamRecord]:
        """Return every well-formed team record in a stable order.

        Raises:
            DataSourceError: If the store as a whole cannot be read.
        """
        ...
