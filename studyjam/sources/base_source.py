from abc import ABC, abstractmethod
from typing import Optional


class FetchError(Exception):
    """Raised when a CSV resource cannot be fetched."""

    def __init__(self, resource: str, cause: Optional[BaseException] = None):
        self.resource = resource
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Could not fetch {resource}{detail}")


class CsvSource(ABC):
    """Abstract base class for places the Study Jam CSV files are published."""

    name: str = "unknown"

    @abstractmethod
    async def fetch_text(self, resource: str) -> str:
        """Fetch the current text contents of a CSV resource.

        Args:
            resource: Path of the resource relative to the source root,
                e.g. "teams/RIO (Cloud).csv".

        Returns:
            The decoded text of the resource.

        Raises:
            FetchError: The resource is missing or could not be read.
        """
        pass

    async def close(self) -> None:
        """Releases any resources held by the source."""
        return None
