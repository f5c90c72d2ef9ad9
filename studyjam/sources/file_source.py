from pathlib import Path

from loguru import logger

from .base_source import CsvSource, FetchError


class FileCsvSource(CsvSource):
    """Reads the same file layout as the static hosting from a local directory."""

    name = "file"

    def __init__(self, root: Path):
        self.root = Path(root)

    async def fetch_text(self, resource: str) -> str:
        path = self.root / resource
        try:
            # utf-8-sig drops the BOM spreadsheet exports like to add
            text = path.read_text(encoding="utf-8-sig")
        except OSError as e:
            logger.error(f"Could not read {path}: {e}")
            raise FetchError(resource, e) from e
        logger.debug(f"Read {path} ({len(text)} chars)")
        return text
