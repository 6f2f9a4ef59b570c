import asyncio
import logging
from pathlib import Path

from project_control.vault import PrioritiesStore

logger = logging.getLogger(__name__)


class FilePrioritiesStore(PrioritiesStore):
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    async def read(self) -> str | None:
        if not self.path.is_file():
            logger.debug("Priorities file not found: %s", self.path)
            return None
        return await asyncio.to_thread(self.path.read_text, encoding="utf-8")

    async def write(self, text: str) -> None:
        if not self.path.is_file():
            raise FileNotFoundError(f"priorities file not found: {self.path}")
        await asyncio.to_thread(self.path.write_text, text, encoding="utf-8")
        logger.debug("Wrote %d characters to %s", len(text), self.path)
