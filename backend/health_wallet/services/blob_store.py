import logging
import os
import uuid
from pathlib import Path
from typing import Optional
import aiofiles
import aiofiles.os

logger = logging.getLogger(__name__)


class LocalBlobStore:
    """
    Stores uploaded documents on the local filesystem.

    Locators are relative paths of the form "<upload dir name>/<uuid><ext>",
    the same shape the reports table keeps in file_url.
    """

    def __init__(self, root: str):
        self.root = Path(root)

    def _locator_for(self, name: str) -> str:
        return f"{self.root.name}/{name}"

    def path_for(self, locator: str) -> Path:
        name = Path(locator).name
        if not name or name in (".", ".."):
            raise ValueError(f"Invalid blob locator: {locator!r}")
        return self.root / name

    async def store(self, content: bytes, filename: Optional[str] = None) -> str:
        os.makedirs(self.root, exist_ok=True)
        ext = Path(filename).suffix.lower() if filename else ""
        name = f"{uuid.uuid4().hex}{ext}"

        async with aiofiles.open(self.root / name, "wb") as f:
            await f.write(content)

        locator = self._locator_for(name)
        logger.info("Stored blob %s (%d bytes)", locator, len(content))
        return locator

    async def read(self, locator: str) -> bytes:
        async with aiofiles.open(self.path_for(locator), "rb") as f:
            return await f.read()

    async def exists(self, locator: str) -> bool:
        return await aiofiles.os.path.exists(self.path_for(locator))

    async def delete(self, locator: str) -> None:
        path = self.path_for(locator)
        if await aiofiles.os.path.exists(path):
            await aiofiles.os.remove(path)
            logger.info("Deleted blob %s", locator)
