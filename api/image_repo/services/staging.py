"""Local staging of incoming upload bytes."""

import logging
import os
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Protocol

import aiofiles
import aiofiles.os

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class IncomingFile(Protocol):
    """Anything with a filename and an async ``read``, e.g. FastAPI's UploadFile."""

    filename: str

    async def read(self, size: int = -1) -> bytes: ...


@asynccontextmanager
async def staged_file(source: IncomingFile, staging_dir: str) -> AsyncIterator[Path]:
    """Copy an incoming file into a temporary file for the duration of the block.

    The temporary file is deleted when the block exits, whether it exits
    normally or with an exception.

    Args:
        source: Incoming file to copy
        staging_dir: Directory holding temporary files (created if missing)

    Yields:
        Path of the staged copy
    """
    Path(staging_dir).mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(dir=staging_dir, prefix="upload-")
    os.close(fd)
    path = Path(name)

    try:
        async with aiofiles.open(path, "wb") as out:
            while True:
                chunk = await source.read(CHUNK_SIZE)
                if not chunk:
                    break
                await out.write(chunk)

        yield path
    finally:
        await aiofiles.os.remove(path)
        logger.debug(f"Released staging file {path.name} for {source.filename}")


async def read_staged(path: Path) -> bytes:
    async with aiofiles.open(path, "rb") as f:
        return await f.read()
