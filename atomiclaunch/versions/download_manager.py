"""Download manager for the version jar, libraries and assets."""

import asyncio
import contextlib
import hashlib
import logging
import uuid
from pathlib import Path
from typing import Callable, Iterable, List, NamedTuple, Optional

import aiofiles
import aiofiles.os

from ..config import MAX_CONCURRENT_DOWNLOADS
from ..errors import IntegrityMismatch
from ..utils.async_http import AsyncHTTPClient
from ..utils.cancellation import CancellationToken

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

ProgressCallback = Callable[[int, int], None]


class DownloadTask(NamedTuple):
    url: str
    dest: Path
    sha1: Optional[str] = None


class DownloadManager:
    """Bounded, integrity checked file retrieval.

    One manager is created per install call, so the semaphore bounds the
    transfers of that call only. Files are written to a temporary sibling
    and renamed into place, so a reader never sees a torn file.
    """

    def __init__(self, http: AsyncHTTPClient,
                 concurrent_downloads: int = MAX_CONCURRENT_DOWNLOADS,
                 cancel_token: Optional[CancellationToken] = None):
        self.http = http
        self.concurrent_downloads = concurrent_downloads
        self.semaphore = asyncio.Semaphore(concurrent_downloads)
        self.cancel_token = cancel_token

    @staticmethod
    async def file_sha1(file_path: Path) -> str:
        """SHA1 hex digest of a file."""
        hash_sha1 = hashlib.sha1()
        async with aiofiles.open(file_path, 'rb') as f:
            while chunk := await f.read(CHUNK_SIZE):
                hash_sha1.update(chunk)
        return hash_sha1.hexdigest()

    @classmethod
    async def verify_sha1(cls, file_path: Path, expected_sha1: str) -> bool:
        """Verify SHA1 hash of a file."""
        return await cls.file_sha1(file_path) == expected_sha1.lower()

    @classmethod
    async def needs_download(cls, dest: Path, expected_sha1: Optional[str]) -> bool:
        """A present file is valid unless a known SHA1 disagrees with it."""
        if not await aiofiles.os.path.isfile(dest):
            return True
        if not expected_sha1:
            return False
        if await cls.verify_sha1(dest, expected_sha1):
            return False
        logger.info("SHA1 mismatch for cached %s, downloading again", dest)
        return True

    def _check_cancelled(self):
        if self.cancel_token is not None:
            self.cancel_token.raise_if_cancelled()

    async def download_file(self, task: DownloadTask) -> bool:
        """Fetch one file unless a valid copy is cached.

        Returns True when bytes were transferred.
        """
        async with self.semaphore:
            self._check_cancelled()
            if not await self.needs_download(task.dest, task.sha1):
                return False

            await aiofiles.os.makedirs(task.dest.parent, exist_ok=True)
            part = task.dest.with_name(f"{task.dest.name}.{uuid.uuid4().hex[:8]}.part")
            digest = hashlib.sha1()
            try:
                async with self.http.stream(task.url) as resp:
                    async with aiofiles.open(part, 'wb') as f:
                        async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
                            digest.update(chunk)
                            await f.write(chunk)

                actual = digest.hexdigest()
                if task.sha1 and actual != task.sha1.lower():
                    raise IntegrityMismatch(task.dest, task.sha1, actual)

                await aiofiles.os.replace(part, task.dest)
            except BaseException:
                with contextlib.suppress(FileNotFoundError):
                    await aiofiles.os.remove(part)
                raise

            logger.debug("Downloaded %s -> %s", task.url, task.dest)
            return True

    async def fetch_many(self, tasks: Iterable[DownloadTask],
                         progress_callback: Optional[ProgressCallback] = None) -> int:
        """Run every task under the shared bound; return how many were downloaded.

        The first failure aborts the batch: outstanding transfers are
        cancelled and the error is raised.
        """
        tasks = list(tasks)
        if not tasks:
            return 0

        total = len(tasks)
        completed = 0

        async def run(task: DownloadTask) -> bool:
            nonlocal completed
            downloaded = await self.download_file(task)
            completed += 1
            if progress_callback:
                progress_callback(completed, total)
            return downloaded

        futures: List[asyncio.Future] = [asyncio.ensure_future(run(t)) for t in tasks]
        try:
            done, pending = await asyncio.wait(futures, return_when=asyncio.FIRST_EXCEPTION)
        except asyncio.CancelledError:
            for future in futures:
                future.cancel()
            raise

        if pending:
            for future in pending:
                future.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        errors = [
            f.exception() for f in futures
            if f in done and not f.cancelled() and f.exception() is not None
        ]
        if errors:
            logger.error("Download batch aborted after %d/%d files: %s", completed, total, errors[0])
            raise errors[0]

        return sum(1 for f in futures if not f.cancelled() and f.result())
