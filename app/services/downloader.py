"""Downloads trailer videos into the local intro cache."""

from __future__ import annotations

import asyncio
import logging
import sys
from contextlib import suppress
from pathlib import Path

from ..config import Settings
from ..errors import DownloadError

logger = logging.getLogger(__name__)


class TrailerDownloader:
    """Runs yt-dlp in a child process to fetch and mux a trailer to mp4."""

    def __init__(self, settings: Settings):
        self._ffmpeg_path = settings.ffmpeg_path
        self._timeout = settings.download_timeout_seconds

    def build_command(self, source_url: str, destination: Path) -> list[str]:
        command = [
            sys.executable,
            "-m",
            "yt_dlp",
            "--quiet",
            "--no-progress",
            "--no-playlist",
            "--format",
            "bestvideo[ext=mp4]+bestaudio[ext=m4a]/best[ext=mp4]/best",
            "--merge-output-format",
            "mp4",
            "--output",
            str(destination),
        ]
        if self._ffmpeg_path:
            command.extend(["--ffmpeg-location", self._ffmpeg_path])
        command.append(source_url)
        return command

    async def download(self, source_url: str, destination: Path) -> Path:
        """Write ``source_url`` to ``destination``.

        A cancelled or timed out download kills the child process and removes
        any partial output before the error propagates.
        """

        command = self.build_command(source_url, destination)
        logger.debug("Downloading %s to %s", source_url, destination)
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise DownloadError(f"Unable to start yt-dlp: {exc}") from exc

        try:
            _, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self._timeout
            )
        except asyncio.TimeoutError as exc:
            await self._abort(process, destination)
            raise DownloadError(
                f"Download of {source_url} timed out after {self._timeout}s"
            ) from exc
        except asyncio.CancelledError:
            await self._abort(process, destination)
            raise

        if process.returncode != 0:
            message = stderr.decode("utf-8", errors="ignore").strip()[-500:]
            self._remove_partial(destination)
            raise DownloadError(
                f"yt-dlp exited with {process.returncode} for {source_url}: {message}"
            )
        if not destination.exists():
            raise DownloadError(f"yt-dlp produced no file for {source_url}")
        return destination

    async def _abort(self, process: asyncio.subprocess.Process, destination: Path) -> None:
        if process.returncode is None:
            with suppress(ProcessLookupError):
                process.kill()
            await process.wait()
        self._remove_partial(destination)

    @staticmethod
    def _remove_partial(destination: Path) -> None:
        for candidate in destination.parent.glob(f"{destination.stem}.*"):
            with suppress(OSError):
                candidate.unlink()
