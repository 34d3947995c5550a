# storage/file_manager.py
"""Utility class for asynchronous file operations."""

from __future__ import annotations

import asyncio
import base64
import json
import os

import httpx
import structlog

from config import IMAGES_OUTPUT_DIR, STATS_FILE_PATH
from models import GeneratedImage
from orchestration.generation_stats import GenerationStats

logger = structlog.get_logger(__name__)


def decode_data_uri(uri: str) -> bytes:
    """Return the payload of a base64 ``data:`` URI."""
    header, _, payload = uri.partition(",")
    if not header.startswith("data:") or ";base64" not in header:
        raise ValueError("Not a base64 data URI.")
    return base64.b64decode(payload)


class FileManager:
    """Handle writing generated cards and the persisted statistics."""

    def __init__(
        self,
        images_dir: str = IMAGES_OUTPUT_DIR,
        stats_path: str = STATS_FILE_PATH,
    ) -> None:
        self.images_dir = images_dir
        self.stats_path = stats_path
        os.makedirs(self.images_dir, exist_ok=True)

    @staticmethod
    def image_filename(image: GeneratedImage, position: int) -> str:
        return f"cardnews_{image.page_type.value.lower()}_{position}.png"

    async def save_images(
        self,
        images: list[GeneratedImage],
        client: httpx.AsyncClient | None = None,
    ) -> list[str]:
        """Write every image of a run in order. Returns the written paths."""
        written: list[str] = []
        for position, image in enumerate(images, start=1):
            path = os.path.join(self.images_dir, self.image_filename(image, position))
            try:
                if image.url.startswith("data:"):
                    content = decode_data_uri(image.url)
                else:
                    content = await self._download(image.url, client)
            except (ValueError, httpx.HTTPError) as exc:
                logger.error("Could not save image '%s': %s", image.label, exc)
                continue
            await self._write_bytes(path, content)
            written.append(path)
        logger.info("Saved %d of %d images to %s.", len(written), len(images), self.images_dir)
        return written

    async def _download(self, url: str, client: httpx.AsyncClient | None) -> bytes:
        if client is not None:
            response = await client.get(url)
            response.raise_for_status()
            return response.content
        async with httpx.AsyncClient() as own_client:
            response = await own_client.get(url)
            response.raise_for_status()
            return response.content

    async def _write_bytes(self, path: str, content: bytes) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._write_bytes_sync, path, content)

    def _write_bytes_sync(self, path: str, content: bytes) -> None:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "wb") as f:
            f.write(content)

    def load_stats(self) -> GenerationStats:
        if not os.path.exists(self.stats_path):
            return GenerationStats()
        try:
            with open(self.stats_path, encoding="utf-8") as f:
                return GenerationStats.from_dict(json.load(f))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Could not read stats file %s: %s", self.stats_path, exc)
            return GenerationStats()

    def save_stats(self, stats: GenerationStats) -> None:
        os.makedirs(os.path.dirname(self.stats_path) or ".", exist_ok=True)
        with open(self.stats_path, "w", encoding="utf-8") as f:
            json.dump(stats.to_dict(), f, indent=2)
