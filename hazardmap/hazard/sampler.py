"""
Tile pixel sampling.

The classifier reads one pixel from a hazard tile image through the
``TilePixelSampler`` capability so its logic can run against a stub. The
HTTP implementation fetches the tile with aiohttp and decodes it with
Pillow. Failures raise TileSampleError; the classifier turns them into "no
classification". No retries: a click that misses is simply repeated by the
user.
"""

import asyncio
import io
import logging
from typing import Optional, Protocol, Tuple

import aiohttp
import numpy as np
from PIL import Image, UnidentifiedImageError

from ..errors import TileSampleError

logger = logging.getLogger(__name__)

RGBA = Tuple[int, int, int, int]


class TilePixelSampler(Protocol):
    """Reads one RGBA pixel of a tile image."""

    async def sample(self, url: str, col: int, row: int, tile_size: Optional[int] = None) -> Optional[RGBA]:
        """
        Sample a pixel.

        Args:
            url: Tile image URL
            col: Pixel column in tile-size space
            row: Pixel row in tile-size space (0 = north edge)
            tile_size: Pixel space of col/row; None uses the sampler default

        Returns:
            (r, g, b, a) with channels 0-255, or None if unavailable
        """
        ...


def decode_pixel(content: bytes, col: int, row: int, tile_size: int = 256) -> RGBA:
    """
    Decode an image and read one pixel.

    ``col``/``row`` address a ``tile_size`` square; they are scaled when the
    decoded image has another size (e.g. 512px high-DPI tiles).

    Raises:
        TileSampleError: If the bytes are not a decodable image
    """
    try:
        with Image.open(io.BytesIO(content)) as img:
            pixels = np.asarray(img.convert("RGBA"))
    except (UnidentifiedImageError, OSError) as e:
        raise TileSampleError("<memory>", f"cannot decode image: {e}") from e

    height, width = pixels.shape[:2]
    x = min(int(col * width / tile_size), width - 1)
    y = min(int(row * height / tile_size), height - 1)
    r, g, b, a = (int(v) for v in pixels[max(y, 0), max(x, 0)])
    return (r, g, b, a)


class HttpTilePixelSampler:
    """
    Samples tile pixels over HTTP.

    Example:
        async with HttpTilePixelSampler(timeout=10) as sampler:
            rgba = await sampler.sample(url, 120, 64)
    """

    def __init__(
        self,
        timeout: float = 10.0,
        tile_size: int = 256,
        user_agent: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize sampler.

        Args:
            timeout: Total request timeout in seconds
            tile_size: Default pixel space of the col/row arguments
            user_agent: Optional User-Agent header
            session: Existing session to reuse (not closed by the sampler)
        """
        self.timeout = timeout
        self.tile_size = tile_size
        self.user_agent = user_agent
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self):
        """Async context manager entry."""
        self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            headers = {"User-Agent": self.user_agent} if self.user_agent else None
            self._session = aiohttp.ClientSession(headers=headers)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def fetch(self, url: str) -> bytes:
        """
        Download a tile image.

        Raises:
            TileSampleError: On non-200 status, client error or timeout
        """
        session = self._ensure_session()
        try:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            async with session.get(url, timeout=timeout) as response:
                if response.status != 200:
                    raise TileSampleError(url, f"HTTP {response.status}")
                return await response.read()
        except asyncio.TimeoutError as e:
            raise TileSampleError(url, "request timed out") from e
        except aiohttp.ClientError as e:
            raise TileSampleError(url, f"client error: {e}") from e

    async def sample(self, url: str, col: int, row: int, tile_size: Optional[int] = None) -> Optional[RGBA]:
        content = await self.fetch(url)
        try:
            return decode_pixel(content, col, row, tile_size or self.tile_size)
        except TileSampleError as e:
            raise TileSampleError(url, e.reason) from e
