"""
Local asset storage for thumbnails.

Thumbnails are small and public, so they skip object storage entirely:
the bytes are written under the assets root and served by the static
file mount at /assets. URLs are permanent; there's no signing or expiry.
"""

import asyncio
import logging
from pathlib import Path
from typing import BinaryIO, Union

from ...core.media.errors import InvalidInput, IOFailure

logger = logging.getLogger(__name__)

ASSETS_URL_PREFIX = "/assets"


class LocalAssetStore:
    """
    Writes assets to <root>/<relative_path>.

    base_url is the public origin of the server, e.g.
    "http://localhost:8091"; the asset URL is base_url + /assets/<path>.
    """

    def __init__(self, root: Union[str, Path], base_url: str) -> None:
        self._root = Path(root)
        self._base_url = base_url.rstrip("/")

    @property
    def root(self) -> Path:
        return self._root

    def ensure_root(self) -> None:
        """Create the assets root if it doesn't exist yet."""
        try:
            self._root.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as e:
            raise IOFailure(f"Could not create assets directory {self._root}: {e}") from e

    def disk_path(self, relative_path: str) -> Path:
        """Resolve relative_path under the root, refusing anything that escapes it."""
        root = self._root.resolve()
        path = (root / relative_path).resolve()
        if path == root or root not in path.parents:
            raise InvalidInput(f"Asset path escapes the assets root: {relative_path!r}")
        return path

    def url_for(self, relative_path: str) -> str:
        return f"{self._base_url}{ASSETS_URL_PREFIX}/{relative_path}"

    async def write(
        self,
        relative_path: str,
        source: Union[bytes, BinaryIO],
    ) -> str:
        """Write bytes (or a readable binary stream) and return the public URL."""
        self.ensure_root()
        path = self.disk_path(relative_path)

        await asyncio.to_thread(self._write_file, path, source)

        logger.info("Wrote asset", extra={"path": str(path)})

        return self.url_for(relative_path)

    @staticmethod
    def _write_file(path: Path, source: Union[bytes, BinaryIO]) -> None:
        try:
            with open(path, "wb") as f:
                if isinstance(source, (bytes, bytearray)):
                    f.write(source)
                else:
                    while True:
                        chunk = source.read(64 * 1024)
                        if not chunk:
                            break
                        f.write(chunk)
        except OSError as e:
            path.unlink(missing_ok=True)
            logger.error("Failed to write asset", extra={"path": str(path), "error": str(e)})
            raise IOFailure(f"Could not write asset {path.name}: {e}") from e
