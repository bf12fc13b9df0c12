"""Dataset download over HTTP.

OpenCellID and the Mozilla Location Service publish their cell exports as
(gzip-compressed) CSV files.  Remote datasets are streamed to a temporary
file first so a broken download can never reach the store.
"""

from __future__ import annotations

import contextlib
import logging
import tempfile
from collections.abc import AsyncIterator
from pathlib import Path
from urllib.parse import urlsplit

import aiohttp

from pylbs._constants import USER_AGENT
from pylbs.exceptions import DatasetAccessError

_logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1 << 20


def is_url(source: str | Path) -> bool:
    return isinstance(source, str) and urlsplit(source).scheme in ("http", "https")


def dataset_name(source: str | Path) -> str:
    """Return the file name part of a dataset path or URL."""
    if is_url(source):
        return Path(urlsplit(str(source)).path).name
    return Path(source).name


async def fetch_dataset(
    url: str,
    dest: Path,
    http_session: aiohttp.ClientSession,
    *,
    timeout: float = 0,
) -> int:
    """Stream *url* into *dest*; return the number of bytes written."""
    client_timeout = aiohttp.ClientTimeout(total=timeout or None)
    headers = {"user-agent": USER_AGENT}

    _logger.debug("GET %s", url)

    written = 0
    try:
        async with http_session.get(url, headers=headers, timeout=client_timeout) as resp:
            if resp.status != 200:
                text = await resp.text(errors="replace")
                raise DatasetAccessError(
                    f"HTTP {resp.status} from {url}: {text[:200]}",
                    source=url,
                    status_code=resp.status,
                )
            with dest.open("wb") as fh:
                async for chunk in resp.content.iter_chunked(_CHUNK_SIZE):
                    fh.write(chunk)
                    written += len(chunk)
    except DatasetAccessError:
        raise
    except (aiohttp.ClientError, TimeoutError, OSError) as exc:
        raise DatasetAccessError(f"Download of {url} failed: {exc!r}", source=url) from exc
    return written


@contextlib.asynccontextmanager
async def download_dataset(
    url: str,
    *,
    http_session: aiohttp.ClientSession | None = None,
    timeout: float = 0,
) -> AsyncIterator[Path]:
    """Download *url* into a temporary directory and yield the file path.

    The file (and directory) are removed on exit.  When *http_session* is
    omitted a private session is opened and closed around the download.
    """
    name = dataset_name(url) or "dataset.csv"
    with tempfile.TemporaryDirectory(prefix="pylbs-") as tmp:
        dest = Path(tmp) / name
        if http_session is not None:
            written = await fetch_dataset(url, dest, http_session, timeout=timeout)
        else:
            async with aiohttp.ClientSession() as own_session:
                written = await fetch_dataset(url, dest, own_session, timeout=timeout)
        _logger.info("Downloaded %s (%d bytes)", url, written)
        yield dest
