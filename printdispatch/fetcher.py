"""
Downloads documents to print.

Cookies of the calling session arrive in the X-Forwarded-Cookie header and
are sent along as the Cookie header, so documents behind a login can be
fetched on behalf of the user.
"""

import logging
import tempfile
from dataclasses import dataclass
from typing import BinaryIO, Optional

import httpx

from printdispatch.document import URL_DOCUMENT_NAME, Document
from printdispatch.errors import DownloadError

logger = logging.getLogger(__name__)

FORWARDED_COOKIE_HEADER = "X-Forwarded-Cookie"

# Bodies larger than this are spooled to disk
SPOOL_MAX_SIZE = 8 * 1024 * 1024


@dataclass
class FetchedFile:
    body: BinaryIO
    content_length: Optional[int] = None


class Fetcher:
    """
    HTTP file fetcher.

    Args:
        timeout_sec: Timeout for connecting and for each read
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(self, timeout_sec: float = 30.0, transport: httpx.AsyncBaseTransport = None):
        self.timeout_sec = timeout_sec
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout_sec,
            follow_redirects=True,
            transport=self._transport,
        )

    async def download(self, url: str, cookies: str = "") -> FetchedFile:
        """
        Download a file.

        Returns:
            FetchedFile positioned at the start of the body. content_length
            is None when the server did not announce the decoded size.

        Raises:
            DownloadError: invalid URL, transport error or non-2xx status
        """
        headers = {"Cookie": cookies} if cookies else {}
        body = tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_SIZE)

        try:
            async with self._client() as client:
                async with client.stream("GET", url, headers=headers) as response:
                    if not response.is_success:
                        raise DownloadError(
                            f"unexpected status {response.status_code} downloading {url}",
                            url=url
                        )
                    async for chunk in response.aiter_bytes():
                        body.write(chunk)
                    content_length = _decoded_length(response)
        except DownloadError:
            body.close()
            raise
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            body.close()
            raise DownloadError(f"failed to download {url}", url=url) from e

        body.seek(0)
        logger.debug(f"Downloaded {url} (content length: {content_length})")
        return FetchedFile(body=body, content_length=content_length)

    async def download_document(self, url: str, cookies: str = "") -> Document:
        """Download a file and wrap it as a printable document."""
        return to_document(await self.download(url, cookies))


def _decoded_length(response: httpx.Response) -> Optional[int]:
    # Content-Length counts encoded bytes, aiter_bytes yields decoded ones
    if response.headers.get("Content-Encoding", "identity") != "identity":
        return None
    value = response.headers.get("Content-Length")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def to_document(file: FetchedFile) -> Document:
    """
    Map a fetched file to a document.

    A known content length is used as the size and the body is passed on as
    is; otherwise the body is read into memory to measure it.
    """
    if file.content_length is not None and file.content_length > 0:
        return Document(name=URL_DOCUMENT_NAME, size=file.content_length, body=file.body)

    data = file.body.read()
    file.body.close()
    return Document.from_bytes(URL_DOCUMENT_NAME, data)
