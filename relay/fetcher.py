import codecs
import time
from datetime import datetime, timezone
from typing import Dict, Optional

import httpx
import structlog

from .html_meta import find_meta_charset

logger = structlog.get_logger(__name__)

DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36'
)
DEFAULT_ENCODING = 'utf-8'
CHARSET_SNIFF_BYTES = 1024


class FetchResult:
    def __init__(
        self,
        url: str,
        status_code: int,
        reason: str = '',
        content: bytes = b'',
        headers: Dict[str, str] = None,
        final_url: str = None,
        fetch_time: float = 0.0,
        content_type: str = None,
    ):
        """Initialize a FetchResult with HTTP response data and metadata."""
        self.url = url
        self.status_code = status_code
        self.reason = reason
        self.content = content
        self.headers = headers or {}
        self.final_url = final_url or url
        self.fetch_time = fetch_time
        self.content_type = content_type
        self.timestamp = datetime.now(timezone.utc)

    @property
    def ok(self) -> bool:
        """Check if the upstream answered with a 2xx status code."""
        return 200 <= self.status_code < 300

    @property
    def size(self) -> int:
        """Get the size of the response content in bytes."""
        return len(self.content)


class DecodedPage:
    def __init__(self, html: str, encoding_used: str):
        self.html = html
        self.encoding_used = encoding_used


def extract_encoding(content_type: Optional[str], content: bytes,
                     sniff_bytes: int = CHARSET_SNIFF_BYTES) -> str:
    """Extract character encoding from the Content-Type header or, failing
    that, from a <meta> tag near the top of the document."""
    if content_type and 'charset=' in content_type.lower():
        start = content_type.lower().index('charset=') + len('charset=')
        charset = content_type[start:].split(';')[0].strip().strip('\'"').strip()
        if charset:
            return charset

    if content:
        head = content[:sniff_bytes].decode(DEFAULT_ENCODING, errors='replace')
        charset = find_meta_charset(head)
        if charset:
            return charset

    return DEFAULT_ENCODING


def decode_content(content: bytes, encoding: str) -> DecodedPage:
    """Decode the body with the detected encoding, falling back to UTF-8 only
    when the encoding label is not a usable text codec.

    Invalid bytes become U+FFFD in the declared encoding, and a leading UTF-8
    BOM is dropped. Neither path raises.
    """
    try:
        codec = codecs.lookup(encoding)
        if codec.name == 'utf-8':
            return DecodedPage(content.decode('utf-8-sig', errors='replace'), encoding)
        return DecodedPage(content.decode(encoding, errors='replace'), encoding)
    except (LookupError, UnicodeError) as e:
        # Unknown label, or a codec that cannot decode text with replacement
        logger.warning("decode_fallback", encoding=encoding, fallback=DEFAULT_ENCODING, error=str(e))
        return DecodedPage(content.decode('utf-8-sig', errors='replace'), DEFAULT_ENCODING)


class HTTPFetcher:
    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
        max_redirects: int = 20,
    ):
        """Initialize the HTTP fetcher; 3xx redirects are followed by the client."""
        self.user_agent = user_agent
        self.timeout = timeout
        self.max_redirects = max_redirects

        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            max_redirects=self.max_redirects,
            headers={'User-Agent': self.user_agent},
        )

    async def fetch(self, url: str) -> FetchResult:
        """GET a URL and buffer the whole body.

        Network errors propagate to the caller; a non-2xx status is reported
        through FetchResult.ok.
        """
        start_time = time.time()
        response = await self._client.get(url)

        return FetchResult(
            url=url,
            status_code=response.status_code,
            reason=response.reason_phrase,
            content=response.content,
            headers=dict(response.headers),
            final_url=str(response.url),
            fetch_time=time.time() - start_time,
            content_type=response.headers.get('content-type'),
        )

    async def close(self):
        await self._client.aclose()
