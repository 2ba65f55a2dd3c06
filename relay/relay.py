"""
Fetch a page on behalf of a browser client: fetch, decode, and follow
<meta http-equiv="refresh"> redirects up to a fixed bound.
"""
from urllib.parse import urljoin

import structlog

from .errors import UpstreamFetchError
from .fetcher import HTTPFetcher, decode_content, extract_encoding
from .html_meta import find_meta_refresh

logger = structlog.get_logger(__name__)

MAX_REDIRECTS = 5


class RelayResult:
    def __init__(self, contents: str, final_url: str, redirect_count: int = 0,
                 encoding: str = None, max_redirects_reached: bool = False):
        self.contents = contents
        self.final_url = final_url
        self.redirect_count = redirect_count
        self.encoding = encoding
        self.max_redirects_reached = max_redirects_reached

    def to_dict(self) -> dict:
        return {'contents': self.contents, 'finalUrl': self.final_url}


class PageRelay:
    """Runs the fetch/decode/redirect loop against a shared HTTPFetcher."""

    def __init__(self, fetcher: HTTPFetcher, max_redirects: int = MAX_REDIRECTS,
                 charset_sniff_bytes: int = 1024):
        self.fetcher = fetcher
        self.max_redirects = max_redirects
        self.charset_sniff_bytes = charset_sniff_bytes

    async def fetch_page(self, url: str) -> RelayResult:
        target_url = url
        redirect_count = 0

        while True:
            result = await self.fetcher.fetch(target_url)
            if not result.ok:
                logger.warning("upstream_fetch_failed",
                               url=target_url,
                               status=result.status_code,
                               reason=result.reason)
                raise UpstreamFetchError(result.status_code, result.reason)

            encoding = extract_encoding(result.content_type, result.content, self.charset_sniff_bytes)
            page = decode_content(result.content, encoding)

            refresh_target = find_meta_refresh(page.html)
            if not refresh_target:
                break

            if redirect_count >= self.max_redirects:
                logger.warning("max_redirects_reached",
                               url=result.final_url,
                               max_redirects=self.max_redirects)
                return RelayResult(page.html, result.final_url, redirect_count,
                                   page.encoding_used, max_redirects_reached=True)

            # Relative targets resolve against the post-3xx URL
            target_url = urljoin(result.final_url, refresh_target)
            redirect_count += 1
            logger.info("meta_refresh_followed",
                        from_url=result.final_url,
                        to_url=target_url,
                        redirect_count=redirect_count)

        logger.info("relay_completed",
                    url=url,
                    final_url=result.final_url,
                    redirect_count=redirect_count,
                    encoding=page.encoding_used,
                    size=result.size,
                    fetch_time=result.fetch_time)
        return RelayResult(page.html, result.final_url, redirect_count, page.encoding_used)
