"""Reddit public JSON endpoint adapter with rate limiting."""

import logging
import time
from typing import Any, Optional

import requests

from src.adapters.reddit_adapter import RedditAdapter
from src.core.exceptions import (
    RedditFetchError,
    RateLimitError,
    SubredditNotFoundError,
    SubredditPrivateError,
)
from src.core.things import KIND_COMMENT, KIND_LISTING, KIND_MORE, KIND_POST, decode_listing
from src.core.tree import decode_post_and_comments
from src.core.types import Listing, PostAndComments


logger = logging.getLogger("thingtree")

_APP_VERSION = "1.0.0"


class RateLimiter:
    """Simple minimum-interval rate limiter.

    Enforces a minimum time gap between requests.
    On 429, uses exponential backoff.
    """

    def __init__(self, interval_sec: float = 6.0, max_retries: int = 3):
        self._interval = interval_sec
        self._max_retries = max_retries
        self._last_request_time: float = 0.0

    def wait(self) -> None:
        """Wait if needed to respect minimum interval."""
        elapsed = time.time() - self._last_request_time
        if elapsed < self._interval:
            sleep_time = self._interval - elapsed
            logger.debug(f"Rate limiter: sleeping {sleep_time:.1f}s")
            time.sleep(sleep_time)

    def mark_request(self) -> None:
        """Record that a request was just made."""
        self._last_request_time = time.time()

    @property
    def max_retries(self) -> int:
        return self._max_retries

    def get_backoff_time(self, attempt: int) -> float:
        """Exponential backoff: interval * 2^attempt.
        E.g., 6s -> 12s -> 24s -> 48s"""
        return self._interval * (2 ** attempt)


class PublicJSONAdapter(RedditAdapter):
    """Fetches Reddit responses via public JSON endpoints and decodes them."""

    BASE_URL = "https://www.reddit.com"

    def __init__(
        self,
        request_interval_sec: float = 6.0,
        max_retries: int = 3,
        mock_mode: bool = False,
    ):
        self._mock_mode = mock_mode
        self._rate_limiter = RateLimiter(request_interval_sec, max_retries)
        self._session = requests.Session()
        self._session.headers.update({
            "User-Agent": f"python:thingtree:v{_APP_VERSION}",
            "Accept": "application/json",
        })

    def get_subreddit_listing(
        self,
        subreddit: str,
        sort: str = "hot",
        limit: int = 25,
        time_filter: Optional[str] = None,
        after: Optional[str] = None,
    ) -> Listing:
        if self._mock_mode:
            return decode_listing(self._mock_listing(subreddit))

        params = {"limit": limit, "raw_json": 1}
        if sort == "top" and time_filter:
            params["t"] = time_filter
        if after:
            params["after"] = after

        url = f"{self.BASE_URL}/r/{subreddit}/{sort}.json"
        return decode_listing(self._fetch_json(url, params))

    def get_post_and_comments(
        self,
        post_id: str,
        subreddit: str,
        sort: str = "top",
        limit: int = 50,
    ) -> PostAndComments:
        if self._mock_mode:
            return decode_post_and_comments(self._mock_post_and_comments(post_id, subreddit))

        url = f"{self.BASE_URL}/r/{subreddit}/comments/{post_id}/.json"
        params = {"raw_json": 1, "sort": sort, "limit": limit}
        return decode_post_and_comments(self._fetch_json(url, params))

    def _fetch_json(self, url: str, params: dict) -> Any:
        """Fetch JSON from Reddit with rate limiting and error handling.

        Handles: rate limiting, 429 backoff, HTML response detection,
        HTTP error codes (403, 404).
        """
        self._rate_limiter.wait()

        last_error = None
        for attempt in range(self._rate_limiter.max_retries + 1):
            try:
                self._rate_limiter.mark_request()
                response = self._session.get(url, params=params, timeout=30)

                if response.status_code == 429:
                    if attempt < self._rate_limiter.max_retries:
                        backoff = self._rate_limiter.get_backoff_time(attempt)
                        logger.warning(f"Rate limited (429). Backoff: {backoff}s (attempt {attempt + 1})")
                        time.sleep(backoff)
                        continue
                    raise RateLimitError("Rate limit exceeded after max retries")

                if response.status_code == 404:
                    raise SubredditNotFoundError(f"Not found: {url}")
                if response.status_code == 403:
                    raise SubredditPrivateError(f"Forbidden: {url}")
                response.raise_for_status()

                # Bot detection serves an HTML page instead of JSON
                content_type = response.headers.get("Content-Type", "")
                if "json" not in content_type and "text/html" in content_type:
                    if attempt < self._rate_limiter.max_retries:
                        backoff = self._rate_limiter.get_backoff_time(attempt)
                        logger.warning(f"Received HTML instead of JSON. Waiting {backoff}s...")
                        time.sleep(backoff)
                        continue
                    raise RedditFetchError("Reddit returned HTML instead of JSON")

                try:
                    return response.json()
                except ValueError as e:
                    raise RedditFetchError(f"Response is not valid JSON: {e}")

            except requests.RequestException as e:
                last_error = e
                if attempt < self._rate_limiter.max_retries:
                    backoff = self._rate_limiter.get_backoff_time(attempt)
                    logger.warning(f"Request failed: {e}. Retrying in {backoff}s")
                    time.sleep(backoff)
                    continue

        raise RedditFetchError(f"Failed to fetch data: {last_error}")

    @staticmethod
    def _mock_listing(subreddit: str) -> dict:
        """Return a fake listing response for mock mode (no network)."""
        return {
            "kind": KIND_LISTING,
            "data": {
                "after": "t3_mock_4",
                "before": None,
                "children": [
                    {
                        "kind": KIND_POST,
                        "data": {
                            "id": f"mock_{i}",
                            "name": f"t3_mock_{i}",
                            "title": f"[Mock] Sample post {i + 1} in r/{subreddit}",
                            "selftext": f"This is mock post body #{i + 1}.",
                            "author": f"mock_user_{i}",
                            "subreddit": subreddit,
                            "score": (i + 1) * 100,
                            "num_comments": 3,
                            "permalink": f"/r/{subreddit}/comments/mock_{i}/sample_post/",
                            "created_utc": 1700000000.0 + i * 3600,
                            "is_self": True,
                        },
                    }
                    for i in range(5)
                ],
            },
        }

    @staticmethod
    def _mock_post_and_comments(post_id: str, subreddit: str) -> list:
        """Return a fake comments page: a post, a nested reply and a placeholder."""
        post_name = f"t3_{post_id}"

        def comment(comment_id, parent_id, body, replies=""):
            return {
                "kind": KIND_COMMENT,
                "data": {
                    "id": comment_id,
                    "name": f"t1_{comment_id}",
                    "parent_id": parent_id,
                    "link_id": post_name,
                    "author": f"commenter_{comment_id}",
                    "body": body,
                    "score": 10,
                    "likes": None,
                    "created_utc": 1700000000.0,
                    "subreddit": subreddit,
                    "replies": replies,
                },
            }

        reply_listing = {
            "kind": KIND_LISTING,
            "data": {
                "children": [comment("mock_c2", "t1_mock_c1", "This is a reply to the first comment.")],
                "after": None,
                "before": None,
            },
        }
        return [
            {
                "kind": KIND_LISTING,
                "data": {
                    "children": [{
                        "kind": KIND_POST,
                        "data": {
                            "id": post_id,
                            "name": post_name,
                            "title": f"[Mock] Post {post_id}",
                            "subreddit": subreddit,
                            "num_comments": 5,
                        },
                    }],
                    "after": None,
                    "before": None,
                },
            },
            {
                "kind": KIND_LISTING,
                "data": {
                    "children": [
                        comment("mock_c1", post_name, "This is a top-level mock comment.", reply_listing),
                        comment("mock_c3", post_name, "Another top-level comment."),
                        {
                            "kind": KIND_MORE,
                            "data": {
                                "id": "mock_m1",
                                "name": "t1_mock_m1",
                                "parent_id": post_name,
                                "count": 2,
                                "depth": 0,
                                "children": ["mock_c4", "mock_c5"],
                            },
                        },
                    ],
                    "after": None,
                    "before": None,
                },
            },
        ]
