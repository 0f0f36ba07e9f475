"""Abstract base class for Reddit data access."""

from abc import ABC, abstractmethod
from typing import Optional

from src.core.types import Listing, PostAndComments


class RedditAdapter(ABC):
    """Abstract interface for fetching and decoding Reddit responses."""

    @abstractmethod
    def get_subreddit_listing(
        self,
        subreddit: str,
        sort: str = "hot",
        limit: int = 25,
        time_filter: Optional[str] = None,
        after: Optional[str] = None,
    ) -> Listing:
        """Fetch one page of a subreddit's posts.

        Args:
            subreddit: Subreddit name (without r/ prefix)
            sort: Sort method - "hot", "new", "top", "rising"
            limit: Number of posts (1-100)
            time_filter: Time filter for "top" sort - "hour", "day", "week", "month", "year", "all"
            after: Anchor of the previous page (Listing.after), if any

        Returns:
            Listing with its posts and next/previous page anchors

        Raises:
            RedditFetchError: General fetch failure
            RateLimitError: 429 Too Many Requests
            SubredditNotFoundError: 404 Not Found
            SubredditPrivateError: 403 Forbidden
            DecodeError: Response is not a listing
        """
        ...

    @abstractmethod
    def get_post_and_comments(
        self,
        post_id: str,
        subreddit: str,
        sort: str = "top",
        limit: int = 50,
    ) -> PostAndComments:
        """Fetch a post with its comment tree.

        Args:
            post_id: Reddit post ID (e.g., "8xwlg")
            subreddit: Subreddit name
            sort: Comment sort - "best", "top", "new", "controversial"
            limit: Number of comments

        Returns:
            PostAndComments (comments carry their nested replies)

        Raises:
            RedditFetchError: General fetch failure
            RateLimitError: 429 Too Many Requests
            DecodeError: Response is not a pair of listings with a post
        """
        ...
