"""Thread service: fetch, decode and grow comment trees."""

import logging
import threading
from contextlib import contextmanager
from typing import Optional

from src.adapters.reddit_adapter import RedditAdapter
from src.core.tree import attach_things, walk
from src.core.types import Listing, PostAndComments, Things

logger = logging.getLogger("thingtree")


class _TreeLock:
    """Merge lock of one tree and the number of merges using it."""

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class ThreadService:
    """Orchestrates Reddit fetches and comment tree assembly.

    Responsibilities:
    - Fetch subreddit listings and post comment pages via RedditAdapter
    - Merge later batches of comments/placeholders into an existing tree
    - Serialize merges against the same tree (one lock per tree)
    """

    def __init__(self, reddit: RedditAdapter, strict_attach: bool = False):
        self._reddit = reddit
        self._strict_attach = strict_attach
        self._locks: dict[str, _TreeLock] = {}
        self._locks_guard = threading.Lock()

    def fetch_listing(self, subreddit: str, sort: str = "hot", limit: int = 25,
                      time_filter: Optional[str] = None,
                      after: Optional[str] = None) -> Listing:
        """Fetch one page of posts. Pass ``listing.after`` to get the next one."""
        listing = self._reddit.get_subreddit_listing(subreddit, sort, limit, time_filter, after)
        logger.info(f"Fetched {len(listing.posts)} posts from r/{subreddit} ({sort})")
        return listing

    def fetch_thread(self, post_id: str, subreddit: str,
                     sort: str = "top", limit: int = 50) -> PostAndComments:
        """Fetch a post and its comment tree.

        Raises:
            RedditFetchError: General fetch failure
            RateLimitError: 429 Too Many Requests
            DecodeError: Response is not a post and comments page
        """
        thread = self._reddit.get_post_and_comments(post_id, subreddit, sort, limit)
        total = sum(1 for _ in walk(thread))
        logger.info(
            f"Fetched {total} comments for post {post_id} "
            f"(more pending: {thread.has_more()})"
        )
        return thread

    def merge(self, thread: PostAndComments, things: Things) -> int:
        """Attach a batch of comments and placeholders to ``thread``.

        Merges into the same thread run one at a time.

        Returns:
            Number of records attached

        Raises:
            TreeAttachError: a record has no parent in the tree and
                strict attach is enabled
        """
        with self._locked(thread.full_id):
            attached = attach_things(thread, things, strict=self._strict_attach)

        dropped = len(things.comments) + len(things.mores) - attached
        if dropped:
            logger.debug(f"Dropped {dropped} orphaned records while merging into {thread.full_id}")
        return attached

    @contextmanager
    def _locked(self, full_id: str):
        """Hold the lock of tree ``full_id``.

        The lock is dropped from ``_locks`` once no merge holds or waits on it.
        """
        with self._locks_guard:
            entry = self._locks.get(full_id)
            if entry is None:
                entry = self._locks[full_id] = _TreeLock()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[full_id]
