"""Custom exception hierarchy for thingtree."""


class ThingTreeError(Exception):
    """Base exception for all thingtree errors."""

    def __init__(self, message: str = "An error occurred in thingtree"):
        self.message = message
        super().__init__(self.message)


class NetworkError(ThingTreeError):
    """Base exception for network-related errors."""

    def __init__(self, message: str = "A network error occurred"):
        super().__init__(message)


class RedditFetchError(NetworkError):
    """Error fetching data from Reddit."""

    def __init__(self, message: str = "Failed to fetch data from Reddit"):
        super().__init__(message)


class RateLimitError(NetworkError):
    """HTTP 429 - Rate limit exceeded."""

    def __init__(self, message: str = "Reddit API rate limit exceeded"):
        super().__init__(message)


class SubredditNotFoundError(NetworkError):
    """HTTP 404 - Subreddit or post does not exist."""

    def __init__(self, message: str = "Subreddit not found"):
        super().__init__(message)


class SubredditPrivateError(NetworkError):
    """HTTP 403 - Subreddit is private or restricted."""

    def __init__(self, message: str = "Subreddit is private or restricted"):
        super().__init__(message)


class DataError(ThingTreeError):
    """Base exception for data-related errors."""

    def __init__(self, message: str = "A data error occurred"):
        super().__init__(message)


class DecodeError(DataError):
    """Wire data does not have the shape required to decode it."""

    def __init__(self, message: str = "Failed to decode Reddit data"):
        super().__init__(message)


class TreeAttachError(DataError):
    """No parent for a comment or placeholder was found in the tree."""

    def __init__(self, message: str = "Parent not found in comment tree"):
        super().__init__(message)


class ConfigError(DataError):
    """Configuration is invalid or missing."""

    def __init__(self, message: str = "Configuration error"):
        super().__init__(message)
