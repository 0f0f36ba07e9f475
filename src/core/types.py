"""Typed records decoded from Reddit things."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from src.core.fields import (
    as_bool,
    as_float,
    as_int,
    as_str,
    as_str_list,
    encode_record,
    timestamp,
    wire,
)


@dataclass
class More:
    """Placeholder for replies left out of a comment tree.

    The ``children`` full IDs are what a "load more comments" request needs.
    """

    id: str = wire("id", as_str, "")
    full_id: str = wire("name", as_str, "")
    parent_id: str = wire("parent_id", as_str, "")
    count: int = wire("count", as_int, 0)        # replies to the parent, recursively
    depth: int = wire("depth", as_int, 0)        # levels from the parent to the deepest hidden reply
    children: list[str] = wire("children", as_str_list, [])

    def to_dict(self) -> dict:
        return encode_record(self)


@dataclass
class Replies:
    """Direct replies to a comment plus at most one "more" placeholder."""

    comments: list['Comment'] = field(default_factory=list)
    more: Optional[More] = None

    def to_wire(self) -> Optional[list[dict]]:
        """Encode as null (no replies) or a bare list of comments.

        The placeholder is not written back.
        """
        if not self.comments:
            return None
        return [comment.to_dict() for comment in self.comments]


@dataclass
class Comment:
    """A comment posted by a user."""

    id: str = wire("id", as_str, "")
    full_id: str = wire("name", as_str, "")
    created: Optional[datetime] = timestamp("created_utc")
    edited: Optional[datetime] = timestamp("edited")

    parent_id: str = wire("parent_id", as_str, "")   # t1_* or t3_*
    permalink: str = wire("permalink", as_str, "")

    body: str = wire("body", as_str, "")
    author: str = wire("author", as_str, "")
    author_id: str = wire("author_fullname", as_str, "")
    author_flair_text: str = wire("author_flair_text", as_str, "")
    author_flair_id: str = wire("author_flair_template_id", as_str, "")

    subreddit_name: str = wire("subreddit", as_str, "")
    subreddit_name_prefixed: str = wire("subreddit_name_prefixed", as_str, "")
    subreddit_id: str = wire("subreddit_id", as_str, "")

    # True/False if you've upvoted/downvoted, None if neither
    likes: Optional[bool] = wire("likes", as_bool, None)

    score: int = wire("score", as_int, 0)
    controversiality: int = wire("controversiality", as_int, 0)

    post_id: str = wire("link_id", as_str, "")
    # These don't appear consistently
    post_title: str = wire("link_title", as_str, "")
    post_permalink: str = wire("link_permalink", as_str, "")
    post_author: str = wire("link_author", as_str, "")
    post_num_comments: Optional[int] = wire("num_comments", as_int, None)

    is_submitter: bool = wire("is_submitter", as_bool, False)
    score_hidden: bool = wire("score_hidden", as_bool, False)
    saved: bool = wire("saved", as_bool, False)
    stickied: bool = wire("stickied", as_bool, False)
    locked: bool = wire("locked", as_bool, False)
    can_gild: bool = wire("can_gild", as_bool, False)
    nsfw: bool = wire("over_18", as_bool, False)

    replies: Replies = field(default_factory=Replies)

    @property
    def children(self) -> list['Comment']:
        return self.replies.comments

    @property
    def more(self) -> Optional[More]:
        return self.replies.more

    @more.setter
    def more(self, value: Optional[More]) -> None:
        self.replies.more = value

    def has_more(self) -> bool:
        """Whether the reply tree has more comments left to load."""
        return self.replies.more is not None and len(self.replies.more.children) > 0

    def to_dict(self) -> dict:
        """Encode the comment and its reply tree (see ``Replies.to_wire``)."""
        root = encode_record(self)
        stack = [(self, root)]
        while stack:
            comment, data = stack.pop()
            data["replies"] = None
            if not comment.children:
                continue
            data["replies"] = []
            for child in comment.children:
                child_data = encode_record(child)
                data["replies"].append(child_data)
                stack.append((child, child_data))
        return root


@dataclass
class Post:
    """A submitted post."""

    id: str = wire("id", as_str, "")
    full_id: str = wire("name", as_str, "")
    created: Optional[datetime] = timestamp("created_utc")
    edited: Optional[datetime] = timestamp("edited")

    permalink: str = wire("permalink", as_str, "")
    url: str = wire("url", as_str, "")

    title: str = wire("title", as_str, "")
    body: str = wire("selftext", as_str, "")       # empty for link posts

    likes: Optional[bool] = wire("likes", as_bool, None)

    score: int = wire("score", as_int, 0)          # approximate (fuzzed by Reddit)
    upvote_ratio: float = wire("upvote_ratio", as_float, 0.0)
    number_of_comments: int = wire("num_comments", as_int, 0)

    subreddit_name: str = wire("subreddit", as_str, "")
    subreddit_name_prefixed: str = wire("subreddit_name_prefixed", as_str, "")
    subreddit_id: str = wire("subreddit_id", as_str, "")

    author: str = wire("author", as_str, "")
    author_id: str = wire("author_fullname", as_str, "")

    spoiler: bool = wire("spoiler", as_bool, False)
    locked: bool = wire("locked", as_bool, False)
    nsfw: bool = wire("over_18", as_bool, False)
    is_self_post: bool = wire("is_self", as_bool, False)
    saved: bool = wire("saved", as_bool, False)
    stickied: bool = wire("stickied", as_bool, False)

    def to_dict(self) -> dict:
        return encode_record(self)


@dataclass
class Subreddit:
    """Subreddit metadata."""

    id: str = wire("id", as_str, "")
    full_id: str = wire("name", as_str, "")
    created: Optional[datetime] = timestamp("created_utc")

    url: str = wire("url", as_str, "")
    name: str = wire("display_name", as_str, "")
    name_prefixed: str = wire("display_name_prefixed", as_str, "")
    title: str = wire("title", as_str, "")
    description: str = wire("public_description", as_str, "")
    type: str = wire("subreddit_type", as_str, "")
    suggested_comment_sort: str = wire("suggested_comment_sort", as_str, "")

    subscribers: int = wire("subscribers", as_int, 0)
    active_user_count: Optional[int] = wire("active_user_count", as_int, None)
    nsfw: bool = wire("over18", as_bool, False)
    user_is_mod: bool = wire("user_is_moderator", as_bool, False)
    subscribed: bool = wire("user_is_subscriber", as_bool, False)
    favorite: bool = wire("user_has_favorited", as_bool, False)

    def to_dict(self) -> dict:
        return encode_record(self)


@dataclass
class User:
    """Account metadata."""

    id: str = wire("id", as_str, "")
    name: str = wire("name", as_str, "")
    created: Optional[datetime] = timestamp("created_utc")

    post_karma: int = wire("link_karma", as_int, 0)
    comment_karma: int = wire("comment_karma", as_int, 0)

    is_friend: bool = wire("is_friend", as_bool, False)
    is_employee: bool = wire("is_employee", as_bool, False)
    has_verified_email: bool = wire("has_verified_email", as_bool, False)
    nsfw: bool = wire("over_18", as_bool, False)
    is_suspended: bool = wire("is_suspended", as_bool, False)

    def to_dict(self) -> dict:
        return encode_record(self)


@dataclass
class ModAction:
    """An entry of a subreddit's moderation log."""

    id: str = wire("id", as_str, "")
    action: str = wire("action", as_str, "")
    created: Optional[datetime] = timestamp("created_utc")

    moderator: str = wire("mod", as_str, "")
    moderator_id: str = wire("mod_id36", as_str, "")

    target_author: str = wire("target_author", as_str, "")
    target_id: str = wire("target_fullname", as_str, "")
    target_title: str = wire("target_title", as_str, "")
    target_permalink: str = wire("target_permalink", as_str, "")
    target_body: str = wire("target_body", as_str, "")

    subreddit_name: str = wire("subreddit", as_str, "")
    subreddit_id: str = wire("sr_id36", as_str, "")

    details: str = wire("details", as_str, "")
    description: str = wire("description", as_str, "")

    def to_dict(self) -> dict:
        return encode_record(self)


@dataclass
class UnknownThing:
    """A thing whose kind has no record type. Never classified."""

    kind: str
    data: Any = None


@dataclass
class Things:
    """Things of a listing, bucketed by record type in arrival order."""

    comments: list[Comment] = field(default_factory=list)
    mores: list[More] = field(default_factory=list)
    users: list[User] = field(default_factory=list)
    posts: list[Post] = field(default_factory=list)
    subreddits: list[Subreddit] = field(default_factory=list)
    mod_actions: list[ModAction] = field(default_factory=list)


@dataclass
class Listing(Things):
    """A page of things plus the anchors for the next/previous page.

    An empty anchor means there is no page in that direction.
    """

    after: str = ""
    before: str = ""


@dataclass
class PostAndComments:
    """A post and its comment tree."""

    post: Post
    comments: list[Comment] = field(default_factory=list)
    more: Optional[More] = None

    @property
    def full_id(self) -> str:
        return self.post.full_id

    @property
    def children(self) -> list[Comment]:
        return self.comments

    def has_more(self) -> bool:
        """Whether the post has more top-level comments left to load."""
        return self.more is not None and len(self.more.children) > 0

    def to_dict(self) -> dict:
        return {
            "post": self.post.to_dict(),
            "comments": [comment.to_dict() for comment in self.comments],
        }
