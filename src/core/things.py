"""Decoding of Reddit things and listings.

A thing is the wire envelope ``{"kind": ..., "data": ...}``. The kind tells
what ``data`` holds, e.g. t1 = comment, t2 = user, t3 = post. Decoding is
two-phase: the kind is looked up in ``DECODERS`` first, then the payload is
decoded into the matching record.
"""

import json
import logging
from typing import Any, Iterable, Optional, Union

from src.core.exceptions import DecodeError
from src.core.fields import decode_record
from src.core.types import (
    Comment,
    Listing,
    ModAction,
    More,
    Post,
    Replies,
    Subreddit,
    Things,
    UnknownThing,
    User,
)

logger = logging.getLogger("thingtree")

KIND_COMMENT = "t1"
KIND_ACCOUNT = "t2"
KIND_POST = "t3"
KIND_MESSAGE = "t4"
KIND_SUBREDDIT = "t5"
KIND_AWARD = "t6"
KIND_LISTING = "Listing"
KIND_KARMA_LIST = "KarmaList"
KIND_TROPHY_LIST = "TrophyList"
KIND_USER_LIST = "UserList"
KIND_MORE = "more"
KIND_MOD_ACTION = "modaction"

# Kinds Reddit sends that have no record type here
UNSUPPORTED_KINDS = (
    KIND_MESSAGE,
    KIND_AWARD,
    KIND_LISTING,
    KIND_KARMA_LIST,
    KIND_TROPHY_LIST,
    KIND_USER_LIST,
)


def parse_json(raw: Union[bytes, str, Any]) -> Any:
    """Parse raw response bytes/text. Already-parsed values pass through.

    Raises:
        DecodeError: raw is not valid JSON, or is nested too deeply to parse
    """
    if not isinstance(raw, (bytes, bytearray, str)):
        return raw
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(f"Invalid JSON: {e}") from e
    except RecursionError as e:
        raise DecodeError("Invalid JSON: nested too deeply") from e


# kind -> (bucket name on Things, record type)
DECODERS: dict[str, tuple[str, type]] = {
    KIND_COMMENT: ("comments", Comment),
    KIND_MORE: ("mores", More),
    KIND_ACCOUNT: ("users", User),
    KIND_POST: ("posts", Post),
    KIND_SUBREDDIT: ("subreddits", Subreddit),
    KIND_MOD_ACTION: ("mod_actions", ModAction),
}

# A decoded comment whose "replies" value is still raw JSON
Pending = tuple[Comment, Any]


def _sniff_kind(envelope: Any) -> str:
    if not isinstance(envelope, dict):
        raise DecodeError(f"thing must be an object, got {type(envelope).__name__}")
    kind = envelope.get("kind")
    if kind is None:
        return ""
    if not isinstance(kind, str):
        raise DecodeError(f"thing kind must be a string, got {kind!r}")
    return kind


def _classify_level(children: Any) -> tuple[Things, list[Pending]]:
    """Bucket one level of things. Comment replies are left undecoded."""
    things = Things()
    pending: list[Pending] = []
    if children is None:
        return things, pending
    if not isinstance(children, list):
        raise DecodeError(f"children must be an array, got {type(children).__name__}")

    for envelope in children:
        kind = _sniff_kind(envelope)
        entry = DECODERS.get(kind)
        if entry is None:
            if kind in UNSUPPORTED_KINDS:
                logger.debug(f"Skipping {kind} thing, it has no record type")
            else:
                logger.debug(f"Skipping thing of unknown kind {kind!r}")
            continue
        bucket, cls = entry
        data = envelope.get("data")
        try:
            record = decode_record(cls, data)
        except DecodeError as e:
            logger.debug(f"Skipping undecodable {kind} thing: {e.message}")
            continue
        getattr(things, bucket).append(record)
        if cls is Comment:
            pending.append((record, data.get("replies")))

    return things, pending


def _anchor(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(f"listing {key} must be a string, got {value!r}")
    return value


def _listing_level(value: Any) -> tuple[Listing, list[Pending]]:
    if not isinstance(value, dict):
        raise DecodeError(f"listing must be an object, got {type(value).__name__}")
    data = value.get("data")
    if not isinstance(data, dict):
        raise DecodeError("listing has no data object")

    things, pending = _classify_level(data.get("children"))
    listing = Listing(
        comments=things.comments,
        mores=things.mores,
        users=things.users,
        posts=things.posts,
        subreddits=things.subreddits,
        mod_actions=things.mod_actions,
        after=_anchor(data, "after"),
        before=_anchor(data, "before"),
    )
    return listing, pending


def _replies_level(value: Any) -> tuple[Replies, list[Pending]]:
    if value is None or value == "":
        return Replies(), []
    if not isinstance(value, dict):
        raise DecodeError(f"replies must be \"\" or a listing, got {value!r}")

    listing, pending = _listing_level(value)
    replies = Replies(
        comments=listing.comments,
        more=listing.mores[0] if listing.mores else None,
    )
    return replies, pending


def _decode_reply_trees(pending: list[Pending], siblings: Optional[list[Comment]]) -> None:
    """Decode the replies of ``pending`` comments, and theirs, down to the leaves.

    Uses an explicit stack, so reply depth is not bounded by the
    recursion limit. A comment whose replies do not decode is removed from
    its ``siblings``. With no siblings (a lone comment) the error is raised.
    """
    stack = [(comment, raw, siblings) for comment, raw in pending]
    while stack:
        comment, raw, parent_list = stack.pop()
        try:
            replies, nested = _replies_level(raw)
        except DecodeError as e:
            if parent_list is None:
                raise
            logger.debug(f"Skipping comment {comment.full_id} with undecodable replies: {e.message}")
            parent_list[:] = [c for c in parent_list if c is not comment]
            continue
        comment.replies = replies
        stack.extend((child, child_raw, replies.comments) for child, child_raw in nested)


def decode_replies(value: Any) -> Replies:
    """Decode the "replies" field of a comment.

    A comment without replies has its field set to "" (or null).

    Raises:
        DecodeError: value is neither "" nor a listing
    """
    replies, pending = _replies_level(value)
    _decode_reply_trees(pending, replies.comments)
    return replies


def decode_thing(envelope: Any):
    """Decode a single thing into its record, or UnknownThing.

    Raises:
        DecodeError: envelope is malformed, or the payload does not decode
            as the record its kind names
    """
    kind = _sniff_kind(envelope)
    entry = DECODERS.get(kind)
    if entry is None:
        return UnknownThing(kind=kind, data=envelope.get("data"))
    _, cls = entry
    data = envelope.get("data")
    record = decode_record(cls, data)
    if cls is Comment:
        _decode_reply_trees([(record, data.get("replies"))], None)
    return record


def classify(children: Optional[Iterable[Any]]) -> Things:
    """Decode things and bucket them by record type, keeping their order.

    Things of unsupported kinds and things whose payload fails to decode
    are skipped.

    Raises:
        DecodeError: children is not an array, or one of its elements is
            not a thing envelope at all
    """
    things, pending = _classify_level(children)
    _decode_reply_trees(pending, things.comments)
    return things


def decode_listing(value: Any) -> Listing:
    """Decode ``{"data": {"children": [...], "after": ..., "before": ...}}``.

    Raises:
        DecodeError: the outer shape is wrong
    """
    listing, pending = _listing_level(value)
    _decode_reply_trees(pending, listing.comments)
    return listing


def listing_from_json(raw: Union[bytes, str]) -> Listing:
    return decode_listing(parse_json(raw))
