"""Comment tree reconstruction.

Parent/child links on the wire are only full IDs (``parent_id`` of a
comment or "more" placeholder equals the ``name`` of a comment or post).
The functions here find the parent in an already-built tree and hang the
new node under it. Roots are either a Comment or a PostAndComments.

Traversal is iterative so arbitrarily deep threads never hit the
recursion limit.
"""

from typing import Any, Iterator, Union

from src.core.exceptions import DecodeError, TreeAttachError
from src.core.things import decode_listing, parse_json
from src.core.types import Comment, More, PostAndComments, Things

Root = Union[Comment, PostAndComments]


def _find_parents(root: Root, parent_id: str) -> Iterator[Root]:
    """Yield every node whose full ID is ``parent_id``, depth-first.

    The subtree of a matched node is not searched.
    """
    stack = [root]
    while stack:
        node = stack.pop()
        if node.full_id == parent_id:
            yield node
            continue
        stack.extend(reversed(node.children))


def attach_comment(root: Root, comment: Comment, strict: bool = False) -> bool:
    """Append ``comment`` to the replies of its parent inside ``root``.

    Comments arrive parents first, so the parent is expected to be in the
    tree already. If it isn't, the comment is dropped.

    Returns:
        True if the comment was attached

    Raises:
        TreeAttachError: no parent was found and ``strict`` is set
    """
    parents = list(_find_parents(root, comment.parent_id))
    for parent in parents:
        parent.children.append(comment)

    if not parents and strict:
        raise TreeAttachError(
            f"No parent {comment.parent_id!r} for comment {comment.full_id!r}"
        )
    return bool(parents)


def attach_more(root: Root, more: More, strict: bool = False) -> bool:
    """Set ``more`` as the placeholder of its parent inside ``root``.

    A placeholder already on the parent is replaced.

    Raises:
        TreeAttachError: no parent was found and ``strict`` is set
    """
    parents = list(_find_parents(root, more.parent_id))
    for parent in parents:
        parent.more = more

    if not parents and strict:
        raise TreeAttachError(
            f"No parent {more.parent_id!r} for placeholder {more.full_id!r}"
        )
    return bool(parents)


def attach_things(root: Root, things: Things, strict: bool = False) -> int:
    """Attach all comments, then all placeholders, of ``things``.

    Returns:
        Number of records attached
    """
    attached = 0
    for comment in things.comments:
        attached += attach_comment(root, comment, strict)
    for more in things.mores:
        attached += attach_more(root, more, strict)
    return attached


def walk(root: Root) -> Iterator[tuple[int, Comment]]:
    """Yield ``(depth, comment)`` for every comment under ``root``, pre-order.

    Direct children of the root have depth 0.
    """
    stack = [(0, child) for child in reversed(root.children)]
    while stack:
        depth, comment = stack.pop()
        yield depth, comment
        stack.extend((depth + 1, child) for child in reversed(comment.children))


def decode_post_and_comments(value: Any) -> PostAndComments:
    """Decode the response of a post's comments page.

    It is an array of 2 listings: the 1st one holds the single post, the
    2nd one holds the top-level comments and maybe a "more" placeholder.

    Raises:
        DecodeError: not a pair of listings, or the 1st one has no post
    """
    if not isinstance(value, list) or len(value) != 2:
        raise DecodeError("post and comments must be an array of 2 listings")

    post_listing = decode_listing(value[0])
    comment_listing = decode_listing(value[1])
    if not post_listing.posts:
        raise DecodeError("post and comments response has no post")

    return PostAndComments(
        post=post_listing.posts[0],
        comments=comment_listing.comments,
        more=comment_listing.mores[0] if comment_listing.mores else None,
    )


def post_and_comments_from_json(raw) -> PostAndComments:
    return decode_post_and_comments(parse_json(raw))
