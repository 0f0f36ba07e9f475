"""thingtree command line entry point."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Union

from src.core.config_manager import ConfigManager
from src.core.exceptions import ThingTreeError
from src.core.logger import setup_logger
from src.core.things import decode_listing, parse_json
from src.core.tree import decode_post_and_comments
from src.core.types import Comment, Listing, More, PostAndComments
from src.adapters.public_json_adapter import PublicJSONAdapter
from src.services.thread_service import ThreadService

logger = logging.getLogger("thingtree")

_BODY_PREVIEW = 80


def render_thread(thread: PostAndComments) -> list[str]:
    """Render a post and its comment tree as indented lines."""
    post = thread.post
    lines = [f"{post.title or post.full_id} ({post.score} points, {post.number_of_comments} comments)"]

    # "more" markers go on the stack too, so they print after the replies
    stack: list[tuple[int, Union[Comment, More]]] = []
    if thread.has_more():
        stack.append((0, thread.more))
    stack.extend((0, comment) for comment in reversed(thread.comments))

    while stack:
        depth, item = stack.pop()
        indent = "  " * (depth + 1)
        if isinstance(item, More):
            lines.append(f"{indent}[+{item.count} more]")
            continue

        body = " ".join(item.body.split())
        if len(body) > _BODY_PREVIEW:
            body = body[:_BODY_PREVIEW - 3] + "..."
        lines.append(f"{indent}{item.author or '[deleted]'} ({item.score}): {body}")

        if item.has_more():
            stack.append((depth + 1, item.more))
        stack.extend((depth + 1, child) for child in reversed(item.children))

    return lines


def render_listing(listing: Listing) -> list[str]:
    """Summarize a listing page: bucket sizes and page anchors."""
    lines = [f"{post.full_id}: {post.title}" for post in listing.posts]
    counts = {
        "posts": len(listing.posts),
        "comments": len(listing.comments),
        "mores": len(listing.mores),
        "subreddits": len(listing.subreddits),
        "users": len(listing.users),
        "mod_actions": len(listing.mod_actions),
    }
    lines.append(", ".join(f"{name}={n}" for name, n in counts.items()))
    lines.append(f"after={listing.after or '-'} before={listing.before or '-'}")
    return lines


def _decode_file(path: Path) -> list[str]:
    data = parse_json(path.read_bytes())
    # A comments page is an array of 2 listings, anything else must be a single listing
    if isinstance(data, list):
        return render_thread(decode_post_and_comments(data))
    return render_listing(decode_listing(data))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="thingtree",
        description="Decode Reddit listings and rebuild comment trees.",
    )
    parser.add_argument("file", nargs="?", type=Path,
                        help="Saved JSON response (listing or comments page)")
    parser.add_argument("--post", help="Post ID to fetch (e.g. 8xwlg)")
    parser.add_argument("--subreddit", help="Subreddit of the post, or to list")
    parser.add_argument("--sort", default=None, help="Sort order")
    parser.add_argument("--limit", type=int, default=None, help="Number of items")
    parser.add_argument("--config", type=Path, default=None,
                        help="Settings file (default: config/settings.yaml)")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point.

    Startup sequence:
    1. ConfigManager init (loads or creates settings.yaml, or --config)
    2. Logger init (reads log_level from config)
    3. Decode a saved file, or build adapter + service and fetch
    """
    args = build_parser().parse_args(argv)

    config = ConfigManager(args.config)
    setup_logger(
        log_level=config.get("app.log_level", "INFO"),
        mask_logs=config.get("security.mask_logs", True),
    )

    try:
        if args.file is not None:
            lines = _decode_file(args.file)
        elif args.subreddit:
            adapter = PublicJSONAdapter(
                request_interval_sec=config.get("reddit.request_interval_sec", 6),
                max_retries=config.get("reddit.max_retries", 3),
                mock_mode=config.get("reddit.mock_mode", False),
            )
            service = ThreadService(adapter, strict_attach=config.get("tree.strict_attach", False))
            if args.post:
                lines = render_thread(service.fetch_thread(
                    args.post, args.subreddit, args.sort or "top", args.limit or 50,
                ))
            else:
                lines = render_listing(service.fetch_listing(
                    args.subreddit, args.sort or "hot", args.limit or 25,
                ))
        else:
            build_parser().print_usage(sys.stderr)
            return 2
    except (ThingTreeError, OSError) as e:
        logger.error(f"thingtree failed: {e}")
        return 1

    print("\n".join(lines))
    return 0


if __name__ == "__main__":
    sys.exit(main())
