"""Builders for Reddit wire JSON used across tests."""


def make_thing(kind, **data):
    """Wrap a payload in a thing envelope."""
    return {"kind": kind, "data": data}


def make_listing(*children, after=None, before=None):
    """Create a Reddit listing envelope around the given things."""
    return {
        "kind": "Listing",
        "data": {"children": list(children), "after": after, "before": before},
    }


def make_comment(comment_id, parent_id, body="test comment", replies="", **extra):
    data = {
        "id": comment_id,
        "name": f"t1_{comment_id}",
        "parent_id": parent_id,
        "body": body,
        "author": "commenter",
        "score": 1,
        "replies": replies,
    }
    data.update(extra)
    return make_thing("t1", **data)


def make_more(more_id, parent_id, children=(), count=None, depth=0):
    return make_thing(
        "more",
        id=more_id,
        name=f"t1_{more_id}",
        parent_id=parent_id,
        count=len(children) if count is None else count,
        depth=depth,
        children=list(children),
    )


def make_post(post_id, title="Test Post", **extra):
    data = {"id": post_id, "name": f"t3_{post_id}", "title": title}
    data.update(extra)
    return make_thing("t3", **data)
