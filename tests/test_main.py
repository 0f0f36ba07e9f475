"""Tests for the thingtree command line."""

import json

import pytest
from unittest.mock import MagicMock, patch

from src.core.tree import decode_post_and_comments
from src.main import main, render_listing, render_thread
from tests.wire import make_comment, make_listing, make_more, make_post, make_thing


COMMENTS_PAGE = [
    make_listing(make_post("abc", title="Hello", score=12, num_comments=4)),
    make_listing(
        make_comment("c1", "t3_abc", body="top", score=3, replies=make_listing(
            make_comment("c2", "t1_c1", body="reply", author="someone"),
            make_more("m1", "t1_c1", ["t1_c9"], count=7),
        )),
        make_more("m0", "t3_abc", ["t1_c5", "t1_c6"]),
    ),
]


@pytest.fixture
def quiet_startup():
    config = MagicMock()
    config.get.side_effect = lambda key, default=None: default
    with patch("src.main.ConfigManager", return_value=config), \
            patch("src.main.setup_logger"):
        yield config


class TestRender:
    def test_render_thread_indents_replies(self):
        lines = render_thread(decode_post_and_comments(COMMENTS_PAGE))
        assert lines == [
            "Hello (12 points, 4 comments)",
            "  commenter (3): top",
            "    someone (1): reply",
            "    [+7 more]",
            "  [+2 more]",
        ]

    def test_render_thread_truncates_long_bodies(self):
        page = [make_listing(make_post("abc")), make_listing(make_comment("c1", "t3_abc", body="x" * 200))]
        lines = render_thread(decode_post_and_comments(page))
        assert lines[1].endswith("...")
        assert len(lines[1]) < 120

    def test_render_listing_counts(self):
        from src.core.things import decode_listing
        listing = decode_listing(make_listing(
            make_post("p1", title="One"),
            make_thing("t5", display_name="python"),
            after="t3_p1",
        ))
        lines = render_listing(listing)
        assert lines[0] == "t3_p1: One"
        assert "posts=1" in lines[1] and "subreddits=1" in lines[1]
        assert lines[2] == "after=t3_p1 before=-"


class TestMain:
    def test_decodes_comments_page_file(self, tmp_dir, quiet_startup, capsys):
        path = tmp_dir / "page.json"
        path.write_text(json.dumps(COMMENTS_PAGE))

        assert main([str(path)]) == 0
        assert "Hello (12 points, 4 comments)" in capsys.readouterr().out

    def test_decodes_listing_file(self, tmp_dir, quiet_startup, capsys):
        path = tmp_dir / "listing.json"
        path.write_text(json.dumps(make_listing(make_post("p1", title="One"))))

        assert main([str(path)]) == 0
        assert "t3_p1: One" in capsys.readouterr().out

    def test_bad_file_returns_1(self, tmp_dir, quiet_startup):
        path = tmp_dir / "bad.json"
        path.write_text("[1, 2, 3]")
        assert main([str(path)]) == 1

    def test_missing_file_returns_1(self, tmp_dir, quiet_startup):
        assert main([str(tmp_dir / "nope.json")]) == 1

    def test_no_arguments_prints_usage(self, quiet_startup):
        assert main([]) == 2

    def test_fetches_thread_in_mock_mode(self, quiet_startup, capsys):
        quiet_startup.get.side_effect = (
            lambda key, default=None: True if key == "reddit.mock_mode" else default
        )
        assert main(["--post", "abc", "--subreddit", "python"]) == 0
        out = capsys.readouterr().out
        assert "[Mock] Post abc" in out
        assert "[+2 more]" in out

    def test_config_option_selects_settings_file(self, tmp_dir, capsys):
        settings = tmp_dir / "custom.yaml"
        settings.write_text("reddit:\n  mock_mode: true\napp:\n  log_level: WARNING\n")

        with patch("src.main.setup_logger") as setup:
            assert main(["--config", str(settings), "--subreddit", "python"]) == 0

        setup.assert_called_once_with(log_level="WARNING", mask_logs=True)
        assert "[Mock]" in capsys.readouterr().out
