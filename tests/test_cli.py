"""Tests for command line parsing."""
import pytest
from src.main import main, parse_args


def test_parse_compare_args():
    """Compare options map onto the comparison parameters."""
    args = parse_args([
        "compare",
        "--service", "news",
        "--domain1", "s10-nacd1.dentons.com",
        "--domain2", "s10-pg.dentons.com",
        "--incremental",
        "--batch-size", "50",
        "--max-pages", "20",
    ])
    assert args.command == "compare"
    assert args.service == "news"
    assert args.incremental is True
    assert args.batch_size == 50
    assert args.max_pages == 20
    assert args.concurrency is None


def test_parse_events_args():
    args = parse_args(["events", "--type", "past"])
    assert args.event_type == "past"


def test_parse_rejects_unknown_service():
    with pytest.raises(SystemExit):
        parse_args(["compare", "--service", "events"])


def test_main_rejects_unknown_domain():
    """Servers outside the allow-list stop the CLI before any request."""
    with pytest.raises(SystemExit) as exc_info:
        main(["counts", "--domain", "evil.example.com"])
    assert exc_info.value.code == 2
