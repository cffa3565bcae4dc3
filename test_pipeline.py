"""End-to-end tests for the decode, filter and render pipeline."""

import gzip
import io
from datetime import date

import pytest

from conftest import GLIBC_UPDATE, JUNE_FIRST, KERNEL_UPDATE, make_feed
from updateinfo_parser.errors import DecodeFailure, InputUnavailable, MalformedTimestamp, RenderFailure
from updateinfo_parser.filters import FilterConfig
from updateinfo_parser.pipeline import run
from updateinfo_parser.render import _environment, default_template


def security_config(*packages: str) -> FilterConfig:
    return FilterConfig(
        before_date=date(2023, 12, 31),
        after_date=date(2023, 1, 1),
        kind="security",
        package_whitelist=packages,
    )


def test_renders_matching_update(write_feed):
    feed = write_feed(KERNEL_UPDATE.format(date=JUNE_FIRST))
    sink = io.StringIO()

    stats = run(feed, security_config("kernel"), default_template(), sink)

    assert "ID: SUSE-2023-2301" in sink.getvalue()
    assert (stats.seen, stats.kept, stats.skipped) == (1, 1, 0)


def test_non_matching_whitelist_renders_nothing(write_feed):
    feed = write_feed(KERNEL_UPDATE.format(date=JUNE_FIRST))
    sink = io.StringIO()

    stats = run(feed, security_config("glibc"), default_template(), sink)

    assert sink.getvalue() == ""
    assert (stats.seen, stats.kept) == (1, 0)


def test_only_matching_updates_are_rendered_in_order(write_feed):
    feed = write_feed(
        KERNEL_UPDATE.format(date=JUNE_FIRST),
        GLIBC_UPDATE.format(date=JUNE_FIRST),
        KERNEL_UPDATE.format(date=JUNE_FIRST + 86400).replace("SUSE-2023-2301", "SUSE-2023-2302"),
    )
    template = _environment().from_string("{{ id }}\n")
    sink = io.StringIO()

    run(feed, security_config(), template, sink)

    assert sink.getvalue() == "SUSE-2023-2301\nSUSE-2023-2302\n"


def test_malformed_date_aborts_without_output(write_feed):
    feed = write_feed(
        KERNEL_UPDATE.format(date="not-a-date"),
        KERNEL_UPDATE.format(date=JUNE_FIRST),
    )
    sink = io.StringIO()

    with pytest.raises(DecodeFailure) as exc_info:
        run(feed, security_config(), default_template(), sink)

    assert isinstance(exc_info.value.__cause__, MalformedTimestamp)
    assert sink.getvalue() == ""


def test_output_before_failure_is_kept(write_feed):
    feed = write_feed(
        KERNEL_UPDATE.format(date=JUNE_FIRST),
        KERNEL_UPDATE.format(date="not-a-date"),
    )
    sink = io.StringIO()

    with pytest.raises(DecodeFailure):
        run(feed, security_config(), default_template(), sink)

    assert sink.getvalue().count("ID: SUSE-2023-2301") == 1


def test_render_failure_aborts_run(write_feed):
    feed = write_feed(KERNEL_UPDATE.format(date=JUNE_FIRST), KERNEL_UPDATE.format(date=JUNE_FIRST))
    template = _environment().from_string("{{ id }}:{{ missing }}\n")
    sink = io.StringIO()

    with pytest.raises(RenderFailure):
        run(feed, security_config(), template, sink)

    # The second update is never reached
    assert sink.getvalue().count("SUSE-2023-2301") <= 1


def test_gzip_feed(tmp_path):
    path = tmp_path / "updateinfo.xml.gz"
    with gzip.open(path, "wt", encoding="utf-8") as f:
        f.write(make_feed(KERNEL_UPDATE.format(date=JUNE_FIRST)))

    stats = run(str(path), security_config("kernel"), default_template(), io.StringIO())
    assert stats.kept == 1


def test_missing_input(tmp_path):
    with pytest.raises(InputUnavailable):
        run(str(tmp_path / "nope.xml"), security_config(), default_template(), io.StringIO())
