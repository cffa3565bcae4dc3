"""Shared pytest fixtures for updateinfo parser tests."""

import sys
from datetime import date, datetime
from pathlib import Path

import pytest
from dateutil import tz

sys.path.insert(0, str(Path(__file__).parent))

from updateinfo_parser.filters import FilterConfig
from updateinfo_parser.models import Package, Reference, Update

# 2023-06-01 00:00:00 UTC
JUNE_FIRST = 1685577600

KERNEL_UPDATE = """\
  <update from="maint-coord@suse.de" status="stable" type="security" version="1">
    <id>SUSE-2023-2301</id>
    <title>Security update for the Linux Kernel</title>
    <severity>important</severity>
    <release>SUSE Updates</release>
    <issued date="{date}"/>
    <references>
      <reference href="https://www.suse.com/security/cve/CVE-2023-1380/" id="CVE-2023-1380" title="CVE-2023-1380" type="cve"/>
      <reference href="https://bugzilla.suse.com/1209892" id="1209892" title="kernel: slab-out-of-bounds read" type="bugzilla"/>
    </references>
    <description>The kernel was updated to receive security fixes.</description>
    <pkglist>
      <collection>
        <package name="kernel" epoch="0" version="5.14.21" release="150400.24.66.1" arch="x86_64" src="">
          <filename>kernel-5.14.21-150400.24.66.1.x86_64.rpm</filename>
        </package>
        <package name="kernel-devel" epoch="0" version="5.14.21" release="150400.24.66.1" arch="noarch" src="">
          <filename>kernel-devel-5.14.21-150400.24.66.1.noarch.rpm</filename>
        </package>
      </collection>
    </pkglist>
  </update>
"""

GLIBC_UPDATE = """\
  <update status="stable" type="recommended">
    <id>SUSE-2023-2400</id>
    <title>Recommended update for glibc</title>
    <severity>moderate</severity>
    <release>SUSE Updates</release>
    <issued date="{date}"/>
    <description>Fixes a locale issue.</description>
    <pkglist>
      <collection>
        <package name="glibc" version="2.31" release="150300.52.2" arch="x86_64">
          <filename>glibc-2.31-150300.52.2.x86_64.rpm</filename>
        </package>
      </collection>
    </pkglist>
  </update>
"""


def make_feed(*updates: str) -> str:
    """Wrap update snippets into an updateinfo document."""
    return '<?xml version="1.0" encoding="UTF-8"?>\n<updates>\n' + "".join(updates) + "</updates>\n"


def utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=tz.UTC)


@pytest.fixture
def write_feed(tmp_path):
    """Write update snippets to a feed file and return its path."""

    def _write(*updates: str, name: str = "updateinfo.xml") -> str:
        path = tmp_path / name
        path.write_text(make_feed(*updates), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def sample_update():
    """A security update issued on 2023-06-01 touching the kernel."""
    return Update(
        id="SUSE-2023-2301",
        kind="security",
        status="stable",
        title="Security update for the Linux Kernel",
        description="The kernel was updated to receive security fixes.",
        severity="important",
        release="SUSE Updates",
        issued=utc(2023, 6, 1),
        references=[
            Reference(
                url="https://www.suse.com/security/cve/CVE-2023-1380/",
                id="CVE-2023-1380",
                title="CVE-2023-1380",
                type="cve",
            ),
            Reference(
                url="https://bugzilla.suse.com/1209892",
                id="1209892",
                title="kernel: slab-out-of-bounds read",
                type="bugzilla",
            ),
        ],
        packages=[
            Package(name="kernel", version="5.14.21", release="150400.24.66.1", arch="x86_64"),
        ],
    )


@pytest.fixture
def year_2023():
    """Filter window covering 2023 with no type or package restriction."""
    return FilterConfig(before_date=date(2023, 12, 31), after_date=date(2023, 1, 1))
