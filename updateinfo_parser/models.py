"""Data models for updateinfo advisories."""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional
from urllib.parse import urlsplit

from dateutil import tz

from .errors import MalformedTimestamp, MalformedURL

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_DECIMAL = re.compile(r"[+-]?[0-9]+")
_DIGITS = re.compile(r"[0-9]*")


def parse_timestamp(value: str) -> datetime:
    """
    Parse a decimal epoch-seconds string into an aware UTC datetime.

    Only ASCII digits with an optional sign are accepted. Timestamps outside
    the years 1-9999 supported by ``datetime`` raise MalformedTimestamp even
    though they fit in 64 bits.
    """
    if not isinstance(value, str) or not _DECIMAL.fullmatch(value):
        raise MalformedTimestamp(f"invalid epoch timestamp '{value}': not a decimal integer")
    try:
        return datetime.fromtimestamp(int(value), tz=tz.UTC)
    except (OverflowError, OSError, ValueError) as e:
        raise MalformedTimestamp(f"epoch timestamp '{value}' out of range: {e}") from e


def _port(netloc: str) -> str:
    host = netloc.rpartition("@")[2]
    if host.endswith("]") or ":" not in host:
        return ""
    return host.rpartition(":")[2]


def parse_href(value: str) -> str:
    """
    Validate a reference URL.

    The value is returned verbatim; only its syntax is checked. The query is
    kept raw, so percent escapes are only checked in the other components.
    """
    if _CONTROL_CHARS.search(value):
        raise MalformedURL(f"invalid control character in URL '{value!r}'")
    try:
        parts = urlsplit(value)
    except ValueError as e:
        raise MalformedURL(f"invalid URL '{value}': {e}") from e
    for component in (parts.netloc, parts.path, parts.fragment):
        if _BAD_ESCAPE.search(component):
            raise MalformedURL(f"invalid percent escape in URL '{value}'")
    if not _DIGITS.fullmatch(_port(parts.netloc)):
        raise MalformedURL(f"invalid port in URL '{value}'")
    return value


@dataclass
class Package:
    """A package touched by an advisory."""

    name: str = ""
    version: str = ""
    release: str = ""
    arch: str = ""
    filename: str = ""


@dataclass
class Reference:
    """A cross-link from an advisory to a bug or CVE tracker."""

    url: str = ""
    id: str = ""
    title: str = ""
    type: str = ""


@dataclass
class Update:
    """Represents one <update> record of an updateinfo feed."""

    id: str = ""
    kind: str = ""  # "security" | "recommended" | "optional" | ...
    status: str = ""
    title: str = ""
    description: str = ""
    severity: str = ""
    release: str = ""
    issued: Optional[datetime] = None
    references: List[Reference] = field(default_factory=list)
    packages: List[Package] = field(default_factory=list)

    @property
    def issued_date(self) -> Optional[date]:
        if self.issued is None:
            return None
        return self.issued.date()

    @property
    def package_names(self) -> List[str]:
        return [pkg.name for pkg in self.packages]
