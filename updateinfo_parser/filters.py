"""Filtering logic for updateinfo records."""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import FrozenSet, Iterable, Tuple

from dateutil import tz

from .models import Update

logger = logging.getLogger(__name__)


def _unique(names: Iterable[str]) -> Tuple[str, ...]:
    seen = {}
    for name in names:
        seen.setdefault(name, None)
    return tuple(seen)


@dataclass(frozen=True)
class FilterConfig:
    """Read-only selection criteria shared by every record of a run."""

    before_date: date
    after_date: date
    kind: str = ""
    package_whitelist: Tuple[str, ...] = ()
    _whitelist_set: FrozenSet[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        """Deduplicate the whitelist and build its lookup set."""
        whitelist = _unique(self.package_whitelist)
        object.__setattr__(self, "package_whitelist", whitelist)
        object.__setattr__(self, "_whitelist_set", frozenset(whitelist))

    @property
    def before(self) -> datetime:
        return datetime.combine(self.before_date, time.min, tzinfo=tz.UTC)

    @property
    def after(self) -> datetime:
        return datetime.combine(self.after_date, time.min, tzinfo=tz.UTC)

    def whitelisted(self, name: str) -> bool:
        return name in self._whitelist_set


def filter_reason(update: Update, config: FilterConfig) -> Tuple[bool, str]:
    """
    Decide whether an update is selected by the filter configuration.

    The issue date must fall strictly between ``after_date`` and
    ``before_date``; records issued exactly on a boundary are dropped.

    Returns:
        Tuple of (keep: bool, reason: str)
    """
    if config.kind and update.kind != config.kind:
        return False, f"Type '{update.kind}' does not match '{config.kind}'"

    if update.issued is None:
        return False, "No issued date"

    if not update.issued < config.before:
        return False, f"Issued {update.issued} is not before {config.before_date}"
    if not update.issued > config.after:
        return False, f"Issued {update.issued} is not after {config.after_date}"

    if config.package_whitelist:
        for pkg in update.packages:
            if config.whitelisted(pkg.name):
                return True, f"Package match: {pkg.name}"
        return False, "No whitelisted package"

    return True, "Matched date window"


def should_keep(update: Update, config: FilterConfig) -> bool:
    """Determine if an update should be rendered."""
    keep, _ = filter_reason(update, config)
    return keep
