"""Streaming decode, filter and render pipeline."""

import logging
from dataclasses import dataclass
from typing import TextIO

from jinja2 import Template

from .fetchers.updateinfo import iter_updates, open_feed
from .filters import FilterConfig, filter_reason
from .render import render_update

logger = logging.getLogger(__name__)


@dataclass
class ParseStats:
    """Counters for one pipeline run."""

    seen: int = 0
    kept: int = 0

    @property
    def skipped(self) -> int:
        return self.seen - self.kept


def run(source: str, config: FilterConfig, template: Template, sink: TextIO) -> ParseStats:
    """
    Render every update of the feed that passes the filters.

    The feed is read in a single forward pass; each update is decoded,
    filtered and rendered before the next one is read. The first decode or
    render error aborts the run, and output already written is kept.

    Args:
        source: Path or URL of the updateinfo feed
        config: Filter criteria for this run
        template: Compiled output template
        sink: Text stream receiving the rendered updates

    Returns:
        ParseStats for the run
    """
    stats = ParseStats()
    logger.debug(f"Parsing updateinfo from {source}")

    with open_feed(source) as stream:
        for update in iter_updates(stream):
            stats.seen += 1
            keep, reason = filter_reason(update, config)
            if not keep:
                logger.debug(f"Skipping {update.id}: {reason}")
                continue

            logger.debug(f"Rendering {update.id}: {reason}")
            render_update(update, sink, template)
            stats.kept += 1

    logger.info(f"Rendered {stats.kept} of {stats.seen} updates from {source}")
    return stats
