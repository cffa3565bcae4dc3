"""Streaming decoder for updateinfo XML feeds."""

import gzip
import logging
import xml.etree.ElementTree as ET
from contextlib import contextmanager
from typing import BinaryIO, Iterator, List, Optional

import requests

from ..errors import DecodeFailure, InputUnavailable, MalformedTimestamp, MalformedURL
from ..models import Package, Reference, Update, parse_href, parse_timestamp

logger = logging.getLogger(__name__)

UPDATE_TAG = "update"


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def local_name(tag: str) -> str:
    """Strip any '{namespace}' prefix from an element tag."""
    return tag.rpartition("}")[2]


@contextmanager
def open_feed(source: str, timeout: int = 30) -> Iterator[BinaryIO]:
    """
    Open an updateinfo feed as a binary stream.

    Args:
        source: Local path (optionally gzip-compressed) or http(s) URL
        timeout: Request timeout in seconds for remote feeds

    Raises:
        InputUnavailable: If the feed cannot be opened or fetched
    """
    if is_url(source):
        logger.debug(f"Fetching updateinfo feed from {source}")
        try:
            response = requests.get(source, stream=True, timeout=timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise InputUnavailable(f"failed fetching updateinfo '{source}': {e}") from e
        response.raw.decode_content = True
        stream = response.raw
        if source.endswith(".gz"):
            stream = gzip.GzipFile(fileobj=response.raw)
        try:
            yield stream
        finally:
            stream.close()
            response.close()
        return

    try:
        if source.endswith(".gz"):
            stream = gzip.open(source, "rb")
        else:
            stream = open(source, "rb")
    except OSError as e:
        raise InputUnavailable(f"could not open updateinfo file '{source}': {e}") from e

    with stream:
        yield stream


def _text(elem: ET.Element) -> str:
    return "".join(elem.itertext())


def _children(elem: ET.Element, name: str) -> List[ET.Element]:
    return [child for child in elem if local_name(child.tag) == name]


def _parse_reference(elem: ET.Element) -> Reference:
    href = elem.get("href")
    return Reference(
        url=parse_href(href) if href is not None else "",
        id=elem.get("id", ""),
        title=elem.get("title", ""),
        type=elem.get("type", ""),
    )


def _parse_package(elem: ET.Element) -> Package:
    pkg = Package(
        name=elem.get("name", ""),
        version=elem.get("version", ""),
        release=elem.get("release", ""),
        arch=elem.get("arch", ""),
    )
    for filename in _children(elem, "filename"):
        pkg.filename = _text(filename)
    return pkg


def parse_update_element(elem: ET.Element) -> Update:
    """
    Materialize an <update> element into an Update.

    Raises:
        MalformedTimestamp: If the issued date is not an epoch timestamp
        MalformedURL: If a reference href cannot be parsed
    """
    update = Update(kind=elem.get("type", ""), status=elem.get("status", ""))

    for child in elem:
        name = local_name(child.tag)
        if name in ("id", "title", "description", "severity", "release"):
            setattr(update, name, _text(child))
        elif name == "issued":
            date_attr = child.get("date")
            if date_attr is not None:
                update.issued = parse_timestamp(date_attr)
        elif name == "references":
            for ref in _children(child, "reference"):
                update.references.append(_parse_reference(ref))
        elif name == "pkglist":
            for collection in _children(child, "collection"):
                for pkg in _children(collection, "package"):
                    update.packages.append(_parse_package(pkg))

    return update


def iter_updates(stream: BinaryIO) -> Iterator[Update]:
    """
    Yield one Update per outermost <update> element of the stream.

    Elements are dropped from the tree as soon as they are closed, so only
    the update being decoded is held in memory.

    Raises:
        DecodeFailure: On XML syntax errors or malformed record fields
    """
    # Open elements; the first entry is the document root
    stack: List[ET.Element] = []
    update_depth: Optional[int] = None

    try:
        for event, elem in ET.iterparse(stream, events=("start", "end")):
            if event == "start":
                if update_depth is None and local_name(elem.tag) == UPDATE_TAG:
                    update_depth = len(stack)
                stack.append(elem)
                continue

            stack.pop()
            if update_depth is not None and len(stack) > update_depth:
                # Inside an update subtree, keep it for materialization
                continue

            if update_depth is not None:
                update_depth = None
                try:
                    update = parse_update_element(elem)
                except (MalformedTimestamp, MalformedURL) as e:
                    raise DecodeFailure(
                        f"decoding element '{UPDATE_TAG}': {e}", _update_id(elem)
                    ) from e
                _release(elem, stack)
                yield update
            else:
                _release(elem, stack)
    except ET.ParseError as e:
        raise DecodeFailure(f"decoding token: {e}") from e


def _release(elem: ET.Element, stack: List[ET.Element]):
    """Detach a closed element from its parent and free its subtree."""
    elem.clear()
    if stack:
        parent = stack[-1]
        parent.remove(elem)


def _update_id(elem: ET.Element) -> Optional[str]:
    for child in _children(elem, "id"):
        return _text(child)
    return None
