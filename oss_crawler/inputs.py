"""
Input keys for crawl commands.

Keys come either from standard input, one per line, or from the command line.
"""

import sys
from typing import Iterable, Iterator, Optional, TextIO

from oss_crawler.exceptions import InvalidKeyError


def iter_keys(
    stdin: bool,
    keys: Iterable[str],
    stream: Optional[TextIO] = None,
) -> Iterator[str]:
    """
    Lazily yield crawl keys.

    Args:
        stdin: Read keys from ``stream`` (standard input by default)
        keys: Keys given on the command line, used when ``stdin`` is False
        stream: Text stream to read when ``stdin`` is True

    Yields:
        Keys in input order with surrounding whitespace removed; blank keys
        are skipped
    """
    if stdin:
        keys = sys.stdin if stream is None else stream
    for key in keys:
        key = key.strip()
        if key:
            yield key


def parse_id(key: str) -> int:
    """
    Parse a numeric id key.

    Raises:
        InvalidKeyError: If ``key`` is not an unsigned integer
    """
    value = key.strip()
    if not value.isascii() or not value.isdigit():
        raise InvalidKeyError(f"Invalid numeric id: {key!r}")
    return int(value)
