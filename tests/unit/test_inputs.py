import io

import pytest

from oss_crawler.exceptions import InvalidKeyError
from oss_crawler.inputs import iter_keys, parse_id


def test_keys_from_list():
    assert list(iter_keys(False, ["octocat/Hello-World", "torvalds/linux"])) == [
        "octocat/Hello-World",
        "torvalds/linux",
    ]


def test_list_keys_are_stripped_like_stream_keys():
    assert list(iter_keys(False, ["  octocat/Hello-World ", "", "\t", "torvalds/linux\n"])) == [
        "octocat/Hello-World",
        "torvalds/linux",
    ]


def test_keys_from_stream_strip_line_endings():
    stream = io.StringIO("octocat/Hello-World\ntorvalds/linux\r\n\n  \nrust-lang/rust")
    assert list(iter_keys(True, [], stream=stream)) == [
        "octocat/Hello-World",
        "torvalds/linux",
        "rust-lang/rust",
    ]


def test_stream_is_read_lazily():
    consumed = []

    def lines():
        for line in ["a\n", "b\n", "c\n"]:
            consumed.append(line)
            yield line

    keys = iter_keys(True, [], stream=lines())
    assert next(keys) == "a"
    assert consumed == ["a\n"]


def test_list_ignored_when_reading_stdin():
    stream = io.StringIO("from-stdin\n")
    assert list(iter_keys(True, ["from-args"], stream=stream)) == ["from-stdin"]


def test_keys_from_sys_stdin(monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("1296269\n"))
    assert list(iter_keys(True, [])) == ["1296269"]


@pytest.mark.parametrize("key,expected", [("1296269", 1296269), (" 42 ", 42), ("0", 0)])
def test_parse_id(key, expected):
    assert parse_id(key) == expected


@pytest.mark.parametrize("key", ["", "abc", "12a", "-1", "1.5", "octocat/Hello-World"])
def test_parse_id_rejects_malformed(key):
    with pytest.raises(InvalidKeyError):
        parse_id(key)
    with pytest.raises(ValueError):
        parse_id(key)
