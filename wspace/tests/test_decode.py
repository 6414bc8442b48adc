import pytest

from wspace.decode import (
    INT64_MAX,
    NUMBER_GUARD,
    find_white,
    read_label,
    read_number,
    read_prefix,
    read_symbol,
)
from wspace.errors import IncompleteCode, Overflow


def test_find_white_skips_comment_bytes():
    assert find_white(b"abc\tdef") == ("\t", 3)
    assert find_white(b"x y", 2) == (None, -1)
    assert find_white(b" a\n", 1) == ("\n", 2)
    assert find_white(b"only comments") == (None, -1)
    assert find_white(b"") == (None, -1)


def test_read_symbol_and_prefix():
    assert read_symbol(b"ab\n", 0) == ("\n", 3)
    assert read_prefix(b"x \ny \t", 0) == (" \n ", 5)
    with pytest.raises(IncompleteCode):
        read_prefix(b" \t", 0)
    with pytest.raises(IncompleteCode):
        read_symbol(b"zzz", 0)


@pytest.mark.parametrize(
    "code, value, end",
    [
        (b"\n", 0, 1),
        (b"aa \n", 0, 4),
        (b"aa a\n", 0, 5),
        (b"\tabc\n", 0, 5),
        (b" \t \t \n", 10, 6),
        (b"aa\t\t  \n", -4, 7),
        (b" \t\n", 1, 3),
        (b"\t\t\t\n", -3, 4),
    ],
)
def test_read_number_vectors(code, value, end):
    assert read_number(code, 0) == (value, end)


@pytest.mark.parametrize("code", [b"", b"aaa", b" \t ", b"\t", b" \t\t x"])
def test_read_number_incomplete(code):
    with pytest.raises(IncompleteCode):
        read_number(code, 0)


def test_read_number_overflow_boundary():
    assert NUMBER_GUARD == (1 << 62) - 1
    # one followed by 62 zeros is the largest power of two accepted
    assert read_number(b" \t" + b" " * 62 + b"\n", 0)[0] == 1 << 62
    with pytest.raises(Overflow):
        read_number(b" \t" + b" " * 63 + b"\n", 0)
    # 63 ones still fit because the accumulator never exceeds the guard
    assert read_number(b" " + b"\t" * 63 + b"\n", 0)[0] == INT64_MAX
    assert read_number(b"\t" + b"\t" * 63 + b"\n", 0)[0] == -INT64_MAX
    with pytest.raises(Overflow):
        read_number(b" " + b"\t" * 64 + b"\n", 0)


def test_read_number_leading_zero_digits_are_ignored():
    assert read_number(b"    \t\n", 0) == (1, 6)


def test_read_label():
    assert read_label(b" \t\n", 0) == (" \t", 3)
    assert read_label(b"a \tb\n", 0) == (" \t", 5)
    assert read_label(b"\n", 0) == ("", 1)
    assert read_label(b"xx \t \n", 2) == (" \t ", 6)
    with pytest.raises(IncompleteCode):
        read_label(b" \t", 0)


def test_distinct_labels_do_not_collide():
    first, _ = read_label(b" \t\n", 0)
    second, _ = read_label(b"\t \n", 0)
    third, _ = read_label(b" \t \n", 0)
    assert len({first, second, third}) == 3
    assert read_label(b" c\td\n", 0)[0] == first
