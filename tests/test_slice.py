import pytest

from handykit.slice import Slice


def test_basic_view():
    s = Slice(b"hello")
    assert len(s) == 5
    assert bytes(s) == b"hello"
    assert s[0] == ord("h")
    assert s[-1] == ord("o")
    assert s.front() == ord("h")
    assert s.back() == ord("o")
    assert not s.empty()


def test_str_input_is_encoded():
    assert Slice("abc") == b"abc"


def test_empty_front_raises():
    with pytest.raises(IndexError):
        Slice(b"").front()


def test_eat_word():
    s = Slice(b"  hello world")
    word = s.eat_word()
    assert word == b"hello"
    assert s == b" world"
    assert s.eat_word() == b"world"
    assert s.empty()


def test_eat_line_leaves_newline():
    s = Slice(b"first\r\nsecond")
    line = s.eat_line()
    assert line == b"first"
    assert s.starts_with(b"\r\n")


def test_eat():
    s = Slice(b"abcdef")
    head = s.eat(2)
    assert head == b"ab"
    assert s == b"cdef"
    with pytest.raises(ValueError):
        s.eat(10)


def test_sub():
    s = Slice(b"[payload]")
    assert s.sub(1, -1) == b"payload"
    assert s.sub(1) == b"payload]"
    with pytest.raises(ValueError):
        s.sub(0, 1)


def test_trim_space():
    s = Slice(b" \t value \r\n")
    assert s.trim_space() is s
    assert s == b"value"


def test_resize_and_clear():
    s = Slice(b"abcdef")
    s.resize(3)
    assert s == b"abc"
    with pytest.raises(ValueError):
        s.resize(20)
    s.clear()
    assert s.empty()
    assert len(s) == 0


def test_compare_and_ordering():
    assert Slice(b"abc").compare(b"abc") == 0
    assert Slice(b"ab").compare(b"abc") == -1
    assert Slice(b"abd").compare(b"abc") == 1
    assert Slice(b"ab") < Slice(b"abc")
    assert sorted([Slice(b"b"), Slice(b"a")]) == [b"a", b"b"]


def test_starts_and_ends():
    s = Slice(b"GET / HTTP/1.1")
    assert s.starts_with(b"GET")
    assert s.end_with(b"HTTP/1.1")
    assert not s.starts_with(b"POST")
    assert not Slice(b"ab").end_with(b"xab")


def test_split():
    parts = Slice(b"a,b,,c").split(",")
    assert [bytes(p) for p in parts] == [b"a", b"b", b"", b"c"]


def test_split_trailing_separator_and_empty():
    assert [bytes(p) for p in Slice(b"a,").split(b",")] == [b"a", b""]
    assert Slice(b"").split(",") == []


def test_split_join_round_trip():
    data = b"k1=v1;k2=v2;k3"
    parts = Slice(data).split(ord(";"))
    assert b";".join(bytes(p) for p in parts) == data


def test_split_bad_separator():
    with pytest.raises(ValueError):
        Slice(b"abc").split("ab")


def test_equality_with_other_types():
    assert Slice(b"x") == bytearray(b"x")
    assert (Slice(b"x") == "x") is False