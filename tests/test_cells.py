import dataclasses

import pytest

from asynclog.cells import Cell, Kind


def test_supported_kinds_render_decimal_text():
    assert Cell.of(42).render() == ("42", True)
    assert Cell.of(-7).render() == ("-7", True)
    assert Cell.of(2.5).render() == ("2.5", True)
    assert Cell.of("hello").render() == ("hello", True)
    assert Cell.of("").render() == ("", True)


def test_classification():
    assert Cell.of(1).kind is Kind.INT
    assert Cell.of(1.0).kind is Kind.FLOAT
    assert Cell.of("1").kind is Kind.TEXT
    # bool is an int subclass but not a loggable integer
    assert Cell.of(True).kind is Kind.UNSUPPORTED


@pytest.mark.parametrize("value", [None, True, b"bytes", [1, 2], {"a": 1}, object()])
def test_unsupported_payload_fails_to_render(value):
    cell = Cell.of(value)
    assert not cell.supported
    text, ok = cell.render()
    assert ok is False
    assert text == ""


def test_cells_are_immutable():
    cell = Cell.of(3)
    with pytest.raises(dataclasses.FrozenInstanceError):
        cell.payload = 4  # type: ignore[misc]
    cell.render()
    assert cell.payload == 3


def test_huge_integers_render_in_full():
    # Beyond the interpreter's default int -> str digit limit
    text, ok = Cell.of(10 ** 5000).render()
    assert ok is True
    assert text == "1" + "0" * 5000

    text, ok = Cell.of(-(10 ** 5000 + 7)).render()
    assert ok is True
    assert text == "-1" + "0" * 4996 + "0007"


def test_huge_integer_chunks_keep_inner_zeros():
    value = 10 ** 5200 + 10 ** 2600 + 1
    expected = "1" + "0" * 2599 + "1" + "0" * 2599 + "1"
    assert Cell.of(value).render() == (expected, True)


class _Ratio(float):
    def __str__(self):
        return "ratio!"


class _IntLike:
    """Has __int__/__index__ like numpy integer scalars, but is no int subclass."""

    def __int__(self):
        return 5

    def __index__(self):
        return 5


def test_numeric_subclasses_follow_their_base_kind():
    cell = Cell.of(_Ratio(0.5))
    assert cell.kind is Kind.FLOAT
    assert cell.render() == ("0.5", True)

    class Code(int):
        def __str__(self):
            return "code!"

    assert Cell.of(Code(404)).render() == ("404", True)


def test_int_like_objects_without_int_base_are_unsupported():
    cell = Cell.of(_IntLike())
    assert cell.kind is Kind.UNSUPPORTED
    assert cell.render() == ("", False)
