import pytest
from sqlitethin import BindError, Double, Int32, Int64, Text
from sqlitethin.values import to_bind_value


@pytest.mark.parametrize("value, expected", [
    (None, None),
    (5, Int64(5)),
    (True, Int64(1)),
    (2.5, Double(2.5)),
    ("s", Text("s")),
    (Int32(3), Int32(3)),
    (Int32(None), Int32(None)),
    (Text(None), Text(None)),
])
def test_to_bind_value(value, expected):
    assert to_bind_value(value) == expected


@pytest.mark.parametrize("value", [
    Int32(2**31),
    Int32(-(2**31) - 1),
    Int64(2**63),
    -(2**63) - 1,
])
def test_out_of_range(value):
    with pytest.raises(BindError):
        to_bind_value(value)


def test_range_limits_accepted():
    assert to_bind_value(Int32(2**31 - 1)) == Int32(2**31 - 1)
    assert to_bind_value(Int64(-(2**63))) == Int64(-(2**63))


@pytest.mark.parametrize("value", [
    b"x",
    [1],
    object(),
    Int32(1.5),
    Int32("7"),
    Int64(2.0),
    Double("x"),
    Double(2**2000),
    Text(5),
    Text(b"bytes"),
])
def test_unsupported(value):
    with pytest.raises(BindError):
        to_bind_value(value)


def test_double_accepts_int_payload():
    assert to_bind_value(Double(3)) == Double(3)
