import pytest

from zddkit.bignumber import BigNumber, FixedBigNumber

VALUES = [0, 1, 9, 2**62, 2**63 - 1, 2**63, 2**126 + 5, 10**40 + 7]


@pytest.mark.parametrize("value", VALUES)
def test_round_trip_int_and_str(value):
    n = BigNumber(value)
    assert int(n) == value
    assert str(n) == str(value)
    assert n == value


def test_size_of_zero_is_one_word():
    assert BigNumber(0).size() == 1


def test_msb_needs_second_word():
    assert BigNumber(2**63 - 1).size() == 1
    assert BigNumber(2**63).size() == 2


def test_store_returns_width_and_replaces_value():
    n = BigNumber(5)
    width = n.store(2**63)
    assert width == 2
    assert n == 2**63
    assert n.store(BigNumber(3)) == 1
    assert int(n) == 3


@pytest.mark.parametrize("a,b", [(1, 2), (2**63 - 1, 1), (2**100, 2**100), (0, 0)])
def test_add(a, b):
    n = BigNumber(a)
    width = n.add(BigNumber(b))
    assert int(n) == a + b
    assert width == n.size()


@pytest.mark.parametrize("value,k", [(1, 0), (1, 62), (3, 63), (7, 130), (0, 200)])
def test_shift_left(value, k):
    n = BigNumber(value)
    width = n.shift_left(k)
    assert int(n) == value << k
    assert width == n.size()


def test_negative_shift_rejected():
    with pytest.raises(ValueError):
        BigNumber(1).shift_left(-1)


@pytest.mark.parametrize("value", VALUES)
def test_divide_by_ten(value):
    n = BigNumber(value)
    remainder = n.divide(10)
    assert int(n) * 10 + remainder == value
    assert 0 <= remainder < 10


def test_negative_value_rejected():
    with pytest.raises(ValueError):
        BigNumber(-1)


def test_equality_between_numbers():
    assert BigNumber(2**70) == BigNumber(2**70)
    assert not (BigNumber(1) == BigNumber(2))


def test_fixed_add_and_equality():
    a = FixedBigNumber(2, 2**32 - 1)
    b = FixedBigNumber(2, 1)
    c = a + b
    assert c == 2**32
    assert a == 2**32 - 1
    a += b
    assert a == c


def test_fixed_overflow():
    a = FixedBigNumber(1, 2**32 - 1)
    with pytest.raises(OverflowError):
        a += FixedBigNumber(1, 1)


def test_fixed_size_mismatch():
    with pytest.raises(ValueError):
        FixedBigNumber(1, 1) + FixedBigNumber(2, 1)


def test_fixed_divide_and_str():
    n = FixedBigNumber(4, 12345)
    assert n.divide(10) == 5
    assert str(n) == "1234"
    assert int(n) == 1234