import pytest

from calysto_asm.asm import is_const, is_register, truncate_div

@pytest.mark.parametrize("word", ["0", "-0", "123", "-7", "1000000"])
def test_valid_constants(word):
    assert is_const(word)

@pytest.mark.parametrize("word", ["007", "-", "1a", "", "--1", "+5", "-01", "a"])
def test_invalid_constants(word):
    assert not is_const(word)

@pytest.mark.parametrize("word", ["a", "reg", "zz"])
def test_valid_registers(word):
    assert is_register(word)

@pytest.mark.parametrize("word", ["A", "r1", "", "a_b", "'a'", "-a"])
def test_invalid_registers(word):
    assert not is_register(word)

@pytest.mark.parametrize("a, b, expected", [
    (7, 2, 3),
    (-7, 2, -3),
    (7, -2, -3),
    (-7, -2, 3),
    (6, 3, 2),
    (0, -5, 0),
])
def test_division_truncates_toward_zero(a, b, expected):
    assert truncate_div(a, b) == expected
