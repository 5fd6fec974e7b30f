"""Host value semantics: coercion, comparison and arithmetic on PHP values.

PHP values map onto Python as ``None``, ``bool``, ``int``, ``float``,
``str`` and ``dict`` (ordered arrays). Integers are 64-bit: results that
overflow become floats, bitwise results wrap.

Division: ``int / int`` stays an ``int`` when evenly divisible, otherwise a
``float``. ``%`` works on integers and takes the sign of the dividend.
Division or modulo by zero raises ``ZeroDivisionError``.
"""

from __future__ import annotations

import math
import re
from typing import Any

INT_MAX = 2**63 - 1
INT_MIN = -(2**63)

_NUMERIC_PREFIX = re.compile(r"^[ \t\n\r\v\f]*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")
_NUMERIC_STRING = re.compile(r"^[ \t\n\r\v\f]*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?[ \t\n\r\v\f]*$")
_INTEGER_KEY = re.compile(r"^(0|-?[1-9][0-9]*)$")


def php_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    if isinstance(value, dict):
        return "array"
    return "object"


def _int_or_float(value: int | float) -> int | float:
    if isinstance(value, int) and not INT_MIN <= value <= INT_MAX:
        return float(value)
    return value


def _wrap64(value: int) -> int:
    return ((value - INT_MIN) % 2**64) + INT_MIN


def is_numeric_string(value: str) -> bool:
    return _NUMERIC_STRING.match(value) is not None


def to_bool(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value not in ("", "0")
    return bool(value)


def to_number(value: Any) -> int | float:
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        match = _NUMERIC_PREFIX.match(value)
        if match is None:
            return 0
        literal = match.group(0).strip()
        if match.group(2) or match.group(3) or literal.lstrip("+-").startswith("."):
            return float(literal)
        return _int_or_float(int(literal))
    if isinstance(value, dict):
        return 1 if value else 0
    return 1


def to_int(value: Any) -> int:
    number = to_number(value)
    if isinstance(number, float):
        if not math.isfinite(number):
            return 0
        return _wrap64(int(number))
    return number


def to_float(value: Any) -> float:
    return float(to_number(value))


def to_string(value: Any) -> str:
    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _float_to_string(value)
    if isinstance(value, dict):
        return "Array"
    return str(value)


def _float_to_string(value: float) -> str:
    if math.isnan(value):
        return "NAN"
    if math.isinf(value):
        return "INF" if value > 0 else "-INF"
    if value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    text = repr(value)
    if "e" in text:
        mantissa, exponent = text.split("e")
        if "." not in mantissa:
            mantissa += ".0"
        exp = int(exponent)
        return f"{mantissa}E{'+' if exp >= 0 else '-'}{abs(exp)}"
    return text


def to_array_key(value: Any) -> int | str:
    """Normalize a value used as an array key the way the host does."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return to_int(value)
    key = to_string(value)
    if _INTEGER_KEY.match(key) and INT_MIN <= int(key) <= INT_MAX:
        return int(key)
    return key


# ============================================================================
# Comparison
# ============================================================================


def _sign(left: Any, right: Any) -> int:
    return (left > right) - (left < right)


def loose_equals(left: Any, right: Any) -> bool:
    """``==`` with host coercion rules."""
    return compare(left, right) == 0 if _comparable(left, right) else False


def _comparable(left: Any, right: Any) -> bool:
    # Arrays only compare loosely with arrays, null and bools
    left_array, right_array = isinstance(left, dict), isinstance(right, dict)
    if left_array == right_array:
        return True
    other = right if left_array else left
    return other is None or isinstance(other, bool)


def strict_equals(left: Any, right: Any) -> bool:
    """``===``: same type and same value (arrays: same pairs in the same order)."""
    if php_type(left) != php_type(right):
        return False
    if isinstance(left, dict):
        if list(left) != list(right):
            return False
        return all(strict_equals(left[key], right[key]) for key in left)
    return bool(left == right)


def compare(left: Any, right: Any) -> int:
    """``<=>`` with host coercion rules; returns -1, 0 or 1."""
    if isinstance(left, str) and isinstance(right, str):
        if is_numeric_string(left) and is_numeric_string(right):
            return _sign(to_number(left), to_number(right))
        return _sign(left, right)
    if isinstance(left, bool) or isinstance(right, bool) or left is None or right is None:
        if left is None and isinstance(right, str):
            return _sign("", right)
        if right is None and isinstance(left, str):
            return _sign(left, "")
        return _sign(to_bool(left), to_bool(right))
    if isinstance(left, dict) and isinstance(right, dict):
        if len(left) != len(right):
            return _sign(len(left), len(right))
        for key, value in left.items():
            if key not in right:
                return 1
            result = compare(value, right[key])
            if result:
                return result
        return 0
    if isinstance(left, dict):
        return 1
    if isinstance(right, dict):
        return -1
    if isinstance(left, str):
        if is_numeric_string(left):
            return _sign(to_number(left), right)
        return _sign(left, to_string(right))
    if isinstance(right, str):
        if is_numeric_string(right):
            return _sign(left, to_number(right))
        return _sign(to_string(left), right)
    return _sign(left, right)


# ============================================================================
# Arithmetic
# ============================================================================


def add(left: Any, right: Any) -> Any:
    if isinstance(left, dict) and isinstance(right, dict):
        result = dict(left)
        for key, value in right.items():
            result.setdefault(key, value)
        return result
    return _int_or_float(to_number(left) + to_number(right))


def sub(left: Any, right: Any) -> int | float:
    return _int_or_float(to_number(left) - to_number(right))


def mul(left: Any, right: Any) -> int | float:
    return _int_or_float(to_number(left) * to_number(right))


def div(left: Any, right: Any) -> int | float:
    dividend, divisor = to_number(left), to_number(right)
    if divisor == 0:
        raise ZeroDivisionError("Division by zero")
    if isinstance(dividend, int) and isinstance(divisor, int) and dividend % divisor == 0:
        return _int_or_float(dividend // divisor)
    return dividend / divisor


def mod(left: Any, right: Any) -> int:
    dividend, divisor = to_int(left), to_int(right)
    if divisor == 0:
        raise ZeroDivisionError("Modulo by zero")
    remainder = abs(dividend) % abs(divisor)
    return -remainder if dividend < 0 else remainder


def power(left: Any, right: Any) -> int | float:
    base, exponent = to_number(left), to_number(right)
    if isinstance(base, int) and isinstance(exponent, int) and exponent >= 0:
        # Exact only while the result fits 64 bits; larger results go through float
        if base in (-1, 0, 1) or exponent * math.log2(abs(base)) <= 64:
            return _int_or_float(base**exponent)
    try:
        result = float(base) ** exponent
    except ZeroDivisionError:
        return math.inf
    except OverflowError:
        odd = isinstance(exponent, int) and exponent % 2 == 1
        return -math.inf if base < 0 and odd else math.inf
    # Negative base with a fractional exponent
    if isinstance(result, complex):
        return math.nan
    return result


def negate(value: Any) -> int | float:
    return _int_or_float(-to_number(value))


def identity(value: Any) -> int | float:
    return to_number(value)


def bit_or(left: Any, right: Any) -> int:
    return _wrap64(to_int(left) | to_int(right))


def bit_and(left: Any, right: Any) -> int:
    return _wrap64(to_int(left) & to_int(right))


def bit_xor(left: Any, right: Any) -> int:
    return _wrap64(to_int(left) ^ to_int(right))


def bit_not(value: Any) -> int:
    return _wrap64(~to_int(value))


def shift_left(left: Any, right: Any) -> int:
    shift = to_int(right)
    if shift < 0:
        raise ValueError("Bit shift by negative number")
    return 0 if shift >= 64 else _wrap64(to_int(left) << shift)


def shift_right(left: Any, right: Any) -> int:
    shift = to_int(right)
    if shift < 0:
        raise ValueError("Bit shift by negative number")
    return to_int(left) >> min(shift, 63)


def concat(left: Any, right: Any) -> str:
    return to_string(left) + to_string(right)


def cast(target: str, value: Any) -> Any:
    """Apply a ``(type)`` cast; unknown targets yield ``None``."""
    if target in ("int", "integer"):
        return to_int(value)
    if target in ("float", "double", "real"):
        return to_float(value)
    if target in ("string", "binary"):
        return to_string(value)
    if target in ("bool", "boolean"):
        return to_bool(value)
    if target == "array":
        if isinstance(value, dict):
            return value
        return {} if value is None else {0: value}
    return None
