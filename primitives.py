"""
Runtime values and built-in operators for B
Values are immutable dictionaries tagged with their type name
"""

from typing import Dict, Any
import operator
from utilities import (
  binary_arithmetic_op,
  check_int_range,
  operation_error,
  type_mismatch_error,
)
from error_handling import DivisionByZero


# ============================================================================
# VALUE CONSTRUCTORS
# ============================================================================

def make_value(value: Any, type_name: str) -> Dict:
  """Create an immutable runtime value"""
  return {
      'value': value,
      'type': type_name
  }


def make_int(n: int) -> Dict:
  return make_value(check_int_range(n), "Int")


def make_bool(b: bool) -> Dict:
  return make_value(bool(b), "Bool")


def make_unit_value() -> Dict:
  return make_value(None, "Unit")


def make_record_value(fields: Dict[str, int]) -> Dict:
  """A record holds no data, only field name -> location indirections"""
  return make_value(dict(fields), "Record")


# ============================================================================
# ARITHMETIC
# ============================================================================

def _truncating_div(x: int, y: int) -> int:
  quotient = abs(x) // abs(y)
  return quotient if (x < 0) == (y < 0) else -quotient


_b_add_impl = binary_arithmetic_op(operator.add, "add")
_b_sub_impl = binary_arithmetic_op(operator.sub, "subtract")
_b_mul_impl = binary_arithmetic_op(operator.mul, "multiply")
_b_div_impl = binary_arithmetic_op(_truncating_div, "divide")


def b_add(x: Dict, y: Dict) -> Dict:
  """Addition"""
  return _b_add_impl(x, y, make_value)


def b_sub(x: Dict, y: Dict) -> Dict:
  """Subtraction"""
  return _b_sub_impl(x, y, make_value)


def b_mul(x: Dict, y: Dict) -> Dict:
  """Multiplication"""
  return _b_mul_impl(x, y, make_value)


def b_div(x: Dict, y: Dict) -> Dict:
  """Integer division, truncating toward zero"""
  if x['type'] == "Int" and y['type'] == "Int" and y['value'] == 0:
    raise DivisionByZero(f"Division of {x['value']} by zero")
  return _b_div_impl(x, y, make_value)


# ============================================================================
# COMPARISON AND LOGIC
# ============================================================================

def b_equal(x: Dict, y: Dict) -> Dict:
  """Structural equality on Int, Bool and Unit; records never compare equal"""
  if x['type'] != y['type'] or x['type'] == "Record":
    return make_bool(False)
  return make_bool(x['value'] == y['value'])


def b_less(x: Dict, y: Dict) -> Dict:
  """Less-than on integers"""
  if x['type'] != "Int" or y['type'] != "Int":
    raise operation_error("compare", x['type'], y['type'])
  return make_bool(x['value'] < y['value'])


def b_not(x: Dict) -> Dict:
  """Logical negation"""
  if x['type'] != "Bool":
    raise type_mismatch_error("not", "operand", "Bool", x)
  return make_bool(not x['value'])


BUILTIN_OPERATORS = {
    'ADD': b_add,
    'SUB': b_sub,
    'MUL': b_mul,
    'DIV': b_div,
    'EQUAL': b_equal,
    'LESS': b_less,
}
