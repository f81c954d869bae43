"""
Utilities module for the B evaluator
Contains common helper functions to reduce code duplication
"""

from typing import Any, Dict, List, Callable

from error_handling import (
  ArgumentArityMismatch,
  BTypeError,
  IntegerOverflow,
)


INT_BITS = 64
INT_MIN = -(1 << (INT_BITS - 1))
INT_MAX = (1 << (INT_BITS - 1)) - 1


# ==================== TYPE CHECKING UTILITIES ====================

def is_value_dict(val: Any) -> bool:
  """
  Check if value is a wrapped value dict

  Args:
    val: Value to check

  Returns:
    True if val is a dict with 'type' and 'value' keys
  """
  return isinstance(val, dict) and 'type' in val and 'value' in val


def is_record(val: Any) -> bool:
  return is_value_dict(val) and val['type'] == "Record"


def check_int_range(n: int) -> int:
  """
  Enforce the 64-bit signed integer range

  Raises:
    IntegerOverflow if n does not fit
  """
  if n < INT_MIN or n > INT_MAX:
    raise IntegerOverflow(f"{n} does not fit in a {INT_BITS}-bit signed integer")
  return n


# ==================== ERROR MESSAGE BUILDERS ====================

def type_mismatch_error(
  op_name: str,
  operand_name: str,
  expected: str,
  actual: Dict
) -> BTypeError:
  """
  Generate type mismatch error

  Args:
    op_name: Operation name
    operand_name: Which operand was wrong
    expected: Expected type
    actual: Actual value dict

  Returns:
    BTypeError with formatted message
  """
  actual_type = actual.get('type', 'Unknown')
  return BTypeError(
    f"{op_name} requires {expected} for {operand_name}, got {actual_type}"
  )


def arity_error(proc_name: str, expected: int, got: int) -> ArgumentArityMismatch:
  """
  Generate arity mismatch error

  Args:
    proc_name: Procedure name
    expected: Number of parameters
    got: Number of arguments supplied

  Returns:
    ArgumentArityMismatch with formatted message
  """
  return ArgumentArityMismatch(
    f"{proc_name} requires {expected} arguments, got {got}"
  )


def operation_error(
  op: str,
  left_type: str,
  right_type: str
) -> BTypeError:
  """Generate operation error for a binary operator"""
  return BTypeError(
    f"Cannot {op} {left_type} and {right_type}"
  )


# ==================== VALIDATION UTILITIES ====================

def validate_arity(proc_name: str, params: List[str], args: List[Any]) -> None:
  """
  Validate that a call supplies exactly one argument per parameter

  Raises:
    ArgumentArityMismatch if the counts differ
  """
  if len(args) != len(params):
    raise arity_error(proc_name, len(params), len(args))


# ==================== BINARY OPERATION FACTORIES ====================

def binary_arithmetic_op(
  op: Callable[[int, int], int],
  op_name: str
) -> Callable[[Dict, Dict, Callable], Dict]:
  """
  Factory for binary integer arithmetic

  Args:
    op: Python operator function (e.g., operator.add)
    op_name: Name for error messages

  Returns:
    Function that performs the arithmetic operation

  Examples:
    b_add = binary_arithmetic_op(operator.add, "add")
    result = b_add({"type": "Int", "value": 1}, {"type": "Int", "value": 2}, make_value)
  """
  def arithmetic(x: Dict, y: Dict, make_value: Callable) -> Dict:
    if x['type'] != "Int" or y['type'] != "Int":
      raise operation_error(op_name, x['type'], y['type'])
    return make_value(check_int_range(op(x['value'], y['value'])), "Int")

  return arithmetic
