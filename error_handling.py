"""
Error taxonomy for the B evaluator and the term-notation loader
Runtime errors carry a kind name plus a human-readable message
"""

from typing import Dict, Optional

from pyparsing import ParseException


# ============================================================================
# RUNTIME ERRORS
# ============================================================================

class BRuntimeError(Exception):
  """Base class for every evaluation failure"""
  kind = "RuntimeError"

  def __init__(self, message: str, expr: Optional[Dict] = None):
    self.message = message
    self.expr = expr
    super().__init__(message)

  def __str__(self) -> str:
    return f"{self.kind}: {self.message}"


class UnboundVariable(BRuntimeError):
  kind = "UnboundVariable"


class UnboundProcedure(BRuntimeError):
  kind = "UnboundProcedure"


class UnboundField(BRuntimeError):
  kind = "UnboundField"


class UnboundLocation(BRuntimeError):
  kind = "UnboundLocation"


class BTypeError(BRuntimeError):
  """Operand shape mismatch (arithmetic, comparison, logic, condition, field access)"""
  kind = "TypeError"


class ArgumentArityMismatch(BRuntimeError):
  kind = "ArgumentArityMismatch"


class DivisionByZero(BRuntimeError):
  kind = "DivisionByZero"


class IntegerOverflow(BRuntimeError):
  kind = "IntegerOverflow"


class MalformedExpression(BRuntimeError):
  kind = "MalformedExpression"


class EvaluationTooDeep(BRuntimeError):
  kind = "EvaluationTooDeep"


# ============================================================================
# PARSE ERRORS
# ============================================================================

class BParseError(Exception):
  """Term-notation loading error; line and column are 1-based, 0 when unknown"""

  def __init__(self, message: str, line: int = 0, column: int = 0, source_line: str = ""):
    self.message = message
    self.line = line
    self.column = column
    self.source_line = source_line
    super().__init__(message)

  def __str__(self) -> str:
    if not self.line:
      return f"Parse error: {self.message}"
    return (f"Parse error at line {self.line}, column {self.column}:\n"
            f"  {self.message}\n"
            f"  {self.source_line}\n"
            f"  {' ' * (self.column - 1)}^")


def enhance_parse_exception(exc: ParseException) -> BParseError:
  """Convert a pyparsing exception into a BParseError"""
  return BParseError(exc.msg, exc.lineno, exc.column, exc.line)
