"""
Expression trees for B
Every node is an immutable dictionary {'type': <CONSTRUCTOR>, 'value': <payload>}
"""

from typing import Any, Dict, List, Tuple


def make_node(node_type: str, value: Any = None) -> Dict:
  """Create an expression tree node"""
  return {
      'type': node_type,
      'value': value
  }


# Constants and variables

def make_num(n: int) -> Dict:
  return make_node('NUM', n)


def make_true() -> Dict:
  return make_node('TRUE')


def make_false() -> Dict:
  return make_node('FALSE')


def make_unit() -> Dict:
  return make_node('UNIT')


def make_var(name: str) -> Dict:
  return make_node('VAR', name)


# Operators

def make_binary(node_type: str, left: Dict, right: Dict) -> Dict:
  return make_node(node_type, {'left': left, 'right': right})


def make_add(left: Dict, right: Dict) -> Dict:
  return make_binary('ADD', left, right)


def make_sub(left: Dict, right: Dict) -> Dict:
  return make_binary('SUB', left, right)


def make_mul(left: Dict, right: Dict) -> Dict:
  return make_binary('MUL', left, right)


def make_div(left: Dict, right: Dict) -> Dict:
  return make_binary('DIV', left, right)


def make_equal(left: Dict, right: Dict) -> Dict:
  return make_binary('EQUAL', left, right)


def make_less(left: Dict, right: Dict) -> Dict:
  return make_binary('LESS', left, right)


def make_not(operand: Dict) -> Dict:
  return make_node('NOT', operand)


# Control

def make_seq(first: Dict, second: Dict) -> Dict:
  return make_node('SEQ', {'first': first, 'second': second})


def make_if(cond: Dict, then_branch: Dict, else_branch: Dict) -> Dict:
  return make_node('IF', {'cond': cond, 'then': then_branch, 'else': else_branch})


def make_while(cond: Dict, body: Dict) -> Dict:
  return make_node('WHILE', {'cond': cond, 'body': body})


# Bindings and procedures

def make_letv(name: str, init: Dict, body: Dict) -> Dict:
  """Variable binding: let name = init in body"""
  return make_node('LETV', {'name': name, 'init': init, 'body': body})


def make_letf(name: str, params: List[str], proc_body: Dict, body: Dict) -> Dict:
  """Procedure binding: let proc name(params) = proc_body in body"""
  return make_node('LETF', {
      'name': name,
      'params': list(params),
      'proc_body': proc_body,
      'body': body
  })


def make_callv(name: str, args: List[Dict]) -> Dict:
  """Call by value"""
  return make_node('CALLV', {'name': name, 'args': list(args)})


def make_callr(name: str, args: List[str]) -> Dict:
  """Call by reference; arguments are variable names"""
  return make_node('CALLR', {'name': name, 'args': list(args)})


# Records and assignment

def make_record(fields: List[Tuple[str, Dict]]) -> Dict:
  return make_node('RECORD', [(name, expr) for name, expr in fields])


def make_field(record: Dict, name: str) -> Dict:
  return make_node('FIELD', {'record': record, 'name': name})


def make_assign(name: str, expr: Dict) -> Dict:
  return make_node('ASSIGN', {'name': name, 'expr': expr})


def make_assignf(record: Dict, name: str, expr: Dict) -> Dict:
  return make_node('ASSIGNF', {'record': record, 'name': name, 'expr': expr})


def make_write(expr: Dict) -> Dict:
  return make_node('WRITE', expr)
