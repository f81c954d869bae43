"""
B Interpreter - big-step evaluator over an explicit store
Pure functions from (expression, environment, store) to (value, store)
The store is threaded through every subexpression, left to right
"""

from typing import Callable, Dict, List, Optional, Tuple

from collector import collect_garbage, make_frame
from environment import (
  ClosureArena,
  EMPTY_ENV,
  env_extend,
  env_lookup_location,
  env_lookup_procedure,
  make_loc_binding,
  make_proc_binding,
)
from error_handling import EvaluationTooDeep, MalformedExpression, UnboundField
from memory import LocationAllocator, make_store, store_extend, store_lookup, store_size
from primitives import (
  BUILTIN_OPERATORS,
  b_not,
  make_bool,
  make_int,
  make_record_value,
  make_unit_value,
)
from printer import env2str, value2str
from utilities import is_record, type_mismatch_error, validate_arity


# ============================================================================
# EXECUTION CONTEXT
# ============================================================================

def make_execution_context(
    debug: bool = False,
    trace_gc: bool = True,
    sink: Optional[Callable[[str], None]] = None
) -> Dict:
  """Create the state shared by every evaluator step of one run"""
  return {
      'debug': debug,
      'trace_gc': trace_gc,
      'sink': sink if sink is not None else print,
      'allocator': LocationAllocator(),
      'closures': ClosureArena(),
      'frames': [],
      'stats': {'collections': 0, 'deleted': 0, 'closures_dropped': 0}
  }


def hold_value(context: Dict, value: Dict) -> None:
  """Keep an intermediate value alive while the current frame evaluates more"""
  context['frames'][-1]['values'].append(value)


def new_location(context: Dict) -> int:
  return context['allocator'].new_location()


# ============================================================================
# EVALUATOR
# ============================================================================

def eval_ast(ast_node: Dict, env: Tuple[Dict, ...], store: Dict, context: Optional[Dict] = None) -> Tuple[Dict, Dict]:
  """
  Evaluate an expression and return (value, updated_store).
  Every step starts with a collection pass over the incoming store.
  """
  if context is None:
    context = make_execution_context()

  store = collect_garbage(env, store, context)

  if context['debug']:
    print(f"Evaluating: {ast_node['type']} in {env2str(env)}")

  node_type = ast_node['type']

  context['frames'].append(make_frame(env))
  try:
    if node_type in ("NUM", "TRUE", "FALSE", "UNIT"):
      return eval_constant(ast_node, env, store, context)
    elif node_type == "VAR":
      return eval_var(ast_node, env, store, context)
    elif node_type in BUILTIN_OPERATORS:
      return eval_operation(ast_node, env, store, context)
    elif node_type == "NOT":
      return eval_not(ast_node, env, store, context)
    elif node_type == "SEQ":
      return eval_seq(ast_node, env, store, context)
    elif node_type == "IF":
      return eval_if(ast_node, env, store, context)
    elif node_type == "WHILE":
      return eval_while(ast_node, env, store, context)
    elif node_type == "LETV":
      return eval_letv(ast_node, env, store, context)
    elif node_type == "LETF":
      return eval_letf(ast_node, env, store, context)
    elif node_type == "CALLV":
      return eval_callv(ast_node, env, store, context)
    elif node_type == "CALLR":
      return eval_callr(ast_node, env, store, context)
    elif node_type == "RECORD":
      return eval_record(ast_node, env, store, context)
    elif node_type == "FIELD":
      return eval_field(ast_node, env, store, context)
    elif node_type == "ASSIGN":
      return eval_assign(ast_node, env, store, context)
    elif node_type == "ASSIGNF":
      return eval_assignf(ast_node, env, store, context)
    elif node_type == "WRITE":
      return eval_write(ast_node, env, store, context)
    else:
      raise MalformedExpression(f"Unknown expression type: {node_type}", ast_node)
  finally:
    context['frames'].pop()


def eval_constant(ast_node: Dict, env: Tuple[Dict, ...], store: Dict, context: Dict) -> Tuple[Dict, Dict]:
  """Evaluate a literal"""
  node_type = ast_node['type']
  if node_type == "NUM":
    return make_int(ast_node['value']), store
  elif node_type == "UNIT":
    return make_unit_value(), store
  return make_bool(node_type == "TRUE"), store


def eval_var(ast_node: Dict, env: Tuple[Dict, ...], store: Dict, context: Dict) -> Tuple[Dict, Dict]:
  """Read the location a variable is bound to"""
  loc = env_lookup_location(env, ast_node['value'])
  return store_lookup(store, loc), store


def eval_operation(ast_node: Dict, env: Tuple[Dict, ...], store: Dict, context: Dict) -> Tuple[Dict, Dict]:
  """Evaluate a binary operator, left operand first"""
  value_dict = ast_node['value']
  left_val, store = eval_ast(value_dict['left'], env, store, context)
  right_val, store = eval_ast(value_dict['right'], env, store, context)
  return BUILTIN_OPERATORS[ast_node['type']](left_val, right_val), store


def eval_not(ast_node: Dict, env: Tuple[Dict, ...], store: Dict, context: Dict) -> Tuple[Dict, Dict]:
  operand, store = eval_ast(ast_node['value'], env, store, context)
  return b_not(operand), store


def eval_seq(ast_node: Dict, env: Tuple[Dict, ...], store: Dict, context: Dict) -> Tuple[Dict, Dict]:
  """Evaluate the first expression for effect, return the second"""
  value_dict = ast_node['value']
  _, store = eval_ast(value_dict['first'], env, store, context)
  return eval_ast(value_dict['second'], env, store, context)


def eval_condition(cond: Dict, env: Tuple[Dict, ...], store: Dict, context: Dict, op_name: str) -> Tuple[bool, Dict]:
  cond_val, store = eval_ast(cond, env, store, context)
  if cond_val['type'] != "Bool":
    raise type_mismatch_error(op_name, "condition", "Bool", cond_val)
  return cond_val['value'], store


def eval_if(ast_node: Dict, env: Tuple[Dict, ...], store: Dict, context: Dict) -> Tuple[Dict, Dict]:
  value_dict = ast_node['value']
  taken, store = eval_condition(value_dict['cond'], env, store, context, "if")
  branch = value_dict['then'] if taken else value_dict['else']
  return eval_ast(branch, env, store, context)


def eval_while(ast_node: Dict, env: Tuple[Dict, ...], store: Dict, context: Dict) -> Tuple[Dict, Dict]:
  """
  Evaluate a while loop iteratively.
  Each further iteration re-enters the loop expression, which is an evaluator
  step of its own and therefore starts with a collection pass.
  """
  value_dict = ast_node['value']
  while True:
    taken, store = eval_condition(value_dict['cond'], env, store, context, "while")
    if not taken:
      return make_unit_value(), store
    _, store = eval_ast(value_dict['body'], env, store, context)
    store = collect_garbage(env, store, context)


def eval_letv(ast_node: Dict, env: Tuple[Dict, ...], store: Dict, context: Dict) -> Tuple[Dict, Dict]:
  """Bind a fresh location to the initializer's value for the body only"""
  value_dict = ast_node['value']
  init_val, store = eval_ast(value_dict['init'], env, store, context)

  loc = new_location(context)
  body_env = env_extend(env, make_loc_binding(value_dict['name'], loc))
  return eval_ast(value_dict['body'], body_env, store_extend(store, loc, init_val), context)


def eval_letf(ast_node: Dict, env: Tuple[Dict, ...], store: Dict, context: Dict) -> Tuple[Dict, Dict]:
  """Bind a procedure closing over the current environment"""
  value_dict = ast_node['value']
  handle = context['closures'].alloc(value_dict['params'], value_dict['proc_body'], env)
  body_env = env_extend(env, make_proc_binding(value_dict['name'], handle))
  return eval_ast(value_dict['body'], body_env, store, context)


def eval_callv(ast_node: Dict, env: Tuple[Dict, ...], store: Dict, context: Dict) -> Tuple[Dict, Dict]:
  """
  Call by value: arguments are evaluated in the caller's environment and
  copied into fresh locations bound in the closure's captured environment.
  """
  value_dict = ast_node['value']
  proc_name = value_dict['name']
  handle = env_lookup_procedure(env, proc_name)
  closure = context['closures'].get(handle)
  validate_arity(proc_name, closure['params'], value_dict['args'])

  arg_values = []
  for arg in value_dict['args']:
    arg_val, store = eval_ast(arg, env, store, context)
    hold_value(context, arg_val)
    arg_values.append(arg_val)

  call_env = closure['env']
  for param, arg_val in zip(closure['params'], arg_values):
    loc = new_location(context)
    call_env = env_extend(call_env, make_loc_binding(param, loc))
    store = store_extend(store, loc, arg_val)

  call_env = env_extend(call_env, make_proc_binding(proc_name, handle))
  return eval_ast(closure['body'], call_env, store, context)


def eval_callr(ast_node: Dict, env: Tuple[Dict, ...], store: Dict, context: Dict) -> Tuple[Dict, Dict]:
  """
  Call by reference: each parameter is bound to the caller's existing
  location for the named argument, so writes inside the body are shared.
  Only the captured environment is extended; the procedure does not see itself.
  """
  value_dict = ast_node['value']
  proc_name = value_dict['name']
  handle = env_lookup_procedure(env, proc_name)
  closure = context['closures'].get(handle)
  validate_arity(proc_name, closure['params'], value_dict['args'])

  call_env = closure['env']
  for arg_name, param in zip(value_dict['args'], closure['params']):
    call_env = env_extend(call_env, make_loc_binding(param, env_lookup_location(env, arg_name)))
  return eval_ast(closure['body'], call_env, store, context)


def eval_record(ast_node: Dict, env: Tuple[Dict, ...], store: Dict, context: Dict) -> Tuple[Dict, Dict]:
  """
  Evaluate every field initializer, then allocate one location per field.
  A record with no fields is unit.
  """
  fields = ast_node['value']
  if not fields:
    return make_unit_value(), store

  field_values = []
  for _, field_ast in fields:
    field_val, store = eval_ast(field_ast, env, store, context)
    hold_value(context, field_val)
    field_values.append(field_val)

  record = {}
  for (name, _), field_val in zip(fields, field_values):
    loc = new_location(context)
    record[name] = loc
    store = store_extend(store, loc, field_val)

  return make_record_value(record), store


def record_field_location(record_val: Dict, name: str, op_name: str) -> int:
  if not is_record(record_val):
    raise type_mismatch_error(op_name, "record operand", "Record", record_val)
  try:
    return record_val['value'][name]
  except KeyError:
    raise UnboundField(f"field {name} is not included in record") from None


def eval_field(ast_node: Dict, env: Tuple[Dict, ...], store: Dict, context: Dict) -> Tuple[Dict, Dict]:
  value_dict = ast_node['value']
  record_val, store = eval_ast(value_dict['record'], env, store, context)
  loc = record_field_location(record_val, value_dict['name'], "field access")
  return store_lookup(store, loc), store


def eval_assign(ast_node: Dict, env: Tuple[Dict, ...], store: Dict, context: Dict) -> Tuple[Dict, Dict]:
  """Shadow the variable's existing location with the new value"""
  value_dict = ast_node['value']
  new_val, store = eval_ast(value_dict['expr'], env, store, context)
  loc = env_lookup_location(env, value_dict['name'])
  return new_val, store_extend(store, loc, new_val)


def eval_assignf(ast_node: Dict, env: Tuple[Dict, ...], store: Dict, context: Dict) -> Tuple[Dict, Dict]:
  """Shadow a record field's existing location with the new value"""
  value_dict = ast_node['value']
  record_val, store = eval_ast(value_dict['record'], env, store, context)
  loc = record_field_location(record_val, value_dict['name'], "field assignment")
  hold_value(context, record_val)

  new_val, store = eval_ast(value_dict['expr'], env, store, context)
  return new_val, store_extend(store, loc, new_val)


def eval_write(ast_node: Dict, env: Tuple[Dict, ...], store: Dict, context: Dict) -> Tuple[Dict, Dict]:
  """Emit the rendered value to the diagnostic sink and pass it through"""
  value, store = eval_ast(ast_node['value'], env, store, context)
  context['sink'](value2str(value))
  return value, store


# ============================================================================
# PROGRAM EVALUATION
# ============================================================================

def make_diagnostic_sink(lines: List[str], forward: Optional[Callable[[str], None]] = None) -> Callable[[str], None]:
  """Sink that records every diagnostic line and optionally forwards it"""
  def sink(line: str) -> None:
    lines.append(line)
    if forward is not None:
      forward(line)
  return sink


def run_program(expr: Dict, context: Optional[Dict] = None, echo: bool = False) -> Dict:
  """
  Evaluate a top-level expression against an empty environment and store.
  Returns the final value, final store, its size and the diagnostic lines.
  """
  if context is None:
    context = make_execution_context()

  diagnostics: List[str] = []
  outer_sink = context['sink']
  context['sink'] = make_diagnostic_sink(diagnostics, outer_sink if echo else None)
  try:
    value, store = eval_ast(expr, EMPTY_ENV, make_store(), context)
  except RecursionError:
    raise EvaluationTooDeep("evaluation nested deeper than the host stack allows") from None
  finally:
    context['sink'] = outer_sink

  return {
      'value': value,
      'store': store,
      'memory_size': store_size(store),
      'diagnostics': diagnostics
  }


def run_programs(exprs: List[Dict], context: Optional[Dict] = None, echo: bool = False) -> List[Dict]:
  """Run several top-level expressions that share one location counter"""
  if context is None:
    context = make_execution_context()
  return [run_program(expr, context, echo) for expr in exprs]


# ============================================================================
# FACTORY FUNCTIONS (for main.py)
# ============================================================================

def create_interpreter(debug: bool = False, trace_gc: bool = True):
  """Factory function returning an interpreter bound to one execution context"""
  context = make_execution_context(debug=debug, trace_gc=trace_gc)

  return type('Interpreter', (), {
      'context': context,
      'run': lambda self, expr, echo=False: run_program(expr, context, echo),
      'run_many': lambda self, exprs, echo=False: run_programs(exprs, context, echo)
  })()

