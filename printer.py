"""
Pretty printer for B values, environments and memory
Pure functions, used for write output and collector traces
"""

from typing import Dict, Iterable, Tuple


def value2str(value: Dict) -> str:
  """Render a value as <int>, true/false, unit or {field->loc, ...}"""
  if value['type'] == "Int":
    return str(value['value'])
  elif value['type'] == "Bool":
    return "true" if value['value'] else "false"
  elif value['type'] == "Unit":
    return "unit"
  elif value['type'] == "Record":
    return "{" + record2str(value['value']) + "}"
  return f"<{value['type']}>"


def record2str(record: Dict[str, int]) -> str:
  return ", ".join(f"{name}->{loc}" for name, loc in record.items())


def entry2str(loc: int, value: Dict) -> str:
  return f"{loc}->{value2str(value)}"


def mem2str(entries: Iterable[Tuple[int, Dict]]) -> str:
  """Render (location, value) pairs as [loc->value, ...]"""
  return "[" + ", ".join(entry2str(loc, value) for loc, value in entries) + "]"


def binding2str(binding: Dict, arena=None) -> str:
  if binding['kind'] == 'LocBind':
    return f"{binding['name']}->{binding['loc']}"
  handle = binding['proc']
  if arena is not None and handle in arena:
    return f"{binding['name']}->({proc2str(arena.get(handle))})"
  return f"{binding['name']}->proc#{handle}"


def env2str(env: Iterable[Dict], arena=None) -> str:
  """Render an environment; closures expand when an arena is supplied"""
  return "[" + ", ".join(binding2str(b, arena) for b in env) + "]"


def proc2str(closure: Dict) -> str:
  """Render a closure as (params), E, [captured env]

  Procedures inside the captured environment are shown by handle only,
  which keeps rendering linear in the size of the environment.
  """
  params = ", ".join(closure['params'])
  return f"({params}), E, {env2str(closure['env'])}"


def arena2str(arena) -> str:
  return "[" + ", ".join(
      f"#{handle}->({proc2str(closure)})" for handle, closure in arena.closures.items()
  ) + "]"


def format_deleted(loc: int, value: Dict) -> str:
  return f"({entry2str(loc, value)}) deleted"


def format_memory_size(size: int) -> str:
  return f"memory size: {size}"
