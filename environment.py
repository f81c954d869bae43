"""
Environments and closures for B

An environment is a tuple of bindings, newest first. Variable bindings map a
name to a store location; procedure bindings map a name to a closure handle.
The two kinds are separate namespaces that share one ordered structure.
"""

from typing import Dict, Iterable, List, Set, Tuple

from error_handling import UnboundProcedure, UnboundVariable


EMPTY_ENV: Tuple[Dict, ...] = ()


# ============================================================================
# BINDINGS (Immutable Dictionaries)
# ============================================================================

def make_loc_binding(name: str, loc: int) -> Dict:
  return {'kind': 'LocBind', 'name': name, 'loc': loc}


def make_proc_binding(name: str, handle: int) -> Dict:
  return {'kind': 'ProcBind', 'name': name, 'proc': handle}


def make_closure(params: List[str], body: Dict, env: Tuple[Dict, ...]) -> Dict:
  """Parameter names, body expression and the captured defining environment"""
  return {
      'params': list(params),
      'body': body,
      'env': env
  }


# ============================================================================
# ENVIRONMENT OPERATIONS
# ============================================================================

def env_extend(env: Tuple[Dict, ...], binding: Dict) -> Tuple[Dict, ...]:
  """Shadow older bindings of the same name and kind"""
  return (binding,) + env


def env_lookup_location(env: Tuple[Dict, ...], name: str) -> int:
  for binding in env:
    if binding['kind'] == 'LocBind' and binding['name'] == name:
      return binding['loc']
  raise UnboundVariable(f"Variable {name} is not included in environment")


def env_lookup_procedure(env: Tuple[Dict, ...], name: str) -> int:
  for binding in env:
    if binding['kind'] == 'ProcBind' and binding['name'] == name:
      return binding['proc']
  raise UnboundProcedure(f"Procedure {name} is not included in environment")


def env_direct_roots(env: Iterable[Dict]) -> Tuple[Set[int], Set[int]]:
  """Locations and closure handles named directly by an environment"""
  locs: Set[int] = set()
  procs: Set[int] = set()
  for binding in env:
    if binding['kind'] == 'LocBind':
      locs.add(binding['loc'])
    else:
      procs.add(binding['proc'])
  return locs, procs


# ============================================================================
# CLOSURE ARENA
# ============================================================================

class ClosureArena:
  """Closures keyed by stable integer handles

  Procedure bindings refer to closures by handle, so the collector walks the
  closure graph by index instead of descending into nested environments.
  """

  def __init__(self):
    self.closures: Dict[int, Dict] = {}
    self.next_handle = 1

  def alloc(self, params: List[str], body: Dict, env: Tuple[Dict, ...]) -> int:
    handle = self.next_handle
    self.next_handle += 1
    self.closures[handle] = make_closure(params, body, env)
    return handle

  def get(self, handle: int) -> Dict:
    return self.closures[handle]

  def retain(self, live: Set[int]) -> List[int]:
    """Drop every closure whose handle is not in live; return dropped handles"""
    dead = [handle for handle in self.closures if handle not in live]
    for handle in dead:
      del self.closures[handle]
    return dead

  def __len__(self) -> int:
    return len(self.closures)

  def __contains__(self, handle: int) -> bool:
    return handle in self.closures
