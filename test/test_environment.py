"""
Environment and closure arena tests
"""

import pytest
import syntax
from environment import (
  ClosureArena,
  EMPTY_ENV,
  env_direct_roots,
  env_extend,
  env_lookup_location,
  env_lookup_procedure,
  make_loc_binding,
  make_proc_binding,
)
from error_handling import UnboundProcedure, UnboundVariable


class TestBindings:
  """Variable and procedure bindings live in separate namespaces"""

  def test_lookup_location(self):
    env = env_extend(EMPTY_ENV, make_loc_binding("x", 1))
    assert env_lookup_location(env, "x") == 1

  def test_most_recent_binding_wins(self):
    env = env_extend(EMPTY_ENV, make_loc_binding("x", 1))
    env = env_extend(env, make_loc_binding("x", 2))
    assert env_lookup_location(env, "x") == 2

  def test_extend_leaves_outer_scope_intact(self):
    outer = env_extend(EMPTY_ENV, make_loc_binding("x", 1))
    env_extend(outer, make_loc_binding("x", 2))
    assert env_lookup_location(outer, "x") == 1

  def test_namespaces_are_disjoint(self):
    env = env_extend(EMPTY_ENV, make_loc_binding("f", 1))
    env = env_extend(env, make_proc_binding("f", 7))
    assert env_lookup_location(env, "f") == 1
    assert env_lookup_procedure(env, "f") == 7

  def test_unbound_variable_ignores_procedures(self):
    env = env_extend(EMPTY_ENV, make_proc_binding("f", 7))
    with pytest.raises(UnboundVariable):
      env_lookup_location(env, "f")

  def test_unbound_procedure_ignores_variables(self):
    env = env_extend(EMPTY_ENV, make_loc_binding("f", 1))
    with pytest.raises(UnboundProcedure):
      env_lookup_procedure(env, "f")

  def test_direct_roots(self):
    env = env_extend(EMPTY_ENV, make_loc_binding("x", 1))
    env = env_extend(env, make_proc_binding("f", 3))
    env = env_extend(env, make_loc_binding("x", 2))
    assert env_direct_roots(env) == ({1, 2}, {3})


class TestClosureArena:
  """Closures are stored by handle and swept when unreachable"""

  def test_alloc_and_get(self):
    arena = ClosureArena()
    body = syntax.make_var("a")
    handle = arena.alloc(["a"], body, EMPTY_ENV)
    closure = arena.get(handle)
    assert closure['params'] == ["a"]
    assert closure['body'] == body
    assert closure['env'] == EMPTY_ENV

  def test_handles_are_not_reused(self):
    arena = ClosureArena()
    first = arena.alloc([], syntax.make_unit(), EMPTY_ENV)
    arena.retain(set())
    second = arena.alloc([], syntax.make_unit(), EMPTY_ENV)
    assert second != first

  def test_retain(self):
    arena = ClosureArena()
    keep = arena.alloc([], syntax.make_unit(), EMPTY_ENV)
    drop = arena.alloc([], syntax.make_unit(), EMPTY_ENV)
    assert arena.retain({keep}) == [drop]
    assert keep in arena
    assert drop not in arena
    assert len(arena) == 1
