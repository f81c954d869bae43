"""
Tracing collector tests
"""

import syntax
from collector import collect_garbage, compact_store, make_frame, reachable_sets
from environment import (
  ClosureArena,
  EMPTY_ENV,
  env_extend,
  make_loc_binding,
  make_proc_binding,
)
from memory import make_store, store_extend, store_items, store_size
from primitives import make_int, make_record_value


def build_store(*writes):
  store = make_store()
  for loc, value in writes:
    store = store_extend(store, loc, value)
  return store


class TestReachability:
  """Roots, record fields and captured environments"""

  def test_follows_record_fields(self):
    store = build_store(
        (1, make_record_value({'a': 2})),
        (2, make_record_value({'b': 3})),
        (3, make_int(7)),
        (4, make_int(8)),
    )
    env = env_extend(EMPTY_ENV, make_loc_binding("r", 1))
    locs, procs = reachable_sets(env, store, ClosureArena())
    assert locs == {1, 2, 3}
    assert procs == set()

  def test_follows_captured_environments(self):
    arena = ClosureArena()
    captured = env_extend(EMPTY_ENV, make_loc_binding("x", 9))
    inner = arena.alloc([], syntax.make_var("x"), captured)
    outer_env = env_extend(EMPTY_ENV, make_proc_binding("g", inner))
    outer = arena.alloc([], syntax.make_unit(), outer_env)
    env = env_extend(EMPTY_ENV, make_proc_binding("f", outer))

    store = build_store((9, make_int(1)), (10, make_int(2)))
    locs, procs = reachable_sets(env, store, arena)
    assert locs == {9}
    assert procs == {inner, outer}

  def test_records_reached_through_closures(self):
    arena = ClosureArena()
    captured = env_extend(EMPTY_ENV, make_loc_binding("r", 1))
    handle = arena.alloc([], syntax.make_unit(), captured)
    env = env_extend(EMPTY_ENV, make_proc_binding("f", handle))
    store = build_store((1, make_record_value({'a': 2})), (2, make_int(5)))
    locs, _ = reachable_sets(env, store, arena)
    assert locs == {1, 2}

  def test_frame_environments_and_values_are_roots(self):
    frame = make_frame(env_extend(EMPTY_ENV, make_loc_binding("y", 5)))
    frame['values'].append(make_record_value({'a': 6}))
    store = build_store((5, make_int(0)), (6, make_int(1)), (7, make_int(2)))
    locs, _ = reachable_sets(EMPTY_ENV, store, ClosureArena(), [frame])
    assert locs == {5, 6}

  def test_cyclic_records_terminate(self):
    store = build_store(
        (1, make_record_value({'next': 2})),
        (2, make_record_value({'next': 1})),
    )
    env = env_extend(EMPTY_ENV, make_loc_binding("r", 1))
    locs, _ = reachable_sets(env, store, ClosureArena())
    assert locs == {1, 2}

  def test_bound_location_missing_from_store(self):
    env = env_extend(EMPTY_ENV, make_loc_binding("x", 3))
    locs, _ = reachable_sets(env, make_store(), ClosureArena())
    assert locs == {3}


class TestCompaction:
  """Compaction keeps newest writes of live locations"""

  def test_compact_store(self):
    store = build_store((1, make_int(1)), (2, make_int(2)), (1, make_int(3)))
    kept, deleted = compact_store(store, {1})
    assert store_items(kept) == [(1, make_int(3))]
    assert deleted == [(2, make_int(2))]

  def test_collect_garbage_traces_deleted_entries(self, context, lines):
    store = build_store((1, make_int(1)), (2, make_int(2)))
    env = env_extend(EMPTY_ENV, make_loc_binding("x", 1))
    compacted = collect_garbage(env, store, context)
    assert store_size(compacted) == 1
    assert lines == ["(2->2) deleted", "[1->1]"]
    assert context['stats']['collections'] == 1
    assert context['stats']['deleted'] == 1

  def test_collect_garbage_without_trace(self, context, lines):
    context['trace_gc'] = False
    collect_garbage(EMPTY_ENV, build_store((1, make_int(1))), context)
    assert lines == []

  def test_collect_garbage_sweeps_closures(self, context):
    arena = context['closures']
    live = arena.alloc([], syntax.make_unit(), EMPTY_ENV)
    arena.alloc([], syntax.make_unit(), EMPTY_ENV)
    env = env_extend(EMPTY_ENV, make_proc_binding("f", live))
    collect_garbage(env, make_store(), context)
    assert len(arena) == 1
    assert live in arena
    assert context['stats']['closures_dropped'] == 1

  def test_debug_reports_live_closures(self, context, capsys):
    context['debug'] = True
    arena = context['closures']
    live = arena.alloc(["a"], syntax.make_unit(), EMPTY_ENV)
    arena.alloc([], syntax.make_unit(), EMPTY_ENV)
    env = env_extend(EMPTY_ENV, make_proc_binding("f", live))
    collect_garbage(env, make_store(), context)
    out = capsys.readouterr().out
    assert "dropped 1 closures" in out
    assert f"GC: live closures [#{live}->((a), E, [])]" in out
