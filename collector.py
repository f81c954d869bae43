"""
Tracing garbage collector for the B store

Runs as the first action of every evaluator step. Reachability starts from the
current environment plus the environments and intermediate values held by
suspended evaluator frames, then follows record fields through the store and
captured environments through the closure arena.
"""

from typing import Dict, Iterable, List, Set, Tuple

from environment import ClosureArena, env_direct_roots
from memory import make_store, store_items, store_size
from printer import arena2str, format_deleted, mem2str


def make_frame(env: Tuple[Dict, ...]) -> Dict:
  """A suspended evaluator frame: its environment and the values it still holds"""
  return {'env': env, 'values': []}


def root_sets(env: Tuple[Dict, ...], frames: Iterable[Dict] = ()) -> Tuple[Set[int], Set[int]]:
  """Locations and closure handles named directly by the roots"""
  locs, procs = env_direct_roots(env)
  for frame in frames:
    frame_locs, frame_procs = env_direct_roots(frame['env'])
    locs |= frame_locs
    procs |= frame_procs
    for value in frame['values']:
      if value['type'] == "Record":
        locs.update(value['value'].values())
  return locs, procs


def reachable_sets(
    env: Tuple[Dict, ...],
    store: Dict,
    arena: ClosureArena,
    frames: Iterable[Dict] = ()
) -> Tuple[Set[int], Set[int]]:
  """Fixpoint of locations and closures reachable from the roots"""
  locs, procs = root_sets(env, frames)
  cells = store['cells']

  gray_locs: List[int] = list(locs)
  gray_procs: List[int] = list(procs)
  while gray_locs or gray_procs:
    while gray_locs:
      value = cells.get(gray_locs.pop())
      if value is None or value['type'] != "Record":
        continue
      for field_loc in value['value'].values():
        if field_loc not in locs:
          locs.add(field_loc)
          gray_locs.append(field_loc)

    while gray_procs:
      handle = gray_procs.pop()
      if handle not in arena:
        continue
      captured_locs, captured_procs = env_direct_roots(arena.get(handle)['env'])
      for loc in captured_locs - locs:
        locs.add(loc)
        gray_locs.append(loc)
      for proc in captured_procs - procs:
        procs.add(proc)
        gray_procs.append(proc)

  return locs, procs


def compact_store(store: Dict, live: Set[int]) -> Tuple[Dict, List[Tuple[int, Dict]]]:
  """Keep the newest write of each live location; report the dropped entries"""
  kept = {}
  deleted = []
  for loc, value in store_items(store):
    if loc in live:
      kept[loc] = value
    else:
      deleted.append((loc, value))
  return make_store(kept), deleted


def collect_garbage(env: Tuple[Dict, ...], store: Dict, context: Dict) -> Dict:
  """One collection pass; returns the compacted store"""
  arena = context['closures']
  live_locs, live_procs = reachable_sets(env, store, arena, context['frames'])
  compacted, deleted = compact_store(store, live_locs)
  dropped_procs = arena.retain(live_procs)

  stats = context['stats']
  stats['collections'] += 1
  stats['deleted'] += len(deleted)
  stats['closures_dropped'] += len(dropped_procs)

  if context['trace_gc']:
    sink = context['sink']
    for loc, value in deleted:
      sink(format_deleted(loc, value))
    sink(mem2str(store_items(compacted)))

  if context['debug'] and (deleted or dropped_procs):
    print(f"GC: kept {store_size(compacted)} locations, deleted {len(deleted)}, "
          f"dropped {len(dropped_procs)} closures")
    print(f"GC: live closures {arena2str(arena)}")

  return compacted
