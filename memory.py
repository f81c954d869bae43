"""
Simulated memory for B: a location-indexed store and the location allocator

The store never overwrites in place. Every write produces a new store in which
the written location is the newest entry, so aliases of one location always
read the latest write.
"""

from typing import Dict, List, Optional, Tuple

from error_handling import UnboundLocation


class LocationAllocator:
  """Monotonic source of fresh locations; locations are never reused"""

  def __init__(self, start: int = 0):
    self.counter = start

  def new_location(self) -> int:
    self.counter += 1
    return self.counter

  def __repr__(self) -> str:
    return f"LocationAllocator(counter={self.counter})"


# ============================================================================
# STORE (Immutable Dictionaries)
# ============================================================================

def make_store(cells: Optional[Dict[int, Dict]] = None) -> Dict:
  """Create a store; cells are kept newest write first"""
  return {'cells': dict(cells or {})}


def store_lookup(store: Dict, loc: int) -> Dict:
  """Read the newest value written at loc"""
  try:
    return store['cells'][loc]
  except KeyError:
    raise UnboundLocation(f"location {loc} is not included in memory") from None


def store_extend(store: Dict, loc: int, value: Dict) -> Dict:
  """Return a new store where the write (loc, value) shadows any older one"""
  cells = {loc: value}
  for other, old in store['cells'].items():
    if other != loc:
      cells[other] = old
  return {'cells': cells}


def store_items(store: Dict) -> List[Tuple[int, Dict]]:
  """(location, value) pairs, newest write first"""
  return list(store['cells'].items())


def store_size(store: Dict) -> int:
  """Number of distinct live locations"""
  return len(store['cells'])
