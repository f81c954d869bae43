"""
Test configuration for the B evaluator tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from interpreter import make_execution_context


@pytest.fixture
def lines():
  """Diagnostic lines captured from the sink"""
  return []


@pytest.fixture
def context(lines):
  """Fresh execution context whose sink records into lines"""
  return make_execution_context(sink=lines.append)


@pytest.fixture
def programs_dir():
  return project_root / "programs"
