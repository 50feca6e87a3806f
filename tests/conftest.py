"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Shared catalog and engine fixtures.
- Console capture for asserting on log output.
"""

import sys
from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

# Add src to path so we can import 'py2rs' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from py2rs.config import RuntimeConfig
from py2rs.core.catalog import PatternCatalog, default_catalog
from py2rs.core.engine import TranslationEngine
from py2rs.utils.console import reset_console, set_console


@pytest.fixture
def catalog() -> PatternCatalog:
  """A fresh standard catalog; tests may register extra rules on it."""
  return default_catalog()


@pytest.fixture
def engine(catalog: PatternCatalog) -> TranslationEngine:
  return TranslationEngine(catalog=catalog, config=RuntimeConfig())


@pytest.fixture
def rust(engine: TranslationEngine):
  """
  Translates a fragment and returns the generated code.

  Fails the test with the engine's reason if the translation fails.
  """

  def _translate(code: str) -> str:
    result = engine.translate(code)
    assert result.success, result.errors
    return result.code

  return _translate


@pytest.fixture
def captured_console():
  """Redirects package logging into a buffer for the duration of a test."""
  buffer = StringIO()
  set_console(Console(file=buffer, force_terminal=False, width=200))
  yield buffer
  reset_console()
