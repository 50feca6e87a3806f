"""
py2rs Package.

A deterministic, rule-based pattern translator that rewrites Python source
constructs (records, enums, exceptions, functions, raises, annotated
bindings, comprehensions) into idiomatic Rust.

Usage
-----

Simple String Conversion
^^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    import py2rs
    print(py2rs.translate('raise ValueError("Cannot divide by zero")'))
    # return Err("Cannot divide by zero".to_string());

Advanced Usage (Engine)
^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from py2rs import RuntimeConfig, TranslationEngine

    engine = TranslationEngine(config=RuntimeConfig(strict_mode=True))
    res = engine.translate(source)

    if res.success:
        print(res.code)
    else:
        print(f"Errors: {res.errors}")
"""

from typing import Optional

from py2rs.config import RuntimeConfig
from py2rs.core.catalog import PatternCatalog, default_catalog
from py2rs.core.engine import TranslationEngine
from py2rs.core.matcher import Match, Matcher, NoMatch
from py2rs.core.nodes import SourceNode, make_node
from py2rs.core.renderer import Renderer
from py2rs.core.result import TranslationResult
from py2rs.core.schema import Condition, Rule, RuleDef, Trigger
from py2rs.enums import FallbackPolicy, LogicOp, NodeKind, NodeTag
from py2rs.errors import BindingError, DuplicateRuleName, IngestionError, MissingCapture, Py2RsError, TypeMappingError

__version__ = "0.1.0"


def translate(code: str, config: Optional[RuntimeConfig] = None, catalog: Optional[PatternCatalog] = None) -> str:
  """
  Translates a Python fragment into Rust.

  Convenience wrapper around `TranslationEngine.translate`.

  Args:
      code (str): The Python source to translate.
      config (RuntimeConfig, optional): Runtime settings. Defaults to pass-through
          of unmatched statements.
      catalog (PatternCatalog, optional): Rules to apply. Defaults to the
          standard catalog.

  Returns:
      str: The Rust source.

  Raises:
      ValueError: If the translation fails (syntax error, strict mode
          violation, broken rule template).
  """
  engine = TranslationEngine(catalog=catalog, config=config)
  result = engine.translate(code)

  if not result.success:
    error_msg = "\n".join(result.errors)
    raise ValueError(f"Translation failed:\n{error_msg}")

  return result.code


__all__ = [
  "translate",
  "TranslationEngine",
  "TranslationResult",
  "RuntimeConfig",
  "PatternCatalog",
  "default_catalog",
  "Matcher",
  "Match",
  "NoMatch",
  "Renderer",
  "Rule",
  "RuleDef",
  "Trigger",
  "Condition",
  "SourceNode",
  "make_node",
  "NodeKind",
  "NodeTag",
  "LogicOp",
  "FallbackPolicy",
  "Py2RsError",
  "DuplicateRuleName",
  "MissingCapture",
  "BindingError",
  "IngestionError",
  "TypeMappingError",
  "__version__",
]
