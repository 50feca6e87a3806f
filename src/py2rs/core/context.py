"""
Binder Context.

`RuleContext` is passed to every rule binder. It gives read-only access to
the runtime configuration and the translation helpers binders need to turn
structured captures (fields, parameters, expressions) into finished Rust
text before rendering.
"""

from typing import Iterable, Optional

from py2rs.config import RuntimeConfig
from py2rs.core.expressions import to_rust_expr
from py2rs.core.nodes import Field
from py2rs.core.types import borrowed, to_rust_literal, to_rust_type

INDENT = "    "


class RuleContext:
  """
  Context object handed to binders during matching.
  """

  def __init__(self, config: Optional[RuntimeConfig] = None):
    """
    Args:
        config: Runtime configuration. Defaults to `RuntimeConfig()`.
    """
    self.config = config or RuntimeConfig()

  def rust_type(self, annotation: Optional[str]) -> str:
    """Translates an annotation, honouring configured type overrides."""
    return to_rust_type(annotation, self.config.type_overrides)

  def param(self, field: Field) -> str:
    """
    Renders a function parameter as ``name: Type``.

    Owned strings and vectors are borrowed; ``*args`` becomes a slice and
    ``**kwargs`` a borrowed map keyed by `String`.
    """
    rust = self.rust_type(field.annotation)
    if field.star == "*":
      return f"{field.name}: &[{rust}]"
    if field.star == "**":
      return f"{field.name}: &HashMap<String, {rust}>"
    return f"{field.name}: {borrowed(rust)}"

  def literal(self, value: Optional[str], rust_type: Optional[str] = None) -> str:
    return to_rust_literal(value, rust_type)

  def expr(self, source: Optional[str]) -> str:
    if source is None:
      return ""
    return to_rust_expr(source)

  def attributes(self) -> str:
    """Derive attribute followed by a newline, or nothing when no derives are configured."""
    attr = self.config.derive_attribute
    return f"{attr}\n" if attr else ""

  def block(self, lines: Iterable[str], depth: int = 1) -> str:
    """
    Joins lines into a brace-body block.

    Every line is emitted on its own row prefixed by a newline, so an empty
    iterable yields an empty string and ``{${body}\\n}`` stays well formed.
    Multi-line items are split and each row is indented.
    """
    pad = INDENT * depth
    rows = [row for line in lines for row in line.split("\n")]
    return "".join(f"\n{pad}{row}" if row else "\n" for row in rows)
