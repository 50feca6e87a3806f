"""
Binding Rules.

Annotated assignments become ``let`` bindings. Optional values become
``Option<T>`` (``None`` / ``Some(v)``); upper-case names become constants.
"""

from typing import Dict

from py2rs.core.context import RuleContext
from py2rs.core.nodes import SourceNode
from py2rs.core.schema import Rule, Trigger
from py2rs.enums import NodeKind, NodeTag


def bind_binding(node: SourceNode, ctx: RuleContext) -> Dict[str, str]:
  rust_type = ctx.rust_type(node.get("annotation"))
  value = node.get("value")
  captures = {"name": node.get("name"), "rust_type": rust_type}
  if value is not None:
    captures["value"] = ctx.literal(value, rust_type)
    captures["initializer"] = f" = {captures['value']}"
  else:
    captures["initializer"] = ""
  return captures


def bind_optional(node: SourceNode, ctx: RuleContext) -> Dict[str, str]:
  """``x: int = None`` still yields ``Option<i64>``."""
  rust_type = ctx.rust_type(node.get("annotation"))
  if not rust_type.startswith("Option<"):
    rust_type = f"Option<{rust_type}>"
  value = node.get("value")
  return {
    "name": node.get("name"),
    "rust_type": rust_type,
    "value": "None" if value is None else ctx.literal(value, rust_type),
  }


def bind_constant(node: SourceNode, ctx: RuleContext) -> Dict[str, str]:
  captures = bind_binding(node, ctx)
  if captures["rust_type"] == "String":
    captures["rust_type"] = "&str"
    captures["value"] = ctx.expr(node.get("value"))
  return captures


def is_constant(node: SourceNode) -> bool:
  name = node.get("name") or ""
  return name.isupper() and node.get("value") is not None


RULES = [
  Rule(
    name="optional_binding",
    trigger=Trigger(kind=NodeKind.ANNOTATED_ASSIGN, require={NodeTag.OPTIONAL}),
    template="let mut ${name}: ${rust_type} = ${value};",
    binder=bind_optional,
    description="Optional[T] binding -> Option<T>",
  ),
  Rule(
    name="constant",
    trigger=Trigger(kind=NodeKind.ANNOTATED_ASSIGN),
    predicate=is_constant,
    template="pub const ${name}: ${rust_type} = ${value};",
    binder=bind_constant,
    description="UPPER_CASE binding -> const",
  ),
  Rule(
    name="typed_binding",
    trigger=Trigger(kind=NodeKind.ANNOTATED_ASSIGN),
    template="let ${name}: ${rust_type}${initializer};",
    binder=bind_binding,
    description="Annotated assignment -> let binding",
  ),
]
