"""
Comprehension Rules.

Comprehensions become iterator chains: ``filter`` for ``if`` clauses,
``map`` for the element expression and ``collect`` into the matching
collection. Generator expressions stay lazy and are not collected.
"""

from typing import Dict

from py2rs.core.context import RuleContext
from py2rs.core.nodes import SourceNode
from py2rs.core.schema import Rule, Trigger
from py2rs.enums import NodeKind, NodeTag

_COLLECTORS = {
  NodeTag.LIST_COMP: ".collect::<Vec<_>>()",
  NodeTag.SET_COMP: ".collect::<HashSet<_>>()",
  NodeTag.DICT_COMP: ".collect::<HashMap<_, _>>()",
  NodeTag.GENERATOR: "",
}

_ITERATOR_SUFFIXES = (".iter()", ".keys()", ".values()", ".chars()")


def source_iterator(iterable: str, ctx: RuleContext) -> str:
  """
  ``range(n)`` -> ``(0..n)``, ``d.items()`` -> ``d.iter()``, ``xs`` -> ``xs.iter()``.
  """
  expr = ctx.expr(iterable)
  if expr.startswith("(") and ".." in expr:
    return expr
  if expr.endswith(_ITERATOR_SUFFIXES):
    return expr
  return f"{expr}.iter()"


def bind_comprehension(node: SourceNode, ctx: RuleContext) -> Dict[str, str]:
  variable = ctx.expr(node.get("variable"))
  target = node.get("target")
  collector = next((c for tag, c in _COLLECTORS.items() if tag in node.tags), "")

  captures = {
    "binding": f"let {target} = " if target else "",
    "variable": variable,
    "source_iter": source_iterator(node.get("iterable"), ctx),
    "collector": collector,
    "filter_stage": "",
  }
  for name in ("element", "key", "value"):
    if node.get(name) is not None:
      captures[name] = ctx.expr(node.get(name))
  if node.get("condition") is not None:
    captures["condition"] = ctx.expr(node.get("condition"))
    captures["filter_stage"] = f".filter(|&{variable}| {captures['condition']})"
  return captures


RULES = [
  Rule(
    name="dict_comprehension",
    trigger=Trigger(kind=NodeKind.COMPREHENSION, require={NodeTag.DICT_COMP}),
    template="${binding}${source_iter}${filter_stage}.map(|${variable}| (${key}, ${value}))${collector};",
    binder=bind_comprehension,
    description="{k: v for ...} -> iterator chain collected into a HashMap",
  ),
  Rule(
    name="filtered_comprehension",
    trigger=Trigger(kind=NodeKind.COMPREHENSION, require={NodeTag.FILTERED}),
    template="${binding}${source_iter}.filter(|&${variable}| ${condition}).map(|${variable}| ${element})${collector};",
    binder=bind_comprehension,
    description="[f(x) for x in xs if p(x)] -> filter + map + collect",
  ),
  Rule(
    name="comprehension",
    trigger=Trigger(kind=NodeKind.COMPREHENSION),
    template="${binding}${source_iter}.map(|${variable}| ${element})${collector};",
    binder=bind_comprehension,
    description="[f(x) for x in xs] -> map + collect",
  ),
]
