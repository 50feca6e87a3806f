"""
Function Rules.

A function whose body raises becomes fallible: its return type is wrapped in
``Result<T, String>``. Every other function keeps its translated return
type. Bodies are not translated; they are emitted as ``todo!()``.
"""

from typing import Dict

from py2rs.core.context import INDENT, RuleContext
from py2rs.core.nodes import SourceNode
from py2rs.core.schema import Rule, Trigger
from py2rs.core.types import UNIT_TYPE
from py2rs.enums import NodeKind, NodeTag
from py2rs.rules.utils import return_type, snake_case


def bind_function(node: SourceNode, ctx: RuleContext) -> Dict[str, str]:
  params = [node.get("receiver")] if node.get("receiver") else []
  params.extend(ctx.param(p) for p in node.get("params", ()))
  ok_type = return_type(node.get("returns"), ctx)
  return {
    "name": snake_case(node.get("name")),
    "params": ", ".join(params),
    "asyncness": "async " if node.get("is_async") else "",
    "ok_type": ok_type,
    "return_clause": "" if ok_type == UNIT_TYPE else f" -> {ok_type}",
  }


RULES = [
  Rule(
    name="fallible_function",
    trigger=Trigger(kind=NodeKind.FUNCTION_DEF, require={NodeTag.RAISES}),
    template=f"pub ${{asyncness}}fn ${{name}}(${{params}}) -> Result<${{ok_type}}, String> {{\n{INDENT}todo!()\n}}",
    binder=bind_function,
    description="Function raising exceptions -> fn returning Result",
  ),
  Rule(
    name="function",
    trigger=Trigger(kind=NodeKind.FUNCTION_DEF),
    template=f"pub ${{asyncness}}fn ${{name}}(${{params}})${{return_clause}} {{\n{INDENT}todo!()\n}}",
    binder=bind_function,
    description="Function signature -> fn signature",
  ),
]
