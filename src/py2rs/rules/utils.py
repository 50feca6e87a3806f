"""
Shared helpers for rule binders.
"""

import re
from typing import Iterable, List, Optional

from py2rs.core.context import INDENT, RuleContext
from py2rs.core.nodes import Field, Method
from py2rs.core.types import UNIT_TYPE


def pascal_case(name: str) -> str:
  """
  ``DARK_RED`` / ``dark_red`` -> ``DarkRed``. Names already in mixed case are kept.
  """
  if "_" not in name and not name.isupper():
    return name[:1].upper() + name[1:]
  return "".join(part.capitalize() for part in name.split("_") if part)


def snake_case(name: str) -> str:
  """``getValue`` -> ``get_value``, ``HTTPServer`` -> ``http_server``."""
  name = re.sub(r"(?<=[A-Z])([A-Z][a-z])", r"_\1", name)
  return re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", name).lower()


def return_type(returns: Optional[str], ctx: RuleContext) -> str:
  """Translated return annotation; a missing annotation means unit."""
  if returns is None:
    return UNIT_TYPE
  return ctx.rust_type(returns)


def signature(
  name: str,
  params: Iterable[Field],
  returns: Optional[str],
  ctx: RuleContext,
  receiver: Optional[str] = None,
  fallible: bool = False,
  visibility: str = "pub ",
) -> str:
  """
  Renders a Rust function signature (without body).

  Args:
      name: Source function name, converted to snake case.
      params: Parameters, receiver excluded.
      returns: Return annotation source, or None.
      ctx: Binder context.
      receiver: ``&self`` / ``&mut self`` for methods.
      fallible: Wrap the return type in ``Result<_, String>``.
      visibility: Prefix such as ``pub `` or an empty string.
  """
  parts = [receiver] if receiver else []
  parts.extend(ctx.param(p) for p in params)
  ret = return_type(returns, ctx)
  if fallible:
    clause = f" -> Result<{ret}, String>"
  elif ret == UNIT_TYPE:
    clause = ""
  else:
    clause = f" -> {ret}"
  return f"{visibility}fn {snake_case(name)}({', '.join(parts)}){clause}"


def method_stub(method: Method, ctx: RuleContext, visibility: str = "pub ") -> str:
  """A method signature with a ``todo!()`` body."""
  sig = signature(
    method.name,
    method.params,
    method.returns,
    ctx,
    receiver=method.receiver,
    fallible=method.raises,
    visibility=visibility,
  )
  return f"{sig} {{\n{INDENT}todo!()\n}}"


def field_lines(fields: Iterable[Field], ctx: RuleContext, visibility: str = "pub ") -> str:
  return ctx.block(f"{visibility}{f.name}: {ctx.rust_type(f.annotation)}," for f in fields)


def impl_block(name: str, methods: Iterable[Method], ctx: RuleContext) -> str:
  """
  Inherent ``impl`` block holding method stubs, preceded by a blank line.

  Returns an empty string when there are no methods.
  """
  stubs = [method_stub(m, ctx) for m in methods]
  if not stubs:
    return ""
  return f"\n\nimpl {name} {{{ctx.block(spaced(stubs))}\n}}"


def spaced(items: Iterable[str]) -> List[str]:
  """Interleaves blank rows between multi-line items."""
  out = []
  for i, item in enumerate(items):
    if i:
      out.append("")
    out.append(item)
  return out
