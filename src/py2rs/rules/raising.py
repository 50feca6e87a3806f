"""
Raise Rules.

Exceptions become early returns of an ``Err`` value. Builtin exception types
carry their message as a ``String``; user-defined exception types are
constructed through the ``new`` constructor generated by the ``error_type``
class rule.
"""

from typing import Dict

from py2rs.core.context import RuleContext
from py2rs.core.expressions import rust_string
from py2rs.core.nodes import SourceNode
from py2rs.core.schema import Condition, Rule, Trigger
from py2rs.enums import LogicOp, NodeKind, NodeTag

BUILTIN_EXCEPTIONS = [
  "Exception",
  "ValueError",
  "TypeError",
  "KeyError",
  "IndexError",
  "RuntimeError",
  "ZeroDivisionError",
  "ArithmeticError",
  "NotImplementedError",
  "AssertionError",
  "AttributeError",
  "LookupError",
  "OSError",
  "IOError",
  "FileNotFoundError",
  "PermissionError",
  "TimeoutError",
  "OverflowError",
  "StopIteration",
]


def bind_raise(node: SourceNode, ctx: RuleContext) -> Dict[str, str]:
  """
  The message is translated as an expression: string literals keep their
  text unchanged, f-strings become ``format!`` calls.
  """
  error_type = node.get("error_type")
  captures = {
    "error_type": error_type,
    "error_name": rust_string(error_type.rsplit(".", 1)[-1]),
  }
  source_message = node.get("message")
  if source_message is not None:
    message = ctx.expr(source_message)
    captures["message"] = message
    if message.startswith("format!("):
      captures["message_expr"] = message
    else:
      captures["message_expr"] = f"{message}.to_string()"
  return captures


RULES = [
  Rule(
    name="custom_error_result",
    trigger=Trigger(
      kind=NodeKind.RAISE,
      require={NodeTag.HAS_MESSAGE},
      conditions=[Condition(capture="error_type", op=LogicOp.NOT_IN, value=BUILTIN_EXCEPTIONS)],
    ),
    template="return Err(${error_type}::new(${message}));",
    binder=bind_raise,
    description="raise CustomError(msg) -> Err(CustomError::new(msg))",
  ),
  Rule(
    name="error_result",
    trigger=Trigger(kind=NodeKind.RAISE, require={NodeTag.HAS_MESSAGE}),
    template="return Err(${message_expr});",
    binder=bind_raise,
    description="raise Error(msg) -> Err(msg)",
  ),
  Rule(
    name="bare_error_result",
    trigger=Trigger(
      kind=NodeKind.RAISE,
      forbid={NodeTag.HAS_MESSAGE},
      conditions=[Condition(capture="error_type", op=LogicOp.NEQ, value="")],
    ),
    template="return Err(${error_name}.to_string());",
    binder=bind_raise,
    description="raise Error -> Err(\"Error\")",
  ),
]
