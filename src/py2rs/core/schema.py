"""
Rule Definition Schema.

This module defines the Pydantic models describing a conversion rule:

- `Condition`: a single test over one capture, using a `LogicOp`.
- `Trigger`: the declarative predicate (node kind, required/forbidden tags,
  conditions).
- `Rule`: a named mapping from a trigger to a target template, with an
  optional binder that extracts captures and an optional extra predicate.
- `RuleDef`: the plain-data form of a rule, validated before catalog
  construction (see `PatternCatalog.from_definitions`).

Rules are frozen: once built they are never mutated.
"""

from typing import Any, Callable, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from py2rs.core.nodes import SourceNode
from py2rs.enums import LogicOp, NodeKind, NodeTag

# (node, context) -> captures. The context is a `py2rs.core.context.RuleContext`.
Binder = Callable[[SourceNode, Any], Dict[str, str]]
Predicate = Callable[[SourceNode], bool]


class Condition(BaseModel):
  """
  Test over a single capture value.

  A condition on a capture the node does not carry never holds.
  """

  model_config = ConfigDict(frozen=True)

  capture: str = Field(..., description="Name of the capture to test.")
  op: LogicOp = Field(LogicOp.EQ, description="Comparison operator.")
  value: Any = Field(None, description="Operand. A list for 'in'/'not_in', a type name for 'is_type'.")

  def holds(self, node: SourceNode) -> bool:
    """
    Evaluates the condition against a node.

    Args:
        node: The node whose captures are tested.

    Returns:
        bool: True if the capture exists and satisfies the operator.
    """
    if self.capture not in node.captures:
      return False
    actual = node.captures[self.capture]

    if self.op == LogicOp.EQ:
      return actual == self.value
    if self.op == LogicOp.NEQ:
      return actual != self.value
    if self.op == LogicOp.IN:
      return actual in (self.value or ())
    if self.op == LogicOp.NOT_IN:
      return actual not in (self.value or ())
    if self.op == LogicOp.IS_TYPE:
      return type(actual).__name__ == self.value

    try:
      if self.op == LogicOp.GT:
        return actual > self.value
      if self.op == LogicOp.LT:
        return actual < self.value
      if self.op == LogicOp.GTE:
        return actual >= self.value
      if self.op == LogicOp.LTE:
        return actual <= self.value
    except TypeError:
      return False
    return False


class Trigger(BaseModel):
  """
  Declarative trigger predicate over a node's shape.
  """

  model_config = ConfigDict(frozen=True)

  kind: NodeKind = Field(..., description="Node kind the rule applies to.")
  require: FrozenSet[NodeTag] = Field(default_factory=frozenset, description="Tags that must all be present.")
  forbid: FrozenSet[NodeTag] = Field(default_factory=frozenset, description="Tags that must all be absent.")
  conditions: List[Condition] = Field(default_factory=list, description="Capture tests that must all hold.")

  def matches(self, node: SourceNode) -> bool:
    if node.kind != self.kind:
      return False
    if not self.require <= node.tags:
      return False
    if self.forbid & node.tags:
      return False
    return all(c.holds(node) for c in self.conditions)


def default_binder(node: SourceNode, _ctx: Any = None) -> Dict[str, str]:
  """
  Exposes the node's scalar captures as strings.

  Captures that are None or structured (tuples, fields) are omitted, so a
  template referencing them fails with `MissingCapture`.
  """
  bound = {}
  for key, value in node.captures.items():
    if isinstance(value, bool):
      bound[key] = "true" if value else "false"
    elif isinstance(value, (str, int, float)):
      bound[key] = str(value)
  return bound


class Rule(BaseModel):
  """
  A named conversion rule.

  Attributes:
      name: Unique identifier within a catalog.
      trigger: Declarative predicate over the node shape.
      template: Target text with ``${capture}`` placeholders.
      binder: Extracts captures from a matched node. Defaults to `default_binder`.
      predicate: Optional extra test, evaluated after the trigger.
      description: Human readable summary.
  """

  model_config = ConfigDict(frozen=True)

  name: str = Field(..., min_length=1)
  trigger: Trigger
  template: str
  binder: Optional[Binder] = None
  predicate: Optional[Predicate] = None
  description: str = ""

  def accepts(self, node: SourceNode) -> bool:
    """Returns True if the trigger and the optional predicate both accept the node."""
    if not self.trigger.matches(node):
      return False
    if self.predicate is not None and not self.predicate(node):
      return False
    return True

  def bind(self, node: SourceNode, ctx: Any = None) -> Dict[str, str]:
    """Extracts the capture bindings for this rule's template."""
    binder = self.binder or default_binder
    return binder(node, ctx)


class RuleDef(BaseModel):
  """
  Plain-data definition of a template-only rule.

  Example:
      .. code-block:: python

          {
            "name": "option_type",
            "kind": "annotated_assign",
            "require": ["optional"],
            "template": "let ${name}: Option<_> = None;",
          }
  """

  name: str = Field(..., min_length=1, description="Unique rule name.")
  kind: NodeKind = Field(..., description="Node kind the rule applies to.")
  require: List[NodeTag] = Field(default_factory=list)
  forbid: List[NodeTag] = Field(default_factory=list)
  conditions: List[Condition] = Field(default_factory=list)
  template: str = Field(..., description="Target template with ${capture} placeholders.")
  description: str = ""

  def to_rule(self) -> Rule:
    return Rule(
      name=self.name,
      trigger=Trigger(
        kind=self.kind,
        require=frozenset(self.require),
        forbid=frozenset(self.forbid),
        conditions=self.conditions,
      ),
      template=self.template,
      description=self.description,
    )
