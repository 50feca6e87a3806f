"""
Rule Matcher.

Selects the rule that applies to a `SourceNode`. The catalog is consulted in
priority order and the earliest-registered accepting rule wins, which makes
catalog order part of the observable contract.

Failing to find a rule is an expected outcome, reported as a `NoMatch` value
rather than an exception. Matching is side-effect free.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Mapping, Optional, Union

from py2rs.core.catalog import PatternCatalog
from py2rs.core.context import RuleContext
from py2rs.core.nodes import SourceNode
from py2rs.core.schema import Rule
from py2rs.errors import BindingError, Py2RsError


@dataclass(frozen=True)
class Match:
  """A selected rule together with the captures bound from the node."""

  rule: Rule
  captures: Mapping[str, str]


@dataclass(frozen=True)
class NoMatch:
  """No rule in the catalog accepts the node."""

  node: SourceNode
  reason: str


MatchOutcome = Union[Match, NoMatch]


class Matcher:
  """
  Walks a catalog in order and binds captures for the first accepting rule.
  """

  def __init__(self, catalog: PatternCatalog, context: Optional[RuleContext] = None):
    """
    Args:
        catalog: The rule catalog to consult.
        context: Context handed to binders. Defaults to a context built on
            the default `RuntimeConfig`.
    """
    self.catalog = catalog
    self.context = context or RuleContext()

  def match(self, node: SourceNode) -> MatchOutcome:
    """
    Finds the first rule accepting `node`.

    Args:
        node: The node to match.

    Returns:
        Match: The winning rule and its captures.
        NoMatch: If no rule accepts the node.

    Raises:
        Py2RsError: If the winning rule's binder cannot translate a capture
            (e.g. `TypeMappingError`), or `BindingError` when the node lacks
            or mistypes a capture the rule reads.
    """
    for rule in self.catalog.rules():
      try:
        if not rule.accepts(node):
          continue
        captures = dict(rule.bind(node, self.context))
      except Py2RsError:
        raise
      except (AttributeError, IndexError, KeyError, TypeError, ValueError) as e:
        raise BindingError(rule.name, f"{type(e).__name__}: {e}") from e
      return Match(rule=rule, captures=MappingProxyType(captures))

    return NoMatch(node=node, reason=f"No rule matches {node.describe()}")

  def candidates(self, node: SourceNode) -> List[Rule]:
    """
    Lists every rule that accepts `node`, in priority order.

    The first element, if any, is the rule `match` selects.
    """
    return [rule for rule in self.catalog.rules() if rule.accepts(node)]
