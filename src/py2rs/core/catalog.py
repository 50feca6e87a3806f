"""
Pattern Catalog.

An ordered collection of named conversion rules. Insertion order is priority
order: the matcher walks `rules()` front to back and the first accepting rule
wins, so specific constructs must be registered before the general rules
that would otherwise shadow them.

Rules are never removed and never mutated once registered.
"""

from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from py2rs.core.schema import Rule, RuleDef
from py2rs.errors import DuplicateRuleName
from py2rs.utils.console import log_info


class PatternCatalog:
  """
  Ordered, append-only registry of `Rule` objects.
  """

  def __init__(self, rules: Optional[Iterable[Rule]] = None):
    """
    Initializes the catalog.

    Args:
        rules: Optional initial rules, registered in iteration order.

    Raises:
        DuplicateRuleName: If two initial rules share a name.
    """
    self._rules: List[Rule] = []
    self._index: Dict[str, Rule] = {}
    for rule in rules or ():
      self.register(rule)

  def register(self, rule: Rule) -> Rule:
    """
    Appends a rule at the lowest priority position.

    Args:
        rule: The rule to add.

    Returns:
        Rule: The registered rule (allows chaining in builders).

    Raises:
        DuplicateRuleName: If a rule with the same name already exists.
            The catalog is left unchanged.
    """
    if rule.name in self._index:
      raise DuplicateRuleName(rule.name)
    self._rules.append(rule)
    self._index[rule.name] = rule
    return rule

  def rules(self) -> Tuple[Rule, ...]:
    """Returns the rules in priority (insertion) order."""
    return tuple(self._rules)

  def names(self) -> List[str]:
    return [r.name for r in self._rules]

  def get(self, name: str) -> Optional[Rule]:
    return self._index.get(name)

  def __len__(self) -> int:
    return len(self._rules)

  def __iter__(self) -> Iterator[Rule]:
    return iter(self.rules())

  def __contains__(self, name: object) -> bool:
    return name in self._index

  def __repr__(self) -> str:
    return f"PatternCatalog({self.names()!r})"

  @classmethod
  def from_definitions(cls, definitions: Iterable[Mapping[str, Any]]) -> "PatternCatalog":
    """
    Builds a catalog from plain-data rule definitions.

    Each mapping is validated against `RuleDef`. The build is all-or-nothing:
    an invalid definition or a duplicate name aborts it.

    Args:
        definitions: Mappings in priority order.

    Returns:
        PatternCatalog: The populated catalog.

    Raises:
        pydantic.ValidationError: If a definition is malformed.
        DuplicateRuleName: If two definitions share a name.
    """
    rules = [RuleDef.model_validate(dict(d)).to_rule() for d in definitions]
    catalog = cls(rules)
    log_info(f"Loaded {len(rules)} rule definition(s)")
    return catalog


def default_catalog() -> PatternCatalog:
  """
  Builds the catalog of standard Python -> Rust rules.

  Returns:
      PatternCatalog: A fresh catalog; callers may register extra rules on it.
  """
  from py2rs.rules import standard_rules

  return PatternCatalog(standard_rules())
