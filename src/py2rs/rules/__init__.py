"""
Standard Rules Package.

Collects the built-in rules in document order: classes, functions, raises,
bindings, comprehensions. Within each module, specific rules precede the
general rules that would shadow them.
"""

from typing import List

from py2rs.core.schema import Rule
from py2rs.rules import bindings, classes, comprehensions, functions, raising

RULE_MODULES = (classes, functions, raising, bindings, comprehensions)


def standard_rules() -> List[Rule]:
  """Returns the standard rules in priority order."""
  return [rule for module in RULE_MODULES for rule in module.RULES]
