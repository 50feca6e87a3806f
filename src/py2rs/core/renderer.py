"""
Template Renderer.

Substitutes capture values into a rule's template. Placeholders use the
``${name}`` syntax so Rust braces need no escaping; ``$$`` renders a literal
dollar sign.

The renderer is flat: it performs no matching. Nested constructs must already
be translated by the binder before they reach the captures.
"""

import re
from typing import List, Mapping

from py2rs.core.schema import Rule
from py2rs.errors import MissingCapture

_PLACEHOLDER = re.compile(r"\$(?:(\$)|\{([A-Za-z_][A-Za-z0-9_]*)\})")


def placeholders(template: str) -> List[str]:
  """
  Lists the placeholder names referenced by a template.

  Args:
      template: Template text.

  Returns:
      List[str]: Names in order of first appearance, without duplicates.
  """
  names = [m.group(2) for m in _PLACEHOLDER.finditer(template) if m.group(2)]
  return list(dict.fromkeys(names))


class Renderer:
  """
  Renders matched rules into target text.
  """

  def render(self, rule: Rule, captures: Mapping[str, str]) -> str:
    """
    Fills every placeholder in `rule.template`.

    All placeholders are checked before substitution starts, so a failure
    never yields partial output.

    Args:
        rule: The matched rule.
        captures: Capture values keyed by placeholder name.

    Returns:
        str: The rendered target text.

    Raises:
        MissingCapture: If the template references a name absent from captures.
    """
    missing = [name for name in placeholders(rule.template) if name not in captures]
    if missing:
      raise MissingCapture(rule.name, missing)

    def _sub(match: "re.Match[str]") -> str:
      if match.group(1):
        return "$"
      return str(captures[match.group(2)])

    return _PLACEHOLDER.sub(_sub, rule.template)
