"""
Exception hierarchy for py2rs.

A "no match" outcome is deliberately absent here: it is a normal result
returned by the matcher (see `py2rs.core.matcher.NoMatch`), not an error.
"""

from typing import Iterable, Tuple


class Py2RsError(Exception):
  """Base class for every error raised by py2rs."""


class DuplicateRuleName(Py2RsError, ValueError):
  """
  Raised when a rule is registered under a name the catalog already holds.

  Attributes:
      name (str): The conflicting rule name.
  """

  def __init__(self, name: str):
    self.name = name
    super().__init__(f"Rule '{name}' is already registered in the catalog.")


class MissingCapture(Py2RsError):
  """
  Raised when a template references placeholders absent from the captures.

  This signals a rule authoring defect. It aborts the current translation
  only; other fragments are unaffected.

  Attributes:
      rule_name (str): Name of the rule whose template was rendered.
      missing (Tuple[str, ...]): Placeholder names with no capture value.
  """

  def __init__(self, rule_name: str, missing: Iterable[str]):
    self.rule_name = rule_name
    self.missing: Tuple[str, ...] = tuple(missing)
    names = ", ".join(self.missing)
    super().__init__(f"Rule '{rule_name}' is missing captures: {names}")


class IngestionError(Py2RsError):
  """Raised when a source fragment cannot be parsed."""


class TypeMappingError(Py2RsError, ValueError):
  """Raised when a type annotation cannot be translated."""


class BindingError(Py2RsError):
  """
  Raised when a rule cannot read the captures of a node it is tested against.

  Pre-parsed nodes may lack, or mistype, captures a predicate or binder
  relies on. The failure is reported for that node only.

  Attributes:
      rule_name (str): Name of the rule whose predicate or binder failed.
  """

  def __init__(self, rule_name: str, detail: str):
    self.rule_name = rule_name
    super().__init__(f"Rule '{rule_name}' cannot handle node: {detail}")
