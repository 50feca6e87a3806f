"""
Tests for the Template Renderer.
"""

import pytest

from py2rs.core.renderer import Renderer, placeholders
from py2rs.core.schema import Rule, Trigger
from py2rs.enums import NodeKind
from py2rs.errors import MissingCapture


def _rule(template: str, name: str = "test_rule") -> Rule:
  return Rule(name=name, trigger=Trigger(kind=NodeKind.ANNOTATED_ASSIGN), template=template)


def test_placeholders_ordered_and_unique():
  assert placeholders("${b} ${a} ${b} $${c}") == ["b", "a"]
  assert placeholders("struct Point {}") == []


def test_render_substitutes_every_placeholder():
  rule = _rule("let ${name}: ${rust_type} = ${value};")
  out = Renderer().render(rule, {"name": "x", "rust_type": "i64", "value": "1"})
  assert out == "let x: i64 = 1;"


def test_render_is_deterministic_and_idempotent():
  rule = _rule("pub struct ${name} {${fields}\n}")
  captures = {"name": "Point", "fields": "\n    pub x: f64,"}
  renderer = Renderer()

  first = renderer.render(rule, captures)
  second = renderer.render(rule, captures)
  assert first == second
  assert Renderer().render(rule, dict(captures)) == first


def test_rust_braces_are_literal():
  rule = _rule("impl ${name} { fn f() {} }")
  assert Renderer().render(rule, {"name": "P"}) == "impl P { fn f() {} }"


def test_double_dollar_escapes():
  rule = _rule('macro_rules! ${name} { ($$x:expr) => {} }')
  assert Renderer().render(rule, {"name": "m"}) == "macro_rules! m { ($x:expr) => {} }"


def test_values_are_not_rescanned():
  """A capture value that looks like a placeholder is emitted verbatim."""
  rule = _rule("${a} ${b}")
  assert Renderer().render(rule, {"a": "${b}", "b": "2"}) == "${b} 2"


def test_extra_captures_are_ignored():
  rule = _rule("${name}")
  assert Renderer().render(rule, {"name": "x", "unused": "y"}) == "x"


def test_missing_capture_fails_without_output():
  rule = _rule("let ${name}: ${rust_type} = ${value};", name="typed_binding")

  with pytest.raises(MissingCapture) as excinfo:
    Renderer().render(rule, {"name": "x"})

  err = excinfo.value
  assert err.rule_name == "typed_binding"
  assert err.missing == ("rust_type", "value")
  assert "typed_binding" in str(err)
  assert "rust_type, value" in str(err)
