"""
Tests for the Matcher.

Verifies:
- The earliest registered accepting rule wins.
- Unmatched nodes produce a NoMatch value instead of raising.
- Matching leaves nodes and catalog untouched.
"""

import pytest

from py2rs.core.catalog import PatternCatalog
from py2rs.core.matcher import Match, Matcher, NoMatch
from py2rs.core.nodes import make_node
from py2rs.core.schema import Condition, Rule, Trigger
from py2rs.enums import LogicOp, NodeKind, NodeTag
from py2rs.errors import BindingError, TypeMappingError


def _optional_node():
  return make_node(
    NodeKind.ANNOTATED_ASSIGN,
    tags=[NodeTag.OPTIONAL],
    name="x",
    annotation="Optional[int]",
    value="None",
  )


def test_first_registered_rule_wins():
  specific = Rule(
    name="specific",
    trigger=Trigger(kind=NodeKind.ANNOTATED_ASSIGN, require={NodeTag.OPTIONAL}),
    template="specific",
  )
  general = Rule(name="general", trigger=Trigger(kind=NodeKind.ANNOTATED_ASSIGN), template="general")
  node = _optional_node()

  outcome = Matcher(PatternCatalog([specific, general])).match(node)
  assert isinstance(outcome, Match)
  assert outcome.rule.name == "specific"

  # Same rules, reversed registration: the general rule now shadows the specific one
  outcome = Matcher(PatternCatalog([general, specific])).match(node)
  assert outcome.rule.name == "general"


def test_candidates_lists_every_accepting_rule_in_order():
  a = Rule(name="a", trigger=Trigger(kind=NodeKind.ANNOTATED_ASSIGN), template="")
  b = Rule(name="b", trigger=Trigger(kind=NodeKind.RAISE), template="")
  c = Rule(name="c", trigger=Trigger(kind=NodeKind.ANNOTATED_ASSIGN, require={NodeTag.OPTIONAL}), template="")
  matcher = Matcher(PatternCatalog([a, b, c]))

  assert [r.name for r in matcher.candidates(_optional_node())] == ["a", "c"]


def test_no_match_is_a_value():
  catalog = PatternCatalog([Rule(name="raise_only", trigger=Trigger(kind=NodeKind.RAISE), template="")])
  node = make_node(NodeKind.CLASS_DEF, name="Point")

  outcome = Matcher(catalog).match(node)

  assert isinstance(outcome, NoMatch)
  assert outcome.node is node
  assert "class_def 'Point'" in outcome.reason


def test_no_match_on_empty_catalog():
  outcome = Matcher(PatternCatalog()).match(make_node(NodeKind.UNSUPPORTED, source="print(1)"))
  assert isinstance(outcome, NoMatch)
  assert outcome.reason == "No rule matches unsupported"


def test_forbidden_tags_reject():
  rule = Rule(
    name="bare",
    trigger=Trigger(kind=NodeKind.RAISE, forbid={NodeTag.HAS_MESSAGE}),
    template="",
  )
  matcher = Matcher(PatternCatalog([rule]))

  assert isinstance(matcher.match(make_node(NodeKind.RAISE, error_type="E")), Match)
  assert isinstance(matcher.match(make_node(NodeKind.RAISE, tags=[NodeTag.HAS_MESSAGE], error_type="E")), NoMatch)


@pytest.mark.parametrize(
  "op, value, expected",
  [
    (LogicOp.EQ, "ValueError", True),
    (LogicOp.NEQ, "ValueError", False),
    (LogicOp.IN, ["KeyError", "ValueError"], True),
    (LogicOp.NOT_IN, ["KeyError", "ValueError"], False),
    (LogicOp.IS_TYPE, "str", True),
    (LogicOp.GT, 3, False),
  ],
)
def test_conditions(op, value, expected):
  rule = Rule(
    name="cond",
    trigger=Trigger(kind=NodeKind.RAISE, conditions=[Condition(capture="error_type", op=op, value=value)]),
    template="",
  )
  node = make_node(NodeKind.RAISE, error_type="ValueError")
  assert rule.accepts(node) is expected


def test_numeric_conditions():
  node = make_node(NodeKind.RAISE, arity=2)
  assert Condition(capture="arity", op=LogicOp.GTE, value=2).holds(node)
  assert Condition(capture="arity", op=LogicOp.LT, value=3).holds(node)
  assert not Condition(capture="arity", op=LogicOp.LTE, value=1).holds(node)


def test_condition_on_missing_capture_never_holds():
  node = make_node(NodeKind.RAISE)
  assert not Condition(capture="error_type", op=LogicOp.NEQ, value="").holds(node)


def test_predicate_is_evaluated_after_trigger():
  seen = []

  def _predicate(node):
    seen.append(node)
    return node.get("name") == "LIMIT"

  rule = Rule(name="const", trigger=Trigger(kind=NodeKind.ANNOTATED_ASSIGN), predicate=_predicate, template="")
  matcher = Matcher(PatternCatalog([rule]))

  assert isinstance(matcher.match(make_node(NodeKind.ANNOTATED_ASSIGN, name="LIMIT")), Match)
  assert isinstance(matcher.match(make_node(NodeKind.ANNOTATED_ASSIGN, name="limit")), NoMatch)
  # Wrong kind never reaches the predicate
  matcher.match(make_node(NodeKind.RAISE, name="LIMIT"))
  assert len(seen) == 2


def test_default_binder_stringifies_scalars():
  rule = Rule(name="a", trigger=Trigger(kind=NodeKind.FUNCTION_DEF), template="")
  node = make_node(NodeKind.FUNCTION_DEF, name="run", is_async=True, arity=2, params=["a", "b"], returns=None)

  outcome = Matcher(PatternCatalog([rule])).match(node)

  assert dict(outcome.captures) == {"name": "run", "is_async": "true", "arity": "2"}


def test_match_does_not_mutate():
  rule = Rule(name="a", trigger=Trigger(kind=NodeKind.ANNOTATED_ASSIGN), template="${name}")
  catalog = PatternCatalog([rule])
  node = _optional_node()
  before = dict(node.captures)

  outcome = Matcher(catalog).match(node)

  assert dict(node.captures) == before
  assert catalog.names() == ["a"]
  with pytest.raises(TypeError):
    outcome.captures["name"] = "y"


def test_binder_failure_on_missing_capture():
  def _upper_name(node, ctx):
    return {"name": node.get("name").upper()}

  rule = Rule(name="upper", trigger=Trigger(kind=NodeKind.RAISE), template="${name}", binder=_upper_name)

  with pytest.raises(BindingError) as exc:
    Matcher(PatternCatalog([rule])).match(make_node(NodeKind.RAISE))

  assert exc.value.rule_name == "upper"
  assert isinstance(exc.value.__cause__, AttributeError)


def test_predicate_failure_on_mistyped_capture():
  rule = Rule(
    name="upper_only",
    trigger=Trigger(kind=NodeKind.ANNOTATED_ASSIGN),
    predicate=lambda node: node.get("name").isupper(),
    template="",
  )

  with pytest.raises(BindingError):
    Matcher(PatternCatalog([rule])).match(make_node(NodeKind.ANNOTATED_ASSIGN, name=5))


def test_binder_errors_keep_their_type():
  def _bad_type(node, ctx):
    raise TypeMappingError("Cannot parse annotation 'List['")

  rule = Rule(name="typed", trigger=Trigger(kind=NodeKind.RAISE), template="", binder=_bad_type)

  with pytest.raises(TypeMappingError):
    Matcher(PatternCatalog([rule])).match(make_node(NodeKind.RAISE))
