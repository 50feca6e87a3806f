"""
Tests for the Translation Engine.

Verifies:
- Statement outputs are assembled in source order.
- Fallback policies for unmatched statements (pass-through, skip, fail).
- Per-fragment failures (MissingCapture, syntax errors, bad annotations)
  never leak into other fragments of a batch.
"""

import pytest

import py2rs
from py2rs.config import RuntimeConfig
from py2rs.core.catalog import PatternCatalog
from py2rs.core.engine import TranslationEngine
from py2rs.core.escape_hatch import EscapeHatch
from py2rs.core.nodes import make_node
from py2rs.core.schema import Rule, Trigger
from py2rs.core.tracer import TraceEventType
from py2rs.enums import FallbackPolicy, NodeKind, NodeTag
from py2rs.rules import standard_rules


def _broken_catalog() -> PatternCatalog:
  broken = Rule(name="broken_raise", trigger=Trigger(kind=NodeKind.RAISE), template="return Err(${nothing});")
  return PatternCatalog([broken, *standard_rules()])


def test_statements_joined_in_order(engine):
  result = engine.translate("count: int = 0\nraise ValueError('bad')\n")
  assert result.success
  assert result.code == 'let count: i64 = 0;\n\nreturn Err("bad".to_string());'
  assert result.warnings == []
  assert not result.has_errors


def test_empty_fragment(engine):
  result = engine.translate("")
  assert result.success
  assert result.code == ""


def test_passthrough_is_default(engine):
  result = engine.translate("print('hi')")

  assert result.success
  assert EscapeHatch.is_marked(result.code)
  assert result.code == (
    "// <PY2RS_UNTRANSLATED>\n// Reason: No rule matches unsupported\n// print('hi')\n// </PY2RS_UNTRANSLATED>"
  )
  assert result.warnings == ["No rule matches unsupported"]


def test_skip_policy_drops_statement(catalog):
  engine = TranslationEngine(catalog=catalog, config=RuntimeConfig(fallback=FallbackPolicy.SKIP))
  result = engine.translate("x: int = 1\nprint(x)\n")

  assert result.success
  assert result.code == "let x: i64 = 1;"
  assert result.warnings == ["No rule matches unsupported"]


@pytest.mark.parametrize(
  "config",
  [RuntimeConfig(strict_mode=True), RuntimeConfig(fallback=FallbackPolicy.FAIL)],
)
def test_strict_mode_fails_fragment(catalog, config):
  engine = TranslationEngine(catalog=catalog, config=config)
  result = engine.translate("x: int = 1\nprint(x)\n")

  assert not result.success
  assert result.code == ""
  assert result.reason == "No rule matches unsupported"
  assert result.errors == ["No rule matches unsupported"]
  assert result.node.kind == NodeKind.UNSUPPORTED
  assert result.node.source == "print(x)"


def test_strict_mode_overrides_skip(catalog):
  config = RuntimeConfig(strict_mode=True, fallback=FallbackPolicy.SKIP)
  result = TranslationEngine(catalog=catalog, config=config).translate("print(1)")
  assert not result.success


def test_missing_capture_fails_only_its_fragment():
  engine = TranslationEngine(catalog=_broken_catalog())
  results = engine.translate_batch(["x: int = 1\nraise ValueError('x')", "y: int = 2"])

  failed, ok = results
  assert not failed.success
  assert failed.code == ""
  assert "broken_raise" in failed.reason
  assert "nothing" in failed.reason
  assert failed.node.kind == NodeKind.RAISE

  assert ok.success
  assert ok.code == "let y: i64 = 2;"


def test_syntax_error_is_a_failed_result(engine):
  results = engine.translate_batch(["def (", "z: int = 3"])

  assert not results[0].success
  assert results[0].node is None
  assert "Cannot parse fragment" in results[0].reason
  assert results[1].code == "let z: i64 = 3;"


def test_bad_annotation_is_a_failed_result(engine):
  node = make_node(NodeKind.ANNOTATED_ASSIGN, name="x", annotation="List[int", value="1")
  result = engine.translate_node(node)

  assert not result.success
  assert result.node is node
  assert "List[int" in result.reason


def test_translate_node(engine):
  node = make_node(
    NodeKind.RAISE,
    tags=[NodeTag.HAS_MESSAGE],
    error_type="ValueError",
    message='"Cannot divide by zero"',
  )
  result = engine.translate_node(node)
  assert result.code == 'return Err("Cannot divide by zero".to_string());'


def test_batch_preserves_order_and_accepts_nodes(engine):
  node = make_node(NodeKind.ANNOTATED_ASSIGN, name="b", annotation="bool", value="True")
  results = engine.translate_batch(["a: int = 1", node, "c: str = 'c'"])

  assert [r.code for r in results] == [
    "let a: i64 = 1;",
    "let b: bool = true;",
    'let c: String = "c".to_string();',
  ]


def test_batch_results_are_independent(engine):
  fragment = "x: int = 1"
  solo = engine.translate(fragment)
  batch = engine.translate_batch(["print(0)", fragment, "def ("])

  assert batch[1].code == solo.code
  assert batch[1].warnings == []


def test_malformed_node_fails_only_its_fragment(engine):
  """A pre-parsed node missing captures its rule reads is reported, not raised."""
  no_type = make_node(NodeKind.RAISE, tags=[NodeTag.HAS_MESSAGE], message='"boom"')
  results = engine.translate_batch(['raise ValueError("ok")', no_type, "x: int = 1"])

  assert len(results) == 3
  assert results[0].code == 'return Err("ok".to_string());'
  assert not results[1].success
  assert results[1].code == ""
  assert "error_result" in results[1].reason
  assert results[1].node.kind == NodeKind.RAISE
  assert results[2].code == "let x: i64 = 1;"


def test_unnamed_function_node_fails_only_its_fragment(engine):
  failed, ok = engine.translate_batch([make_node(NodeKind.FUNCTION_DEF), "x: int = 1"])

  assert not failed.success
  assert "cannot handle node" in failed.reason
  assert ok.code == "let x: i64 = 1;"


def test_trace_events(engine):
  result = engine.translate("x: int = 1")
  types = [e["kind"] for e in result.trace_events]

  assert types[0] == TraceEventType.PHASE_START
  assert TraceEventType.RULE_MATCH in types
  assert TraceEventType.RENDER in types
  match = next(e for e in result.trace_events if e["kind"] == TraceEventType.RULE_MATCH)
  assert match["data"]["rule"] == "typed_binding"
  assert match["data"]["captures"]["rust_type"] == "i64"


def test_trace_records_inspection_for_unmatched(engine):
  result = engine.translate("print(1)")
  inspections = [e for e in result.trace_events if e["kind"] == TraceEventType.INSPECTION]
  assert len(inspections) == 1
  assert inspections[0]["data"]["outcome"] == "no_match"


def test_failure_is_logged(catalog, captured_console):
  engine = TranslationEngine(catalog=catalog, config=RuntimeConfig(strict_mode=True))
  engine.translate("print(1)")

  output = captured_console.getvalue()
  assert "Translation failed" in output
  assert "No rule matches unsupported" in output


def test_type_overrides_reach_rules(catalog):
  engine = TranslationEngine(catalog=catalog, config=RuntimeConfig(type_overrides={"int": "i32"}))
  assert engine.translate("x: int = 1").code == "let x: i32 = 1;"


def test_derives_configurable(catalog):
  engine = TranslationEngine(catalog=catalog, config=RuntimeConfig(derives=[]))
  code = engine.translate("@dataclass\nclass P:\n    x: int\n").code
  assert code == "pub struct P {\n    pub x: i64,\n}"


def test_top_level_translate():
  assert py2rs.translate('raise ValueError("Cannot divide by zero")') == (
    'return Err("Cannot divide by zero".to_string());'
  )


def test_top_level_translate_raises_on_failure():
  with pytest.raises(ValueError, match="Translation failed"):
    py2rs.translate("print(1)", config=RuntimeConfig(strict_mode=True))


def test_broken_template_logged_as_error(captured_console):
  engine = TranslationEngine(catalog=_broken_catalog())
  engine.translate('raise ValueError("x")')

  output = captured_console.getvalue()
  assert "ERROR" in output
  assert "Broken rule template" in output


def test_batch_summary_is_logged(engine, captured_console):
  engine.translate_batch(["x: int = 1", "y: int = 2"])
  assert "2 fragment(s) translated" in captured_console.getvalue()

  engine.translate_batch(["x: int = 1", "def ("])
  assert "1 of 2 fragment(s) failed" in captured_console.getvalue()
