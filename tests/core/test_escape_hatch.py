"""
Tests for the pass-through markers.
"""

from py2rs.core.escape_hatch import EscapeHatch


def test_mark_failure_comments_every_line():
  block = EscapeHatch.mark_failure("with open(p) as f:\n\n    data = f.read()", "No rule matches unsupported")
  assert block.splitlines() == [
    "// <PY2RS_UNTRANSLATED>",
    "// Reason: No rule matches unsupported",
    "// with open(p) as f:",
    "//",
    "//     data = f.read()",
    "// </PY2RS_UNTRANSLATED>",
  ]


def test_is_marked():
  assert EscapeHatch.is_marked(EscapeHatch.mark_failure("x", "r"))
  assert not EscapeHatch.is_marked("let x = 1;")
