"""
Escape Hatch Mechanism for Untranslatable Code.

Statements no rule matches are, under the pass-through policy, kept in the
output as Rust line comments between two markers, so they are never emitted
silently and never break the surrounding Rust.

Transformation::

    print("hi")

Becomes::

    // <PY2RS_UNTRANSLATED>
    // Reason: No rule matches unsupported
    // print("hi")
    // </PY2RS_UNTRANSLATED>
"""


class EscapeHatch:
  """
  Handles the "Pass-Through" protocol.
  """

  START_MARKER = "// <PY2RS_UNTRANSLATED>"
  END_MARKER = "// </PY2RS_UNTRANSLATED>"

  @staticmethod
  def mark_failure(source: str, reason: str) -> str:
    """
    Wraps verbatim source in marker comments.

    Args:
        source: The original statement text.
        reason: Human-readable explanation of the failure.

    Returns:
        str: The commented block.
    """
    body = [f"// {line}" if line else "//" for line in source.splitlines()]
    return "\n".join([EscapeHatch.START_MARKER, f"// Reason: {reason}", *body, EscapeHatch.END_MARKER])

  @staticmethod
  def is_marked(code: str) -> bool:
    """Returns True if `code` contains a pass-through block."""
    return EscapeHatch.START_MARKER in code
