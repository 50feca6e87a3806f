"""
Orchestration Engine for Pattern Translation.

This module provides the `TranslationEngine`, the driver that turns source
fragments into Rust text. For each fragment the pipeline is:

1.  **Ingestion**: Parse the Python fragment with LibCST into `SourceNode`s,
    one per top-level statement. Pre-parsed nodes skip this phase.
2.  **Matching**: For every node, the `Matcher` selects the first catalog rule
    that accepts it and binds its captures. Nested constructs (generic types,
    expressions) are translated by the binders at this point.
3.  **Rendering**: The `Renderer` fills the rule's template.
4.  **Assembly**: Rendered statements are joined by a blank line.

Unmatched nodes follow the configured fallback policy (pass-through,
skip or fail). Any failure of a fragment is reported in its own
`TranslationResult`; it never affects other fragments of a batch and never
yields partial output.
"""

from typing import Iterable, List, Optional, Sequence, Union

from rich.markup import escape

from py2rs.config import RuntimeConfig
from py2rs.core.catalog import PatternCatalog, default_catalog
from py2rs.core.context import RuleContext
from py2rs.core.escape_hatch import EscapeHatch
from py2rs.core.ingestion import ingest
from py2rs.core.matcher import Matcher, NoMatch
from py2rs.core.nodes import SourceNode
from py2rs.core.renderer import Renderer
from py2rs.core.result import TranslationResult
from py2rs.core.tracer import TraceLogger
from py2rs.enums import FallbackPolicy
from py2rs.errors import MissingCapture, Py2RsError
from py2rs.utils.console import log_error, log_success, log_warning

Fragment = Union[str, SourceNode]


class TranslationEngine:
  """
  The main translation unit.

  Holds the read-only catalog and configuration. Translating a fragment
  creates no state shared with any other fragment.
  """

  def __init__(self, catalog: Optional[PatternCatalog] = None, config: Optional[RuntimeConfig] = None):
    """
    Initializes the Engine.

    Args:
        catalog: Rule catalog. Defaults to `default_catalog()`.
        config: Runtime configuration. Defaults to `RuntimeConfig()`.
    """
    self.catalog = catalog if catalog is not None else default_catalog()
    self.config = config or RuntimeConfig()
    self.matcher = Matcher(self.catalog, RuleContext(self.config))
    self.renderer = Renderer()

  def translate(self, fragment: str) -> TranslationResult:
    """
    Translates one Python source fragment.

    Args:
        fragment: Python source text, possibly holding several statements.

    Returns:
        TranslationResult: The Rust text, or a failure with its reason.
    """
    tracer = TraceLogger()
    tracer.start_phase("Ingestion", "Python source -> SourceNodes")
    try:
      nodes = ingest(fragment)
    except Py2RsError as e:
      tracer.end_phase()
      log_warning(f"Ingestion failed: {escape(str(e))}")
      return TranslationResult.failure(str(e), trace_events=tracer.export())
    tracer.end_phase()
    return self._translate_nodes(nodes, tracer)

  def translate_node(self, node: SourceNode) -> TranslationResult:
    """
    Translates a single pre-parsed node.

    Args:
        node: The node to translate.

    Returns:
        TranslationResult: The Rust text, or a failure carrying `node`.
    """
    return self._translate_nodes([node], TraceLogger())

  def translate_batch(self, fragments: Iterable[Fragment]) -> List[TranslationResult]:
    """
    Translates independent fragments.

    Args:
        fragments: Source strings and/or pre-parsed nodes.

    Returns:
        List[TranslationResult]: One result per fragment, in input order.
    """
    results = []
    for fragment in fragments:
      if isinstance(fragment, SourceNode):
        results.append(self.translate_node(fragment))
      else:
        results.append(self.translate(fragment))

    failed = sum(1 for r in results if not r.success)
    if failed:
      log_warning(f"Batch finished: {failed} of {len(results)} fragment(s) failed")
    else:
      log_success(f"Batch finished: {len(results)} fragment(s) translated")
    return results

  def _translate_nodes(self, nodes: Sequence[SourceNode], tracer: TraceLogger) -> TranslationResult:
    outputs: List[str] = []
    warnings: List[str] = []
    policy = self.config.effective_fallback

    tracer.start_phase("Translation", f"{len(nodes)} node(s)")
    for node in nodes:
      try:
        outcome = self.matcher.match(node)
        if isinstance(outcome, NoMatch):
          tracer.log_inspection(node.describe(), "no_match", outcome.reason)
          if policy == FallbackPolicy.FAIL:
            return self._fail(outcome.reason, node, tracer)
          warnings.append(outcome.reason)
          if policy == FallbackPolicy.SKIP:
            tracer.log_warning(f"Skipped {node.describe()}")
            continue
          tracer.log_warning(f"Passed through {node.describe()}")
          outputs.append(EscapeHatch.mark_failure(node.source, outcome.reason))
          continue

        tracer.log_match(node.kind.value, outcome.rule.name, outcome.captures)
        text = self.renderer.render(outcome.rule, outcome.captures)
        tracer.log_render(outcome.rule.name, node.source, text)
        outputs.append(text)
      except MissingCapture as e:
        log_error(f"Broken rule template: {escape(str(e))}")
        return self._fail(str(e), node, tracer)
      except Py2RsError as e:
        return self._fail(str(e), node, tracer)

    tracer.end_phase()
    return TranslationResult.ok("\n\n".join(outputs), warnings=warnings, trace_events=tracer.export())

  def _fail(self, reason: str, node: SourceNode, tracer: TraceLogger) -> TranslationResult:
    tracer.log_warning(reason)
    tracer.end_phase()
    log_warning(f"Translation failed for {escape(node.describe())}: {escape(reason)}")
    return TranslationResult.failure(reason, node=node, trace_events=tracer.export())
