"""
Translation Trace.

Records what happened while one fragment was translated: phases opened and
closed, the rule chosen for each node, the text it rendered, nodes no rule
accepted, and fallbacks taken. Events are exported as plain dictionaries
(ready for ``json.dumps``) into `TranslationResult.trace_events`.

Events point at their enclosing phase through ``phase_id``. For a
``phase_end`` event, ``phase_id`` is the phase being closed.
"""

import time
import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class TraceEventType(str, Enum):
  PHASE_START = "phase_start"
  PHASE_END = "phase_end"
  RULE_MATCH = "rule_match"
  RENDER = "render"
  INSPECTION = "inspection"
  WARNING = "warning"


@dataclass
class TraceEvent:
  event_id: str
  kind: TraceEventType
  label: str
  phase_id: Optional[str] = None
  data: Dict[str, Any] = field(default_factory=dict)
  at: float = field(default_factory=time.time)


class TraceLogger:
  """
  Event recorder for a single translation call.

  Not shared: the engine creates a new logger for every fragment.
  """

  def __init__(self) -> None:
    self._events: List[TraceEvent] = []
    self._open: List[str] = []

  @property
  def current_phase(self) -> Optional[str]:
    return self._open[-1] if self._open else None

  def _record(self, event_type: TraceEventType, label: str, phase_id: Optional[str] = None, **data: Any) -> str:
    event = TraceEvent(
      event_id=uuid.uuid4().hex,
      kind=event_type,
      label=label,
      phase_id=phase_id if phase_id is not None else self.current_phase,
      data=data,
    )
    self._events.append(event)
    return event.event_id

  def start_phase(self, name: str, description: str = "") -> str:
    """
    Opens a phase nested in the current one.

    Returns:
        str: The phase id, referenced by events recorded inside it.
    """
    phase_id = self._record(TraceEventType.PHASE_START, name, detail=description)
    self._open.append(phase_id)
    return phase_id

  def end_phase(self) -> None:
    """Closes the innermost open phase. Does nothing when none is open."""
    if self._open:
      closing = self._open.pop()
      self._record(TraceEventType.PHASE_END, "end", phase_id=closing)

  def log_match(self, node_kind: str, rule_name: str, captures: Mapping[str, str]) -> None:
    self._record(
      TraceEventType.RULE_MATCH,
      f"{node_kind} -> {rule_name}",
      kind=node_kind,
      rule=rule_name,
      captures=dict(captures),
    )

  def log_render(self, rule_name: str, before: str, after: str) -> None:
    self._record(TraceEventType.RENDER, rule_name, before=before, after=after)

  def log_inspection(self, node_str: str, outcome: str, detail: str = "") -> None:
    """Notes a node examined without a rule being applied."""
    self._record(TraceEventType.INSPECTION, node_str, outcome=outcome, detail=detail)

  def log_warning(self, message: str) -> None:
    self._record(TraceEventType.WARNING, message)

  def export(self) -> List[Dict[str, Any]]:
    return [asdict(e) for e in self._events]
