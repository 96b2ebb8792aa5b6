"""
Request Context - State carried through one generation call.

The RequestContext is created by the orchestrator for every call and
passed down to the upload lifecycle. It carries the caller's cancellation
event, the current phase, usage statistics and non-fatal warnings. It is
never shared between calls.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict
from enum import Enum
import threading
import time
import uuid

from .errors import GenerationCancelled
from ..utils.logger import get_logger

logger = get_logger(__name__)


class GenerationPhase(Enum):
    """Current phase of the generation pipeline."""
    INITIALIZED = "initialized"
    RESOLVING = "resolving"
    STAGING = "staging"
    UPLOADING = "uploading"
    POLLING = "polling"
    PROMPTING = "prompting"
    GENERATING = "generating"
    WRITING = "writing"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class GenerationStats:
    """Statistics from one generation call."""
    llm_calls: int = 0
    input_tokens: int = 0
    output_tokens: int = 0

    # Upload lifecycle
    files_staged: int = 0
    files_uploaded: int = 0
    files_deleted: int = 0
    cleanup_failures: int = 0
    poll_rounds: int = 0

    # Seconds spent per phase
    phase_times: Dict[str, float] = field(default_factory=dict)


@dataclass
class RequestContext:
    """
    Per-call state for the generation pipeline.

    Cancellation is cooperative: stages call ``check_cancelled`` at safe
    points and polling waits on the event instead of sleeping, so setting
    the event aborts the call at the next check.
    """
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    cancel_event: Optional[threading.Event] = None

    phase: GenerationPhase = GenerationPhase.INITIALIZED
    stats: GenerationStats = field(default_factory=GenerationStats)
    warnings: List[str] = field(default_factory=list)

    _phase_started: float = field(default_factory=time.monotonic, repr=False)

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def check_cancelled(self, stage: Optional[str] = None) -> None:
        """
        Raise if the caller has cancelled the request.

        Raises:
            GenerationCancelled: If the cancel event is set
        """
        if self.cancelled:
            raise GenerationCancelled(stage or self.phase.value)

    def enter_phase(self, phase: GenerationPhase) -> None:
        """Record the end of the current phase and start a new one."""
        now = time.monotonic()
        elapsed = now - self._phase_started
        self.stats.phase_times[self.phase.value] = (
            self.stats.phase_times.get(self.phase.value, 0.0) + elapsed
        )
        self.phase = phase
        self._phase_started = now
        logger.debug(f"[{self.request_id}] phase -> {phase.value}")

        if phase not in (GenerationPhase.COMPLETE, GenerationPhase.FAILED):
            self.check_cancelled(phase.value)

    def wait(self, seconds: float) -> None:
        """
        Sleep for up to ``seconds``, waking early on cancellation.

        Raises:
            GenerationCancelled: If the cancel event is set while waiting
        """
        if self.cancel_event is None:
            time.sleep(seconds)
            return
        if self.cancel_event.wait(seconds):
            raise GenerationCancelled(self.phase.value)

    def add_warning(self, message: str) -> None:
        """Record a non-fatal issue."""
        self.warnings.append(message)
        logger.warning(f"[{self.request_id}] {message}")

    def record_usage(self, input_tokens: Optional[int], output_tokens: Optional[int]) -> None:
        """Accumulate token usage from one provider call."""
        self.stats.llm_calls += 1
        self.stats.input_tokens += input_tokens or 0
        self.stats.output_tokens += output_tokens or 0
