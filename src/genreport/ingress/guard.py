# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Ingress guard: bounded fixed-interval retries around file processing.

A producer may still be writing a report when its creation is announced.
The guard waits a settle delay, then attempts processing; read contention is
retried after a fixed delay until the attempt ceiling is reached, while any
other failure ends the file immediately.

State machine per file::

    NOTIFIED -> ATTEMPTING -> DONE
                ATTEMPTING -> FAILED       (malformed input, computation, output I/O)
                ATTEMPTING -> RETRYING -> ATTEMPTING
                RETRYING   -> ABANDONED    (ceiling reached, or cancelled)
    NOTIFIED -> ABANDONED                  (cancelled while settling)
"""

from __future__ import annotations

import functools
import logging
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from ..analysis import process_and_write
from ..core.primitives import AttemptOutcome, GenReportSettings, IngressState, RetrySettings
from ..exceptions import GenReportError, TransientAccessError
from ..reference import ReferenceFactors

logger = logging.getLogger(__name__)

FileProcessor = Callable[[Path], Path]


@dataclass
class IngressResult:
    """
    Terminal outcome of guarding one file.

    Attributes:
        path: Input file
        state: DONE, FAILED or ABANDONED
        attempts: Processing attempts made
        output_path: Written output document (DONE only)
        error: Last error seen (FAILED / ABANDONED)
        waited_seconds: Total settle and retry delay requested
        elapsed_seconds: Wall-clock time from notification to terminal state
        history: Every state the file passed through, in order
    """

    path: Path
    state: IngressState
    attempts: int = 0
    output_path: Optional[Path] = None
    error: Optional[BaseException] = None
    waited_seconds: float = 0.0
    elapsed_seconds: float = 0.0
    history: List[IngressState] = field(default_factory=list)
    started_at: float = field(default_factory=time.perf_counter, repr=False)

    @property
    def succeeded(self) -> bool:
        return self.state == IngressState.DONE


class IngressGuard:
    """
    Turns a new-file notification into a safely retried processing run.

    The guard itself keeps no per-file state, so one instance can serve
    concurrent workers. ``cancel()`` stops every in-flight retry sequence;
    those files end ABANDONED. ``reset()`` re-arms a cancelled guard.

    Example:
        ```python
        guard = IngressGuard.from_settings(settings, reference)
        result = guard.handle(Path("inbox/01-Basic.xml"))
        if result.succeeded:
            print(result.output_path)
        ```
    """

    def __init__(
        self,
        processor: FileProcessor,
        retry: Optional[RetrySettings] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.processor = processor
        self.retry = retry or RetrySettings()
        self._cancel_event = cancel_event or threading.Event()

    @classmethod
    def from_settings(
        cls,
        settings: GenReportSettings,
        reference: ReferenceFactors,
        cancel_event: Optional[threading.Event] = None,
    ) -> "IngressGuard":
        processor = functools.partial(
            process_and_write,
            reference=reference,
            output_folder=settings.output_folder,
            settings=settings.calculation,
            suffix=settings.output_suffix,
        )
        return cls(processor, retry=settings.retry, cancel_event=cancel_event)

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        self._cancel_event.set()

    def reset(self) -> None:
        self._cancel_event.clear()

    def handle(self, path: Union[str, Path]) -> IngressResult:
        """Run the per-file state machine to a terminal state."""
        result = IngressResult(path=Path(path), state=IngressState.NOTIFIED)
        result.history.append(IngressState.NOTIFIED)

        if self._wait(self.retry.settle_delay_seconds, result):
            return self._abandon(result, "cancelled before first attempt")

        while True:
            self._transition(result, IngressState.ATTEMPTING)
            result.attempts += 1
            outcome, output_path, error = self._attempt(result.path)

            if outcome == AttemptOutcome.SUCCESS:
                result.output_path = output_path
                self._transition(result, IngressState.DONE)
                logger.info(
                    f"Processed {result.path.name} in {result.elapsed_seconds:.3f}s "
                    f"({result.attempts} attempt(s))"
                )
                return result

            result.error = error
            if outcome == AttemptOutcome.FATAL:
                logger.error(f"Error processing XML file {result.path}: {error}")
                self._transition(result, IngressState.FAILED)
                return result

            logger.warning(f"Retry {result.attempts} - {error}")
            self._transition(result, IngressState.RETRYING)
            if result.attempts >= self.retry.max_attempts:
                return self._abandon(
                    result, f"still in use after {result.attempts} attempts"
                )
            if self._wait(self.retry.delay_seconds, result):
                return self._abandon(result, "cancelled while retrying")

    def _attempt(
        self, path: Path
    ) -> Tuple[AttemptOutcome, Optional[Path], Optional[BaseException]]:
        try:
            output_path = self.processor(path)
        except TransientAccessError as e:
            return AttemptOutcome.RETRYABLE, None, e
        except GenReportError as e:
            return AttemptOutcome.FATAL, None, e
        except Exception as e:
            logger.exception(f"Unexpected failure processing {path}")
            return AttemptOutcome.FATAL, None, e
        return AttemptOutcome.SUCCESS, output_path, None

    def _wait(self, seconds: float, result: IngressResult) -> bool:
        """Block for a fixed delay; returns True when cancelled instead."""
        if self._cancel_event.is_set():
            return True
        if seconds <= 0:
            return False
        result.waited_seconds += seconds
        return self._cancel_event.wait(seconds)

    def _transition(self, result: IngressResult, state: IngressState) -> None:
        logger.debug(f"{result.path.name}: {result.state.value} -> {state.value}")
        result.state = state
        result.history.append(state)
        if state.is_terminal:
            result.elapsed_seconds = time.perf_counter() - result.started_at

    def _abandon(self, result: IngressResult, reason: str) -> IngressResult:
        logger.error(f"File '{result.path}' abandoned ({reason}). Skipping.")
        self._transition(result, IngressState.ABANDONED)
        return result

