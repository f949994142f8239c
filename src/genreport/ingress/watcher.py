# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Directory watcher dispatching new generation reports to the ingress guard.

Each matching file created in (or moved into) the input folder becomes one
independent unit of work on a thread pool. A path already in flight is not
dispatched again until its guard reaches a terminal state.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from watchdog.events import FileSystemEvent, PatternMatchingEventHandler
from watchdog.observers import Observer

from ..core.primitives import GenReportSettings
from ..reference import ReferenceFactors
from .guard import IngressGuard, IngressResult

logger = logging.getLogger(__name__)


class ReportFileHandler(PatternMatchingEventHandler):
    """Forward created/moved-in report files to a dispatch callable."""

    def __init__(self, dispatch: Callable[[Path], object], pattern: str = "*.xml"):
        super().__init__(patterns=[pattern], ignore_directories=True, case_sensitive=False)
        self._dispatch = dispatch

    def on_created(self, event: FileSystemEvent) -> None:
        self._dispatch(Path(os.fsdecode(event.src_path)))

    def on_moved(self, event: FileSystemEvent) -> None:
        self._dispatch(Path(os.fsdecode(event.dest_path)))


class ReportWatcher:
    """
    Watch the input folder and process every new report exactly once.

    Usage:
        >>> with ReportWatcher(settings, reference) as watcher:
        ...     watcher.run_forever()  # until Ctrl-C
    """

    def __init__(
        self,
        settings: GenReportSettings,
        reference: ReferenceFactors,
        guard: Optional[IngressGuard] = None,
    ):
        self.settings = settings
        self.guard = guard or IngressGuard.from_settings(settings, reference)
        self._executor: Optional[ThreadPoolExecutor] = None
        self._observer: Optional[Observer] = None
        self._in_flight: Dict[Path, Future] = {}
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        if self.running:
            return
        input_folder = Path(self.settings.input_folder)
        if not input_folder.is_dir():
            raise FileNotFoundError(f"Input folder not found: {input_folder}")

        self.guard.reset()
        self._executor = ThreadPoolExecutor(
            max_workers=self.settings.max_workers, thread_name_prefix="genreport"
        )
        handler = ReportFileHandler(self.submit, self.settings.file_pattern)
        self._observer = Observer()
        self._observer.schedule(handler, str(input_folder), recursive=False)
        self._observer.start()
        logger.info(
            f"Watching {input_folder} for {self.settings.file_pattern}; "
            f"results go to {self.settings.output_folder}"
        )

    def submit(self, path: Union[str, Path]) -> Optional[Future]:
        """Queue a file for guarded processing; None if it is already in flight."""
        if self._executor is None:
            raise RuntimeError("submit() requires a started watcher")
        file_path = Path(path)
        with self._lock:
            if file_path in self._in_flight:
                logger.debug(f"{file_path.name} already in flight; ignoring notification")
                return None
            future = self._executor.submit(self.guard.handle, file_path)
            self._in_flight[file_path] = future
        future.add_done_callback(lambda done: self._finished(file_path, done))
        return future

    def _finished(self, path: Path, future: Future) -> None:
        with self._lock:
            self._in_flight.pop(path, None)
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(f"Worker for {path} crashed: {error}")

    def stop(self, wait: bool = True) -> None:
        """Stop watching; in-flight retry sequences end ABANDONED."""
        if not self.running:
            return
        self.guard.cancel()
        self._observer.stop()
        self._observer.join()
        self._observer = None
        self._executor.shutdown(wait=wait)
        self._executor = None
        logger.info("Watcher stopped")

    def run_forever(self, poll_seconds: float = 1.0) -> None:
        """Block until interrupted (Ctrl-C), then stop."""
        self.start()
        try:
            while True:
                time.sleep(poll_seconds)
        except KeyboardInterrupt:
            logger.info("Interrupted; shutting down")
        finally:
            self.stop()

    def __enter__(self) -> "ReportWatcher":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()


def collect(futures) -> Dict[Path, IngressResult]:
    """Wait for submitted futures and index their results by input path."""
    results = {}
    for future in futures:
        if future is None:
            continue
        result = future.result()
        results[result.path] = result
    return results
