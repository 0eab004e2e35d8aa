"""The asynchronous job and its state machine.

A job carries a frozen descriptor and the *name* of a finalizer. Running it
walks through strictly ordered, non-overlapping phases::

    QUEUED -> EXECUTING -> FINALIZING -> DONE
    QUEUED -> EXECUTING -> FAILED -> FINALIZING -> DONE

Transport errors never escape :meth:`AsyncJob.run`; they become the
outcome handed to the finalizer. The finalizer is invoked exactly once per
run job, and a job can only be run once.
"""

from __future__ import annotations

import logging
import threading
import uuid
from typing import Optional

from restcall.descriptor import CallDescriptor
from restcall.exceptions import StateError, TransportError
from restcall.executor import SyncExecutor
from restcall.jobs.finalizer import FinalizerRegistry, Outcome
from restcall.models import JobState

logger = logging.getLogger(__name__)

_TRANSITIONS: dict[JobState, frozenset[JobState]] = {
    JobState.QUEUED: frozenset({JobState.EXECUTING}),
    JobState.EXECUTING: frozenset({JobState.FINALIZING, JobState.FAILED}),
    JobState.FAILED: frozenset({JobState.FINALIZING}),
    JobState.FINALIZING: frozenset({JobState.DONE}),
    JobState.DONE: frozenset(),
}


class AsyncJob:
    """One deferred API call plus the finalizer that receives its outcome.

    Jobs are created by :meth:`~restcall.jobs.scheduler.Scheduler.enqueue`,
    which validates and freezes the descriptor first.

    Attributes:
        job_id: Random hex identifier.
        descriptor: The frozen call descriptor.
        finalizer_ref: Name of the finalizer in the scheduler's registry.
        state: Current :class:`~restcall.models.JobState`.
        outcome: The delivered outcome, once the job has executed.
        finalizer_error: Exception raised by the finalizer, if any.
    """

    def __init__(self, descriptor: CallDescriptor, finalizer_ref: str) -> None:
        self.job_id = uuid.uuid4().hex
        self.descriptor = descriptor
        self.finalizer_ref = finalizer_ref
        self.outcome: Optional[Outcome] = None
        self.finalizer_error: Optional[Exception] = None
        self._state = JobState.QUEUED
        self._lock = threading.Lock()
        self._done = threading.Event()

    def __repr__(self) -> str:
        return (
            f"AsyncJob(job_id={self.job_id!r}, finalizer_ref={self.finalizer_ref!r}, "
            f"state={self._state.value!r})"
        )

    @property
    def state(self) -> JobState:
        return self._state

    @property
    def is_done(self) -> bool:
        return self._state == JobState.DONE

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the job is DONE. Returns False on timeout."""
        return self._done.wait(timeout)

    def run(self, executor: SyncExecutor, registry: FinalizerRegistry) -> None:
        """Execute the call and deliver its outcome to a fresh finalizer.

        Args:
            executor: Performs the call.
            registry: Resolves :attr:`finalizer_ref` at finalizing time.

        Raises:
            StateError: If the job is not QUEUED (it already ran or is
                running).
        """
        self._transition(JobState.EXECUTING)
        try:
            response = executor.execute(self.descriptor)
        except TransportError as exc:
            outcome = Outcome.failure(exc)
        except Exception as exc:
            logger.exception("Job %s: transport raised an unexpected error", self.job_id)
            outcome = Outcome.failure(
                TransportError(f"Unexpected transport failure: {exc}", self.descriptor.endpoint_key)
            )
        else:
            outcome = Outcome.success(response)

        if outcome.error is not None:
            self._transition(JobState.FAILED)
        self._transition(JobState.FINALIZING)
        self.outcome = outcome

        try:
            finalizer = registry.resolve(self.finalizer_ref)
            finalizer.execute(outcome)
        except Exception as exc:
            self.finalizer_error = exc
            logger.exception("Job %s: finalizer '%s' failed", self.job_id, self.finalizer_ref)
        finally:
            self._transition(JobState.DONE)
            self._done.set()

    def _transition(self, target: JobState) -> None:
        with self._lock:
            if target not in _TRANSITIONS[self._state]:
                raise StateError(
                    f"Job {self.job_id}: cannot move from {self._state.value} to {target.value}"
                )
            logger.debug("Job %s: %s -> %s", self.job_id, self._state.value, target.value)
            self._state = target
