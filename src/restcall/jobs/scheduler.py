"""Background schedulers for asynchronous jobs.

Every scheduler shares :meth:`Scheduler.enqueue`, which validates the
call synchronously and never performs transport I/O. Backends differ only
in *where* and *when* :meth:`~restcall.jobs.job.AsyncJob.run` happens:

* :class:`QueueScheduler` -- in-process FIFO drained explicitly with
  :meth:`QueueScheduler.drain` on the calling thread. Deterministic, so it
  is the natural choice in tests.
* :class:`ThreadPoolScheduler` -- each job runs on a
  :class:`concurrent.futures.ThreadPoolExecutor` worker.
* :class:`AsyncioScheduler` -- each job becomes an asyncio task that runs
  the blocking call in a worker thread via :func:`asyncio.to_thread`.

No ordering is promised between independently enqueued jobs, except that
:class:`QueueScheduler` happens to run them in FIFO order. A job that has
been dequeued cannot be cancelled.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from abc import ABC, abstractmethod
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Optional

from restcall.descriptor import CallDescriptor
from restcall.exceptions import ValidationError
from restcall.executor import SyncExecutor
from restcall.jobs.finalizer import FinalizerRegistry
from restcall.jobs.job import AsyncJob

logger = logging.getLogger(__name__)


class Scheduler(ABC):
    """Base class for job schedulers.

    Args:
        executor: Runs each job's call.
        registry: Resolves finalizer names when jobs finish.
    """

    def __init__(self, executor: SyncExecutor, registry: FinalizerRegistry) -> None:
        self._executor = executor
        self._registry = registry

    @property
    def executor(self) -> SyncExecutor:
        return self._executor

    @property
    def registry(self) -> FinalizerRegistry:
        return self._registry

    def enqueue(self, descriptor: CallDescriptor, finalizer_ref: str) -> AsyncJob:
        """Schedule *descriptor* for background execution.

        The descriptor is frozen only once every check has passed, so a
        rejected descriptor can still be corrected and resubmitted. Returns
        as soon as the job is handed to the backend.

        Args:
            descriptor: The call to perform.
            finalizer_ref: Name of a finalizer registered on :attr:`registry`.

        Returns:
            The queued :class:`~restcall.jobs.job.AsyncJob`.

        Raises:
            ValidationError: If the descriptor is incomplete or the
                finalizer name is not registered, or the scheduler
                cannot accept jobs. Nothing is queued.
        """
        descriptor.validate()
        if not self._registry.is_registered(finalizer_ref):
            raise ValidationError(f"Finalizer '{finalizer_ref}' is not registered")
        self._check_accepting()

        descriptor.freeze()
        job = AsyncJob(descriptor, finalizer_ref)
        self._submit(job)
        logger.debug("Enqueued job %s for endpoint '%s'", job.job_id, descriptor.endpoint_key)
        return job

    def _check_accepting(self) -> None:
        """Raise :class:`ValidationError` if no job can be submitted right now."""

    def _run(self, job: AsyncJob) -> AsyncJob:
        job.run(self._executor, self._registry)
        return job

    @abstractmethod
    def _submit(self, job: AsyncJob) -> None:
        """Hand *job* to the backend without running it inline."""
        ...


class QueueScheduler(Scheduler):
    """In-process FIFO scheduler drained on demand.

    Example::

        scheduler = QueueScheduler(executor, registry)
        scheduler.enqueue(descriptor, "store-user")
        scheduler.drain()   # runs the job and its finalizer here
    """

    def __init__(self, executor: SyncExecutor, registry: FinalizerRegistry) -> None:
        super().__init__(executor, registry)
        self._queue: deque[AsyncJob] = deque()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._queue)

    def _submit(self, job: AsyncJob) -> None:
        with self._lock:
            self._queue.append(job)

    def drain(self, max_jobs: Optional[int] = None) -> list[AsyncJob]:
        """Run queued jobs until the queue is empty.

        Jobs enqueued by finalizers while draining are run too.

        Args:
            max_jobs: Stop after this many jobs, leaving the rest queued.

        Returns:
            The jobs that were run, in order.
        """
        ran: list[AsyncJob] = []
        while max_jobs is None or len(ran) < max_jobs:
            with self._lock:
                if not self._queue:
                    break
                job = self._queue.popleft()
            ran.append(self._run(job))
        return ran


class ThreadPoolScheduler(Scheduler):
    """Scheduler running each job on a worker thread.

    Use as a context manager to shut the pool down on exit. Leaving the
    block waits for every job, including jobs chained by finalizers.

    Args:
        executor: Runs each job's call.
        registry: Resolves finalizer names.
        max_workers: Pool size, passed to
            :class:`~concurrent.futures.ThreadPoolExecutor`.
    """

    def __init__(
        self,
        executor: SyncExecutor,
        registry: FinalizerRegistry,
        max_workers: Optional[int] = None,
    ) -> None:
        super().__init__(executor, registry)
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="restcall-job")
        self._futures: list[Future[AsyncJob]] = []
        self._lock = threading.Lock()
        self._closed = False

    def __enter__(self) -> ThreadPoolScheduler:
        return self

    def __exit__(self, *args: object) -> None:
        self.shutdown()

    def _check_accepting(self) -> None:
        if self._closed:
            raise ValidationError("ThreadPoolScheduler has been shut down")

    def _submit(self, job: AsyncJob) -> None:
        with self._lock:
            try:
                future = self._pool.submit(self._run, job)
            except RuntimeError as exc:
                raise ValidationError(f"ThreadPoolScheduler cannot accept jobs: {exc}") from exc
            self._futures.append(future)

    def wait(self, timeout: Optional[float] = None) -> list[AsyncJob]:
        """Block until every job submitted so far is DONE.

        Jobs chained by finalizers during the wait are waited for as well.
        Finished jobs are returned once and then forgotten.

        Args:
            timeout: Upper bound in seconds for the whole call. Jobs still
                running when it expires stay pending for the next call.

        Returns:
            The jobs that finished, in submission order.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        waited = 0
        while True:
            with self._lock:
                pending = self._futures[waited:]
            if not pending:
                break
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            _, not_done = wait(pending, timeout=remaining)
            if not_done:
                break
            waited += len(pending)

        with self._lock:
            finished = [f for f in self._futures if f.done()]
            self._futures = [f for f in self._futures if not f.done()]
        return [f.result() for f in finished]

    def shutdown(self) -> None:
        """Wait for all jobs, chained ones included, then stop the pool.

        Further :meth:`enqueue` calls raise :class:`ValidationError`.
        """
        self.wait()
        self._closed = True
        self._pool.shutdown(wait=True)


class AsyncioScheduler(Scheduler):
    """Scheduler that runs jobs as tasks on the running asyncio loop.

    The first :meth:`enqueue` must be called while an event loop is
    running; that loop is remembered so finalizers, which run in worker
    threads, can chain further jobs onto it. Each blocking call happens in
    a worker thread, so the loop keeps serving other tasks meanwhile.

    Example::

        async def main():
            scheduler = AsyncioScheduler(executor, registry)
            scheduler.enqueue(descriptor, "store-user")
            await scheduler.join()
    """

    def __init__(self, executor: SyncExecutor, registry: FinalizerRegistry) -> None:
        super().__init__(executor, registry)
        self._tasks: list[asyncio.Task[AsyncJob]] = []
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def _check_accepting(self) -> None:
        if _running_loop() is None and (self._loop is None or self._loop.is_closed()):
            raise ValidationError("AsyncioScheduler.enqueue requires a running event loop")

    def _submit(self, job: AsyncJob) -> None:
        loop = _running_loop()
        if loop is not None:
            self._loop = loop
            self._create_task(job)
        elif self._loop is not None and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._create_task, job)
        else:
            raise ValidationError("AsyncioScheduler.enqueue requires a running event loop")

    def _create_task(self, job: AsyncJob) -> None:
        assert self._loop is not None
        self._tasks.append(self._loop.create_task(asyncio.to_thread(self._run, job)))

    async def join(self) -> list[AsyncJob]:
        """Await every job enqueued so far, including chained ones.

        Returns:
            The finished jobs, in submission order.
        """
        awaited = 0
        while awaited < len(self._tasks):
            pending = self._tasks[awaited:]
            await asyncio.gather(*pending)
            awaited += len(pending)
        jobs = [task.result() for task in self._tasks]
        self._tasks.clear()
        return jobs


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None
