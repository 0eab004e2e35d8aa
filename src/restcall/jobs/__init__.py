"""Asynchronous jobs, schedulers, and finalizers.

Classes:
    :class:`AsyncJob` -- one deferred call and its state machine.
    :class:`Finalizer` -- callback contract receiving a job's :class:`Outcome`.
    :class:`FinalizerRegistry` -- resolves finalizer names at finalizing time.
    :class:`QueueScheduler`, :class:`ThreadPoolScheduler`,
    :class:`AsyncioScheduler` -- background execution backends.
"""

from restcall.jobs.finalizer import (
    Finalizer,
    FinalizerRegistry,
    Outcome,
    register_finalizer,
)
from restcall.jobs.job import AsyncJob
from restcall.jobs.scheduler import (
    AsyncioScheduler,
    QueueScheduler,
    Scheduler,
    ThreadPoolScheduler,
)

__all__ = [
    "AsyncJob",
    "Finalizer",
    "FinalizerRegistry",
    "Outcome",
    "register_finalizer",
    "Scheduler",
    "QueueScheduler",
    "ThreadPoolScheduler",
    "AsyncioScheduler",
]
