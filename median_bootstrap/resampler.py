"""
Concurrent Bootstrap Resampler

Runs B independent resampling trials on a fixed pool of W worker threads.

WORK DISTRIBUTION
=================

    orchestrator                     workers (x W)
    ------------                     -------------
    queue <- 0, 1, ..., B-1          loop:
    queue <- CLOSED (x W)              idx = queue.get()
    start workers                      idx is CLOSED -> exit
    join workers  <--- barrier         resample = draw_resample(data, rng_w)
    return medians                     medians[idx] = median(resample)

- Every trial index is enqueued exactly once and dequeued by exactly one
  worker, so slot ``medians[idx]`` has a single writer.
- The queue is sealed with one CLOSED sentinel per worker before any worker
  starts; exhaustion, not a counted loop, ends each worker.
- Each worker owns its generator (see ``prng.worker_generator``); the
  dataset is shared through a read-only view.
- The caller never sees the result buffer before every worker has joined.

FAILURE SEMANTICS
=================

A worker exception is logged, halts the other workers at their next dequeue,
and is re-raised after the barrier as ResamplingError chained to the cause.
Trials are pure computations, so nothing is retried and no partial result is
returned.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from functools import partial
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np

from median_bootstrap.config import check_positive
from median_bootstrap.median import median
from median_bootstrap.prng import IndexSource, draw_resample, new_run_seed, worker_generator

logger = logging.getLogger(__name__)

RngFactory = Callable[[int], IndexSource]

_CLOSED = object()


class ResamplingError(RuntimeError):
    """Raised when a resampling run fails or ends before every trial ran."""


# =============================================================================
# Data Structures
# =============================================================================

@dataclass(frozen=True)
class ResampleRun:
    """
    Outcome of one concurrent resampling run.

    ``medians[i]`` holds the median of trial i. On a cancelled run the slots
    of trials that never ran hold NaN and ``complete`` is False.
    """
    medians: np.ndarray
    n_samples: int
    n_trials: int
    n_workers: int
    seed: Optional[int]
    completed_trials: int
    trials_per_worker: Tuple[int, ...]
    processed_indices: Optional[Tuple[Tuple[int, ...], ...]] = None

    @property
    def complete(self) -> bool:
        """True when every trial index in [0, n_trials) was processed."""
        return self.completed_trials == self.n_trials

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "n_samples": self.n_samples,
            "n_trials": self.n_trials,
            "n_workers": self.n_workers,
            "seed": self.seed,
            "completed_trials": self.completed_trials,
            "complete": self.complete,
            "trials_per_worker": list(self.trials_per_worker),
        }


# =============================================================================
# Worker
# =============================================================================

def _validate_inputs(data: np.ndarray, trials: int, workers: int) -> None:
    if data.ndim != 1:
        raise ValueError(f"data must be 1D array, got shape {data.shape}")
    check_positive(sample_size=len(data), trials=trials, workers=workers)


def _run_worker(
    worker_index: int,
    work_queue: "queue.Queue[object]",
    data: np.ndarray,
    medians: np.ndarray,
    rng: IndexSource,
    processed: List[int],
    faults: List[Optional[Tuple[int, BaseException]]],
    halt: threading.Event,
    cancel_event: Optional[threading.Event],
) -> None:
    while True:
        trial = work_queue.get()
        if trial is _CLOSED:
            return
        # A dequeued index left unrun keeps its NaN slot; the run reports incomplete.
        if halt.is_set() or (cancel_event is not None and cancel_event.is_set()):
            return
        try:
            medians[trial] = median(draw_resample(data, rng))
        except BaseException as exc:
            logger.exception("worker %d failed on trial %d", worker_index, trial)
            faults[worker_index] = (trial, exc)
            halt.set()
            return
        processed.append(trial)


# =============================================================================
# Main Public API
# =============================================================================

def run_resampling(
    data: Union[Sequence[float], np.ndarray],
    trials: int,
    workers: int,
    *,
    seed: Optional[int] = None,
    rng_factory: Optional[RngFactory] = None,
    cancel_event: Optional[threading.Event] = None,
    record_indices: bool = False,
) -> ResampleRun:
    """
    Run ``trials`` bootstrap trials over ``workers`` threads.

    Parameters
    ----------
    data : array-like of shape (n,)
        Observed dataset, n > 0. Never modified.

    trials : int
        Number of resampling trials B, B > 0.

    workers : int
        Number of worker threads W, W > 0. W may exceed B; surplus workers
        exit on their first dequeue.

    seed : int, optional
        Run-level seed. Worker w draws from ``worker_generator(seed, w)``.
        A fresh entropy-based seed is used when omitted.

    rng_factory : callable, optional
        ``rng_factory(worker_index)`` returning the worker's random source.
        Overrides ``seed``; used to stub the random source.

    cancel_event : threading.Event, optional
        When set, workers finish their current trial and stop dequeuing.

    record_indices : bool, default=False
        Keep the trial indices each worker processed in
        ``ResampleRun.processed_indices``.

    Returns
    -------
    ResampleRun

    Raises
    ------
    InvalidParameterError
        If n, trials or workers is not positive. Raised before any thread
        starts.
    ResamplingError
        If any worker raised; the original exception is the ``__cause__``.
        Also raised when trials go unrun without ``cancel_event`` being set.
    """
    data_arr = np.asarray(data, dtype=np.float64)
    _validate_inputs(data_arr, trials, workers)

    shared_data = data_arr.view()
    shared_data.flags.writeable = False

    run_seed: Optional[int] = seed
    if rng_factory is None:
        run_seed = new_run_seed() if seed is None else int(seed)
        rng_factory = partial(worker_generator, run_seed)

    medians = np.full(trials, np.nan, dtype=np.float64)

    work_queue: "queue.Queue[object]" = queue.Queue(maxsize=trials + workers)
    for index in range(trials):
        work_queue.put_nowait(index)
    for _ in range(workers):
        work_queue.put_nowait(_CLOSED)

    processed: List[List[int]] = [[] for _ in range(workers)]
    faults: List[Optional[Tuple[int, BaseException]]] = [None] * workers
    halt = threading.Event()

    threads = [
        threading.Thread(
            target=_run_worker,
            args=(
                w,
                work_queue,
                shared_data,
                medians,
                rng_factory(w),
                processed[w],
                faults,
                halt,
                cancel_event,
            ),
            name=f"resample-worker-{w}",
            daemon=True,
        )
        for w in range(workers)
    ]

    logger.info(
        "resampling B=%d trials of n=%d across %d workers", trials, len(data_arr), workers
    )
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    for worker_index, fault in enumerate(faults):
        if fault is not None:
            trial, exc = fault
            raise ResamplingError(
                f"worker {worker_index} failed on trial {trial}: {exc!r}"
            ) from exc

    completed = sum(len(p) for p in processed)
    if completed < trials:
        if cancel_event is None or not cancel_event.is_set():
            raise ResamplingError(
                f"workers exited after {completed} of {trials} trials without cancellation"
            )
        logger.warning("resampling cancelled after %d of %d trials", completed, trials)

    return ResampleRun(
        medians=medians,
        n_samples=len(data_arr),
        n_trials=trials,
        n_workers=workers,
        seed=run_seed,
        completed_trials=completed,
        trials_per_worker=tuple(len(p) for p in processed),
        processed_indices=tuple(tuple(p) for p in processed) if record_indices else None,
    )


def resample(
    data: Union[Sequence[float], np.ndarray],
    trials: int,
    workers: int,
    *,
    seed: Optional[int] = None,
    rng_factory: Optional[RngFactory] = None,
    cancel_event: Optional[threading.Event] = None,
) -> np.ndarray:
    """
    Return the ``trials`` bootstrap medians of ``data``, indexed by trial.

    Thin wrapper over :func:`run_resampling` that only ever returns a fully
    populated buffer.

    Examples
    --------
    >>> medians = resample([1.0, 2.0, 3.0, 4.0, 5.0], trials=100, workers=4, seed=7)
    >>> medians.shape
    (100,)
    """
    run = run_resampling(
        data,
        trials,
        workers,
        seed=seed,
        rng_factory=rng_factory,
        cancel_event=cancel_event,
    )
    if not run.complete:
        raise ResamplingError(
            f"resampling stopped after {run.completed_trials} of {run.n_trials} trials"
        )
    return run.medians


def resample_serial(
    data: Union[Sequence[float], np.ndarray],
    trials: int,
    *,
    seed: Optional[int] = None,
    rng: Optional[IndexSource] = None,
) -> np.ndarray:
    """
    Single-threaded reference implementation of :func:`resample`.

    With the same ``seed`` it reproduces ``resample(data, trials, 1, seed=seed)``
    exactly: the sole worker draws from ``worker_generator(seed, 0)`` and
    takes trial indices in order.
    """
    data_arr = np.asarray(data, dtype=np.float64)
    _validate_inputs(data_arr, trials, 1)

    if rng is None:
        rng = worker_generator(new_run_seed() if seed is None else int(seed), 0)

    medians = np.empty(trials, dtype=np.float64)
    for i in range(trials):
        medians[i] = median(draw_resample(data_arr, rng))
    return medians
