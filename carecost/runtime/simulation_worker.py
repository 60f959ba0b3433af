"""Background execution helpers for simulation requests.

Requests cross the worker boundary as flat message dictionaries: one
inbound request message produces exactly one outbound result message. Nothing
mutable is shared between the caller and the executing context, so several
simulations can run in parallel without coordination.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Executor, Future, ProcessPoolExecutor, ThreadPoolExecutor
from multiprocessing import get_context
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set, Union

from ..config import WORKER_MAX_WORKERS
from ..core.monte_carlo import MonteCarloConfig
from ..engine import CostRiskEngine
from ..models.simulation import SimulationRequest, SimulationResult

LOGGER = logging.getLogger(__name__)

Message = Dict[str, Any]


def execute_message(message: Mapping[str, Any], config_metadata: Optional[Dict[str, object]] = None) -> Message:
    """Worker-side entry point: run one request message, return one result message."""
    engine = CostRiskEngine(MonteCarloConfig.from_metadata(dict(config_metadata or {})))
    return engine.run(message).to_message()


class SimulationWorker:
    """Run simulations off the caller's thread with message-passing semantics."""

    def __init__(
        self,
        *,
        max_workers: int = WORKER_MAX_WORKERS,
        use_processes: bool = False,
        config: Optional[MonteCarloConfig] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_workers <= 0:
            raise ValueError("max_workers must be positive")
        self._engine = CostRiskEngine(config, clock=clock)
        self._executor: Executor
        if use_processes:
            self._executor = ProcessPoolExecutor(max_workers=max_workers, mp_context=get_context("spawn"))
        else:
            self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="simulation-worker")
        self.use_processes = use_processes
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()
        self._closed = False

    # ------------------------------------------------------------------ status
    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    # ------------------------------------------------------------------ control
    def submit(self, message: Union[SimulationRequest, Mapping[str, Any]]) -> "Future[Message]":
        """Validate and seed ``message`` now, then dispatch it to the executor.

        Invalid requests raise :class:`~carecost.core.validator.ValidationError`
        here, before anything is queued.
        """
        request = self._engine.prepare(message)
        with self._lock:
            if self._closed:
                raise RuntimeError("SimulationWorker has been shut down.")
            future = self._executor.submit(
                execute_message, request.to_message(), self._engine.config.to_metadata()
            )
            self._pending.add(future)
        future.add_done_callback(self._on_done)
        LOGGER.debug("Dispatched simulation (iterations=%d, seed=%d)", request.iterations, request.seed)
        return future

    def run(self, message: Union[SimulationRequest, Mapping[str, Any]], timeout: Optional[float] = None) -> Message:
        """Submit and block until the result message arrives."""
        return self.submit(message).result(timeout=timeout)

    def run_request(self, request: SimulationRequest, timeout: Optional[float] = None) -> SimulationResult:
        return SimulationResult.from_message(self.run(request, timeout=timeout))

    def map(
        self,
        messages: Iterable[Union[SimulationRequest, Mapping[str, Any]]],
        timeout: Optional[float] = None,
    ) -> List[Message]:
        """Run independent requests in parallel; results keep input order."""
        futures = [self.submit(message) for message in messages]
        return [future.result(timeout=timeout) for future in futures]

    def _on_done(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            LOGGER.error("Simulation worker failed: %s", exc)

    # ------------------------------------------------------------------- cleanup
    def shutdown(self, wait: bool = True, *, cancel_pending: bool = False) -> None:
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=cancel_pending)

    def __enter__(self) -> "SimulationWorker":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.shutdown(wait=True)


__all__ = ["SimulationWorker", "execute_message"]
