"""
Search Manager Module

Runs independent nonce searches in parallel worker processes. The search loop
itself has no preemption point, so wall-clock cancellation is done here by
abandoning the workers: on timeout, or when a worker dies holding a request,
the whole pool is terminated and restarted.
"""

import multiprocessing as mp
import time
import logging
import queue
from typing import Dict, Iterable, List, Optional, Tuple

import psutil

from cpu_core.worker import SearchWorker

from .config import config
from .constants import (
    WORKER_JOIN_TIMEOUT,
    RESPONSE_POLL_INTERVAL,
)
from .exceptions import (
    BudgetExhaustedError,
    RandomSourceError,
    WorkerCrashError,
    WorkerTimeoutError,
)
from .types import SearchRequest, SearchResponse
from . import pow_utils


def resolve_worker_count(workers: Optional[int] = None) -> int:
    """
    Work out how many worker processes to start.

    Args:
        workers: Explicit count, or None to read 'search.workers' from config.
                 0 means one per physical core.
    """
    if workers is None:
        workers = config.get('search.workers', 1)
    if workers <= 0:
        workers = psutil.cpu_count(logical=False) or psutil.cpu_count() or 1
    return workers


class SearchManager:
    """
    Pool of SearchWorker processes sharing one request queue.

    Example:
        >>> with SearchManager(workers=2) as manager:
        ...     nonce = manager.search(b"payload", cost=12, meter=10**6, timeout=30)
    """

    def __init__(self, workers: Optional[int] = None, log_level: int = logging.WARNING) -> None:
        self.num_workers = resolve_worker_count(workers)
        self.log_level = log_level
        self.running = False
        self.workers = []
        self.request_queue: Optional[mp.Queue] = None
        self.response_queue: Optional[mp.Queue] = None
        self.next_request_id = 0
        # Responses that arrived while waiting on other ids
        self._completed: Dict[int, SearchResponse] = {}
        self._pending: set = set()
        # request id -> worker id, from the workers' started notices
        self._assigned: Dict[int, int] = {}

    def __enter__(self) -> 'SearchManager':
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def start(self) -> None:
        """Create the queues and start all workers."""
        self.request_queue = mp.Queue()
        self.response_queue = mp.Queue()
        self.workers = []
        logging.info(f"Starting {self.num_workers} search workers...")

        for i in range(self.num_workers):
            worker = SearchWorker(i, self.request_queue, self.response_queue, log_level=self.log_level)
            worker.start()
            self.workers.append(worker)
            logging.debug(f"Started Search Worker {i} (pid {worker.pid})")

        self.running = True

    def stop(self) -> None:
        """Ask workers to shut down, then terminate any that don't."""
        if not self.workers:
            self.running = False
            return

        for _ in self.workers:
            try:
                self.request_queue.put({'type': 'shutdown'}, timeout=1)
            except queue.Full:
                break

        for p in self.workers:
            if p.is_alive():
                p.join(timeout=WORKER_JOIN_TIMEOUT)

        self._terminate_workers()
        self.running = False
        self._pending.clear()
        self._assigned.clear()
        logging.info("Search Manager stopped")

    def _terminate_workers(self) -> None:
        for p in self.workers:
            if p.is_alive():
                p.terminate()
                p.join(timeout=WORKER_JOIN_TIMEOUT)
                if p.is_alive():
                    p.kill()
                    p.join()
        self.workers = []
        for q in (self.request_queue, self.response_queue):
            if q is not None:
                q.close()
                q.cancel_join_thread()

    def restart(self) -> None:
        """Abandon all running searches and bring up a fresh pool."""
        logging.warning(f"Restarting search pool, abandoning {len(self._pending)} pending search(es)")
        self._terminate_workers()
        self._pending.clear()
        self._assigned.clear()
        self._completed.clear()
        self.start()

    def submit(self, payload: bytes, cost: int, meter: int) -> int:
        """
        Queue a search.

        Returns:
            Request id to pass to wait()

        Raises:
            ValueError: If cost or meter is negative
            RuntimeError: If the manager is not started
        """
        if not self.running:
            raise RuntimeError("SearchManager is not running")
        if cost < 0 or meter < 0:
            raise ValueError(f"cost and meter must be non-negative, got cost={cost} meter={meter}")

        self.next_request_id += 1
        request_id = self.next_request_id
        req: SearchRequest = {
            'id': request_id,
            'type': 'search',
            'payload': bytes(payload),
            'cost': cost,
            'meter': meter,
        }
        self.request_queue.put(req)
        self._pending.add(request_id)
        logging.debug(
            f"Submitted request {request_id}: payload={pow_utils.truncate_payload(payload)} "
            f"cost={cost} meter={meter}"
        )
        return request_id

    def wait(self, request_ids: Iterable[int], timeout: Optional[float] = None) -> Dict[int, SearchResponse]:
        """
        Block until every listed request has a response.

        Args:
            request_ids: Ids returned by submit()
            timeout: Wall-clock limit in seconds (None waits forever)

        Returns:
            Mapping of request id to SearchResponse

        Raises:
            KeyError: If an id was never submitted, was already collected or was
                      dropped by a restart
            WorkerTimeoutError: If the limit passes first; the pool is restarted
            WorkerCrashError: If a worker dies holding outstanding work; the pool
                              is restarted
        """
        wanted = set(request_ids)
        unknown = wanted - self._pending - set(self._completed)
        if unknown:
            raise KeyError(f"Unknown or already collected request id(s): {sorted(unknown)}")

        results: Dict[int, SearchResponse] = {}
        deadline = None if timeout is None else time.monotonic() + timeout

        while True:
            for request_id in list(wanted):
                if request_id in self._completed:
                    results[request_id] = self._completed.pop(request_id)
                    wanted.discard(request_id)
            if not wanted:
                return results

            if deadline is not None and time.monotonic() >= deadline:
                pending = len(wanted)
                self.restart()
                raise WorkerTimeoutError(pending, timeout)

            self._check_workers()
            self._drain_responses()

    def _check_workers(self) -> None:
        """Raise WorkerCrashError if a dead worker still owes a response."""
        dead = [i for i, p in enumerate(self.workers) if not p.is_alive()]
        if not dead or not self._pending:
            return

        # Pick up 'started' notices the worker sent before dying
        self._drain_responses()
        for worker_id in dead:
            held = [rid for rid, wid in self._assigned.items() if wid == worker_id and rid in self._pending]
            if held:
                self.restart()
                raise WorkerCrashError(worker_id, f"Died while running request(s) {held}")

        if len(dead) == len(self.workers):
            self.restart()
            raise WorkerCrashError(dead[0], "All search workers have exited")

    def _drain_responses(self) -> None:
        try:
            response = self.response_queue.get(timeout=RESPONSE_POLL_INTERVAL)
        except queue.Empty:
            return

        while True:
            resp_id = response.get('request_id')
            if response.get('type') == 'started':
                if resp_id in self._pending:
                    self._assigned[resp_id] = response.get('worker_id')
            elif resp_id in self._pending:
                self._pending.discard(resp_id)
                self._assigned.pop(resp_id, None)
                self._completed[resp_id] = response
            try:
                response = self.response_queue.get_nowait()
            except queue.Empty:
                return

    def search(self, payload: bytes, cost: int, meter: int, timeout: Optional[float] = None) -> bytes:
        """
        Run one search in the pool with a wall-clock limit.

        Raises the same errors as proof.search, plus WorkerTimeoutError and
        WorkerCrashError.
        """
        request_id = self.submit(payload, cost, meter)
        response = self.wait([request_id], timeout=timeout)[request_id]
        return response_to_nonce(response, cost, meter)

    def run_batch(
        self,
        jobs: List[Tuple[bytes, int, int]],
        timeout: Optional[float] = None
    ) -> List[SearchResponse]:
        """
        Run (payload, cost, meter) jobs in parallel.

        Returns:
            Responses in job order
        """
        ids = [self.submit(payload, cost, meter) for payload, cost, meter in jobs]
        results = self.wait(ids, timeout=timeout)
        return [results[i] for i in ids]


def response_to_nonce(response: SearchResponse, cost: int, meter: int) -> bytes:
    """
    Turn a worker response back into a nonce or the matching exception.

    Raises:
        BudgetExhaustedError: For 'budget_exhausted' responses
        RandomSourceError: For 'random_source' responses
        WorkerCrashError: For internal worker failures
    """
    if response.get('found'):
        return pow_utils.parse_nonce_hex(response['nonce'])

    kind = response.get('error_kind')
    if kind == 'budget_exhausted':
        raise BudgetExhaustedError(cost, meter, response.get('attempts'))
    if kind == 'random_source':
        raise RandomSourceError(response.get('error') or "Random source failed in worker")
    raise WorkerCrashError(response.get('worker_id', -1), response.get('error') or "Unknown worker failure")
