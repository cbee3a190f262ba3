import multiprocessing as mp
import time
import logging
import queue

from pow_core.constants import WORKER_POLL_INTERVAL
from pow_core.exceptions import BudgetExhaustedError, RandomSourceError
from pow_core.proof import search_with_attempts
from pow_core.random_source import SystemRandomSource
from pow_core import pow_utils


class SearchWorker(mp.Process):
    """Worker process that runs nonce searches pulled from a shared request queue."""

    def __init__(self, worker_id, request_queue, response_queue, log_level=logging.INFO):
        super().__init__(daemon=True)
        self.worker_id = worker_id
        self.request_queue = request_queue
        self.response_queue = response_queue
        self.log_level = log_level
        self.shutdown_event = mp.Event()
        self.logger = logging.getLogger(f'search_worker_{worker_id}')
        # Each worker draws from its own source; nothing is shared across searches
        self.rng = SystemRandomSource()

    def run(self):
        # Setup logging in this process
        logging.basicConfig(
            level=self.log_level,
            format=f'%(asctime)s - Worker-{self.worker_id} - %(levelname)s - %(message)s'
        )
        self.logger.info(f"Search Worker {self.worker_id} started")

        try:
            self._main_loop()
        except Exception as e:
            self.logger.critical(f"Search Worker crashed: {e}", exc_info=True)
            raise
        finally:
            self.logger.info("Search Worker shutting down")

    def _main_loop(self):
        while not self.shutdown_event.is_set():
            try:
                req = self.request_queue.get(timeout=WORKER_POLL_INTERVAL)
            except queue.Empty:
                continue

            if req.get('type') == 'shutdown':
                self.logger.info("Shutdown request received")
                self.shutdown_event.set()
                break

            if req.get('type') == 'search':
                # Lets the manager see which worker holds the request
                self.response_queue.put({
                    'type': 'started',
                    'request_id': req.get('id'),
                    'worker_id': self.worker_id,
                })
                self.response_queue.put(self._execute_search(req))

    def _execute_search(self, req):
        request_id = req.get('id')
        response = {
            'type': 'result',
            'request_id': request_id,
            'worker_id': self.worker_id,
            'found': False,
            'nonce': None,
            'attempts': 0,
            'duration': 0.0,
            'error_kind': None,
            'error': None,
        }
        start_time = time.time()

        try:
            nonce, attempts = search_with_attempts(
                req['payload'], req['cost'], req['meter'], rng=self.rng
            )
            response['found'] = True
            response['nonce'] = pow_utils.format_nonce_hex(nonce)
            response['attempts'] = attempts
            self.logger.info(
                f"Found nonce for request {request_id}: {response['nonce']} "
                f"({attempts} attempts, cost={req['cost']})"
            )
        except BudgetExhaustedError as e:
            response['attempts'] = e.attempts
            response['error_kind'] = 'budget_exhausted'
            response['error'] = str(e)
            self.logger.info(f"Request {request_id}: {e}")
        except RandomSourceError as e:
            response['error_kind'] = 'random_source'
            response['error'] = str(e)
            self.logger.error(f"Request {request_id}: {e}")
        except Exception as e:
            response['error_kind'] = 'internal'
            response['error'] = f"{type(e).__name__}: {e}"
            self.logger.error(f"Search error on worker {self.worker_id}: {e}", exc_info=True)

        response['duration'] = time.time() - start_time
        return response
