from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass

from .errors import TxError
from .registry import AccountRegistry
from .transaction import TransactionRecord

logger = logging.getLogger(__name__)

_STOP = object()


@dataclass(frozen=True)
class Rejection:
    line: int
    account_id: int
    record: TransactionRecord
    error: TxError


class ShardedApplier:
    """
    Applies records on `workers` threads, sharded by account id.

    Every record of a given account goes to the same FIFO queue, so relative
    input order within an account is kept and each ledger has exactly one
    writer. Different shards run in parallel.

    Usage:
      with ShardedApplier(registry, workers=4) as applier:
          applier.submit(line, account_id, record)
      applier.rejections  # sorted by input line
    """

    def __init__(self, registry: AccountRegistry, workers: int):
        if workers < 1:
            raise ValueError("workers must be >= 1")

        self._registry = registry
        self._queues: list[queue.Queue] = [queue.Queue() for _ in range(workers)]
        self._lock = threading.Lock()
        self._rejections: list[Rejection] = []
        self._applied = 0
        self._failure: BaseException | None = None
        self._closed = False

        self._threads = [
            threading.Thread(target=self._run, args=(q,), name=f"ledger-shard-{i}", daemon=True)
            for i, q in enumerate(self._queues)
        ]
        for t in self._threads:
            t.start()

    @property
    def workers(self) -> int:
        return len(self._queues)

    @property
    def applied(self) -> int:
        return self._applied

    @property
    def rejections(self) -> list[Rejection]:
        return sorted(self._rejections, key=lambda r: r.line)

    def shard_for(self, account_id: int) -> int:
        return account_id % len(self._queues)

    def submit(self, line: int, account_id: int, record: TransactionRecord) -> None:
        if self._closed:
            raise RuntimeError("ShardedApplier is closed")
        self._queues[self.shard_for(account_id)].put((line, account_id, record))

    def _run(self, q: queue.Queue) -> None:
        while True:
            item = q.get()
            if item is _STOP:
                return
            line, account_id, record = item
            try:
                self._registry.apply(account_id, record)
            except TxError as e:
                with self._lock:
                    self._rejections.append(
                        Rejection(line=line, account_id=account_id, record=record, error=e)
                    )
                continue
            except BaseException as e:
                with self._lock:
                    if self._failure is None:
                        self._failure = e
                logger.error("Shard worker crashed on line %s: %s", line, e)
                return
            with self._lock:
                self._applied += 1

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for q in self._queues:
            q.put(_STOP)
        for t in self._threads:
            t.join()
        if self._failure is not None:
            raise RuntimeError(f"Shard worker failed: {self._failure}") from self._failure

    def __enter__(self) -> "ShardedApplier":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
