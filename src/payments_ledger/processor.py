from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from .csv_io.records import RecordFormatError, iter_records
from .engine.errors import TxError
from .engine.registry import AccountRegistry
from .engine.sharding import ShardedApplier
from .engine.transaction import TransactionRecord
from .storage.reject_store import RejectEntry, RejectStore, now_entry

logger = logging.getLogger(__name__)


@dataclass
class ProcessingReport:
    rows: int = 0
    applied: int = 0
    malformed: int = 0
    rejected: int = 0
    by_code: dict[str, int] = field(default_factory=dict)

    def count(self, code: str) -> None:
        self.by_code[code] = self.by_code.get(code, 0) + 1


class Processor:
    """
    Feeds input rows to an AccountRegistry in file order.

    A malformed row or a rejected record is logged (and optionally stored)
    and processing continues with the next row; nothing aborts the batch.
    """

    def __init__(
        self,
        registry: AccountRegistry | None = None,
        *,
        workers: int = 1,
        reject_store: RejectStore | None = None,
    ):
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self.registry = registry or AccountRegistry()
        self.workers = workers
        self.reject_store = reject_store
        self._pending: list[RejectEntry] = []

    def _on_malformed(self, report: ProcessingReport, e: RecordFormatError) -> None:
        report.rows += 1
        report.malformed += 1
        report.count("malformed_row")
        logger.warning("Malformed row at line %s: %s", e.line, e.reason)
        self._pending.append(
            now_entry(line=e.line, code="malformed_row", message=e.reason, raw=",".join(e.raw))
        )

    def _on_rejected(
        self,
        report: ProcessingReport,
        line: int,
        account_id: int,
        record: TransactionRecord,
        e: TxError,
    ) -> None:
        report.rejected += 1
        report.count(e.code)
        logger.warning(
            "Rejected %s tx=%s client=%s at line %s: %s",
            record.kind.value,
            record.id,
            account_id,
            line,
            e,
        )
        self._pending.append(
            now_entry(
                line=line,
                code=e.code,
                message=str(e),
                account_id=account_id,
                tx_id=record.id,
                kind=record.kind.value,
            )
        )

    def _flush_rejects(self) -> None:
        pending = sorted(self._pending, key=lambda x: x.line)
        self._pending = []
        if self.reject_store is not None and pending:
            n = self.reject_store.append_many(pending)
            logger.info("Stored %s rejected rows in %s", n, self.reject_store.path)

    def run(self, stream: Iterable[str]) -> ProcessingReport:
        report = ProcessingReport()

        def on_reject(e: RecordFormatError) -> None:
            self._on_malformed(report, e)

        if self.workers == 1:
            for row in iter_records(stream, on_reject=on_reject):
                report.rows += 1
                try:
                    self.registry.apply(row.account_id, row.record)
                except TxError as e:
                    self._on_rejected(report, row.line, row.account_id, row.record, e)
                    continue
                report.applied += 1
        else:
            with ShardedApplier(self.registry, workers=self.workers) as applier:
                for row in iter_records(stream, on_reject=on_reject):
                    report.rows += 1
                    applier.submit(row.line, row.account_id, row.record)

            report.applied = applier.applied
            for rej in applier.rejections:
                self._on_rejected(report, rej.line, rej.account_id, rej.record, rej.error)

        self._flush_rejects()

        logger.info(
            "Processed %s rows: applied=%s rejected=%s malformed=%s accounts=%s",
            report.rows,
            report.applied,
            report.rejected,
            report.malformed,
            len(self.registry),
        )
        return report
