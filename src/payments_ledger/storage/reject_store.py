from __future__ import annotations

import json
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator


@dataclass(frozen=True)
class RejectEntry:
    line: int
    account_id: int | None
    tx_id: int | None
    kind: str | None
    code: str
    message: str
    at: float
    raw: str | None = None


class RejectStore:
    """
    Audit log of rejected input stored as JSONL:

      <path>  (e.g. .cache/rejects.jsonl)

    Each line is a JSON object for one rejected row or record. Appends only.
    """

    def __init__(self, path: Path):
        self.path = path

    def append_many(self, entries: Iterable[RejectEntry]) -> int:
        """
        Append entries. Returns count of appended rows.
        """
        appended = 0
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            for e in entries:
                f.write(json.dumps(asdict(e), ensure_ascii=False) + "\n")
                appended += 1
        return appended

    def append(self, entry: RejectEntry) -> None:
        self.append_many([entry])

    def iter_all(self) -> Iterator[RejectEntry]:
        if not self.path.exists():
            return
        for raw in self.path.read_text(encoding="utf-8").splitlines():
            if not raw.strip():
                continue
            try:
                obj: dict[str, Any] = json.loads(raw)
            except json.JSONDecodeError:
                continue
            yield RejectEntry(
                line=int(obj.get("line", 0)),
                account_id=(int(obj["account_id"]) if obj.get("account_id") is not None else None),
                tx_id=(int(obj["tx_id"]) if obj.get("tx_id") is not None else None),
                kind=(str(obj["kind"]) if obj.get("kind") is not None else None),
                code=str(obj.get("code", "")),
                message=str(obj.get("message", "")),
                at=float(obj.get("at", 0.0)),
                raw=(str(obj["raw"]) if obj.get("raw") is not None else None),
            )

    def count_by_code(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for e in self.iter_all():
            counts[e.code] = counts.get(e.code, 0) + 1
        return counts


def now_entry(
    *,
    line: int,
    code: str,
    message: str,
    account_id: int | None = None,
    tx_id: int | None = None,
    kind: str | None = None,
    raw: str | None = None,
) -> RejectEntry:
    return RejectEntry(
        line=line,
        account_id=account_id,
        tx_id=tx_id,
        kind=kind,
        code=code,
        message=message,
        at=time.time(),
        raw=raw,
    )
