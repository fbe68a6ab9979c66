"""JSON-file persistence for pending vault marks.

One file per (application id, account address), holding
``{vault_id: {"operation": ..., "submitted_at": ...}}``. The contents are
advisory; corrupted files are discarded rather than trusted.
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from ..models import PendingEntry, PendingOperation

logger = logging.getLogger(__name__)

KEY_PREFIX = "pending-collateral"


def storage_key(app_id: str, address: str) -> str:
    return f"{KEY_PREFIX}-{app_id}-{address.lower()}"


def _parse_operation(value: object) -> PendingOperation:
    try:
        return PendingOperation(value)
    except ValueError:
        # Entries written before the operation was recorded were adds.
        return PendingOperation.ADD_COLLATERAL


class JsonPendingStore:
    """Stores the pending map under ``directory/<key>.json``."""

    def __init__(self, directory: str | Path, app_id: str, address: str) -> None:
        if not app_id or not address:
            raise ValueError("app_id and address are required for pending storage")
        self.path = Path(directory).expanduser() / f"{storage_key(app_id, address)}.json"

    def load(self) -> list[PendingEntry]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text())
            if not isinstance(raw, dict):
                raise ValueError("expected a JSON object")
            return [
                PendingEntry(
                    vault_id=str(vault_id),
                    operation=_parse_operation(item.get("operation")),
                    submitted_at=float(item.get("submitted_at", 0.0)),
                )
                for vault_id, item in raw.items()
            ]
        except (ValueError, TypeError, AttributeError) as e:
            logger.error("Discarding corrupted pending storage %s: %s", self.path, e)
            self._remove()
            return []

    def save(self, entries: list[PendingEntry]) -> None:
        if not entries:
            self._remove()
            return

        payload = {
            e.vault_id: {"operation": e.operation.value, "submitted_at": e.submitted_at}
            for e in entries
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(payload, indent=2, sort_keys=True))
        os.replace(tmp, self.path)

    def _remove(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
