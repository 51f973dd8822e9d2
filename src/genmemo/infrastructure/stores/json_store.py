"""
JSON file record store.

Keeps the whole store in one JSON document, rewritten atomically (temp file
+ rename) after every mutation. Suitable for a single local user; the core
does not care how records reach disk.
"""

import json
import os
import tempfile
from pathlib import Path

from .memory_store import InMemoryRecordStore

STORE_FORMAT_VERSION = 1


class JsonFileRecordStore(InMemoryRecordStore):
    def __init__(self, path: Path):
        super().__init__()
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            self.logger.debug(f"[store] No store at {self.path}, starting empty")
            return

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            # Keep the unreadable file for inspection rather than overwrite it silently
            backup = self.path.with_suffix(self.path.suffix + ".corrupt")
            self.logger.error(f"[store] Failed to read {self.path}: {e}. Moving to {backup}")
            os.replace(self.path, backup)
            return

        for raw_key, value in data.get("records", {}).items():
            namespace, collection_id, item_key = json.loads(raw_key)
            self._records[(namespace, collection_id, int(item_key))] = value
        for name, members in data.get("sets", {}).items():
            self._sets[name] = set(members)

        self.logger.debug(
            f"[store] Loaded {len(self._records)} records, {len(self._sets)} sets from {self.path}"
        )

    def _changed(self) -> None:
        payload = {
            "version": STORE_FORMAT_VERSION,
            "records": {json.dumps(list(k)): v for k, v in self._records.items()},
            "sets": {name: sorted(members) for name, members in self._sets.items()},
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".genmemo-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_name, self.path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise
