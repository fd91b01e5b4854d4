import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime

from PyQt5.QtCore import QSettings

from printcost.pricing import CostBreakdown, CostInput, Currency

logger = logging.getLogger(__name__)

HISTORY_KEY = "printHistory"


@dataclass
class HistoryEntry:
    id: str
    data: CostInput
    costs: CostBreakdown
    currency: Currency

    @classmethod
    def create(cls, data, costs, currency):
        return cls(id=datetime.now().isoformat(), data=data, costs=costs, currency=currency)

    @classmethod
    def from_dict(cls, raw):
        return cls(
            id=raw["id"],
            data=CostInput(**raw["data"]),
            costs=CostBreakdown(**raw["costs"]),
            currency=Currency(**raw["currency"]),
        )


class MemoryBackend:
    def __init__(self):
        self._values = {}

    def get(self, key):
        return self._values.get(key)

    def set(self, key, value):
        self._values[key] = value


class QSettingsBackend:
    """Key-value storage on the platform's native settings store."""

    def __init__(self, organization="PrintCost", application="PrintCost Studio"):
        self.settings = QSettings(organization, application)

    def get(self, key):
        value = self.settings.value(key)
        return None if value is None else str(value)

    def set(self, key, value):
        self.settings.setValue(key, value)
        self.settings.sync()


class HistoryStore:
    """Saved calculations, kept as one JSON list under a single key."""

    def __init__(self, backend):
        self.backend = backend

    def get_all(self):
        raw = self.backend.get(HISTORY_KEY)
        if not raw:
            return []
        try:
            return [HistoryEntry.from_dict(item) for item in json.loads(raw)]
        except (ValueError, KeyError, TypeError) as e:
            logger.error("Failed to parse saved history: %s", e)
            return []

    def _write(self, entries):
        self.backend.set(HISTORY_KEY, json.dumps([asdict(entry) for entry in entries]))

    def append(self, entry):
        entries = self.get_all() + [entry]
        self._write(entries)
        return entries

    def remove(self, entry_id):
        entries = [entry for entry in self.get_all() if entry.id != entry_id]
        self._write(entries)
        return entries
