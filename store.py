"""
Vote store

The four poll operations (read current week, read history, upsert, delete) over
a single collection of vote records keyed implicitly by (name, weekStart).
"""

import threading
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from pymongo import ASCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from database import create_document, get_documents
from logging_utils import get_logger
from schemas import VOTE_OPTIONS, Vote
from weeks import current_week_start, to_epoch_ms, week_start_ms

logger = get_logger(__name__)

Clock = Callable[[], datetime]


class VoteStoreError(Exception):
    """Base class for vote store failures."""


class InvalidOption(VoteStoreError, ValueError):
    def __init__(self, option: str):
        super().__init__(f"Unknown vote option: {option!r}")
        self.option = option


class StoreUnavailable(VoteStoreError):
    """The backing database could not be reached."""


@dataclass
class VoteRecord:
    id: str
    name: str
    option: str
    week_start: int
    submitted_at: int


def group_by_week(records: Iterable[VoteRecord]) -> List[Tuple[int, List[VoteRecord]]]:
    """Group records by week, most recent week first, insertion order inside a week."""
    weeks: Dict[int, List[VoteRecord]] = {}
    for record in records:
        weeks.setdefault(record.week_start, []).append(record)
    return sorted(weeks.items(), key=lambda item: item[0], reverse=True)


def _check_option(option: str) -> None:
    if option not in VOTE_OPTIONS:
        raise InvalidOption(option)


class VoteStore(ABC):
    """Storage for weekly votes. ``clock`` supplies "now" (local time by default)."""

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or datetime.now

    def now(self) -> datetime:
        return self._clock()

    def current_week(self) -> int:
        return current_week_start(self.now())

    # --- backend operations ---
    @abstractmethod
    def current_week_votes(self) -> List[VoteRecord]:
        ...

    @abstractmethod
    def all_votes(self) -> List[VoteRecord]:
        """Every record ever stored, in insertion order."""

    @abstractmethod
    def upsert_vote(self, name: str, option: str) -> str:
        """Record ``option`` for ``name`` this week and return the record id.

        A repeat vote in the same week replaces the option and submission time
        of the existing record and keeps its id.
        """

    @abstractmethod
    def delete_vote(self, name: str) -> None:
        """Remove this week's vote for ``name``; no-op when there is none."""

    @abstractmethod
    def add_record(self, name: str, option: str, week_start: int, submitted_at: int) -> str:
        """Insert a record for an explicit week (used for seeding)."""

    # --- derived reads ---
    def vote_history(self) -> List[Tuple[int, List[VoteRecord]]]:
        return group_by_week(self.all_votes())

    def find_current(self, name: str) -> Optional[VoteRecord]:
        for record in self.current_week_votes():
            if record.name == name:
                return record
        return None

    def tally(self) -> List[Tuple[str, List[VoteRecord]]]:
        """Current-week votes per option, in option order, empty options included."""
        buckets: Dict[str, List[VoteRecord]] = {option: [] for option in VOTE_OPTIONS}
        for record in self.current_week_votes():
            buckets[record.option].append(record)
        return list(buckets.items())

    def is_empty(self) -> bool:
        return not self.all_votes()


class InMemoryVoteStore(VoteStore):
    """Process-local store used when no database is configured."""

    def __init__(self, clock: Optional[Clock] = None):
        super().__init__(clock)
        self._records: List[VoteRecord] = []
        self._lock = threading.Lock()

    def current_week_votes(self) -> List[VoteRecord]:
        week = self.current_week()
        with self._lock:
            return [r for r in self._records if r.week_start == week]

    def all_votes(self) -> List[VoteRecord]:
        with self._lock:
            return list(self._records)

    def upsert_vote(self, name: str, option: str) -> str:
        _check_option(option)
        now = self.now()
        week = week_start_ms(now)
        with self._lock:
            for record in self._records:
                if record.name == name and record.week_start == week:
                    record.option = option
                    record.submitted_at = to_epoch_ms(now)
                    logger.info("Updated vote %s for %s: %s", record.id, name, option)
                    return record.id
            record = VoteRecord(uuid.uuid4().hex, name, option, week, to_epoch_ms(now))
            self._records.append(record)
        logger.info("Recorded vote %s for %s: %s", record.id, name, option)
        return record.id

    def delete_vote(self, name: str) -> None:
        week = self.current_week()
        with self._lock:
            for index, record in enumerate(self._records):
                if record.name == name and record.week_start == week:
                    del self._records[index]
                    logger.info("Deleted vote %s for %s", record.id, name)
                    return

    def add_record(self, name: str, option: str, week_start: int, submitted_at: int) -> str:
        _check_option(option)
        record = VoteRecord(uuid.uuid4().hex, name, option, week_start, submitted_at)
        with self._lock:
            self._records.append(record)
        return record.id


@contextmanager
def _mongo_errors(action: str) -> Iterator[None]:
    try:
        yield
    except PyMongoError as exc:
        logger.error("Vote store %s failed: %s", action, exc)
        raise StoreUnavailable(f"Vote store unavailable ({action})") from exc


def _to_record(doc) -> VoteRecord:
    return VoteRecord(
        id=str(doc.get("_id")),
        name=doc.get("name"),
        option=doc.get("option"),
        week_start=doc.get("weekStart"),
        submitted_at=doc.get("timestamp"),
    )


class MongoVoteStore(VoteStore):
    """Votes in the MongoDB ``vote`` collection, one document per (name, week)."""

    collection_name = "vote"

    def __init__(self, database: Database, clock: Optional[Clock] = None):
        super().__init__(clock)
        self._db = database

    @property
    def collection(self):
        return self._db[self.collection_name]

    def ensure_indexes(self) -> None:
        with _mongo_errors("index creation"):
            self.collection.create_index([("weekStart", ASCENDING)], name="by_week")
            self.collection.create_index(
                [("name", ASCENDING), ("weekStart", ASCENDING)], unique=True, name="one_vote_per_week"
            )

    def _find(self, filter_dict) -> List[VoteRecord]:
        docs = get_documents(
            self.collection_name, filter_dict, sort=[("_id", ASCENDING)], database=self._db
        )
        return [_to_record(d) for d in docs]

    def current_week_votes(self) -> List[VoteRecord]:
        with _mongo_errors("read current week"):
            return self._find({"weekStart": self.current_week()})

    def all_votes(self) -> List[VoteRecord]:
        with _mongo_errors("read history"):
            return self._find({})

    def _upsert(self, name: str, week: int, option: str, now: datetime):
        # name and weekStart come from the filter on insert
        return self.collection.find_one_and_update(
            {"name": name, "weekStart": week},
            {
                "$set": {"option": option, "timestamp": to_epoch_ms(now), "updated_at": now},
                "$setOnInsert": {"created_at": now},
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )

    def upsert_vote(self, name: str, option: str) -> str:
        _check_option(option)
        now = self.now()
        week = week_start_ms(now)
        with _mongo_errors("upsert"):
            try:
                doc = self._upsert(name, week, option, now)
            except DuplicateKeyError:
                # A concurrent first vote inserted the same (name, weekStart); update it.
                doc = self._upsert(name, week, option, now)
        logger.info("Recorded vote %s for %s: %s", doc["_id"], name, option)
        return str(doc["_id"])

    def delete_vote(self, name: str) -> None:
        with _mongo_errors("delete"):
            result = self.collection.delete_one({"name": name, "weekStart": self.current_week()})
        if result.deleted_count:
            logger.info("Deleted vote for %s", name)

    def add_record(self, name: str, option: str, week_start: int, submitted_at: int) -> str:
        _check_option(option)
        with _mongo_errors("insert"):
            return create_document(
                self.collection_name,
                Vote(name=name, option=option, weekStart=week_start, timestamp=submitted_at),
                database=self._db,
            )


# Demo weeks shown before anyone has voted.
DEMO_VOTES = [
    ("Sarah", "hell-yeah", datetime(2025, 10, 10)),
    ("Mike", "only-if-boys", datetime(2025, 10, 10)),
    ("Alex", "miss-me", datetime(2025, 10, 11)),
    ("Jordan", "hell-yeah", datetime(2025, 10, 11)),
    ("Sarah", "only-if-boys", datetime(2025, 10, 3)),
    ("Mike", "hell-yeah", datetime(2025, 10, 3)),
    ("Alex", "hell-yeah", datetime(2025, 10, 4)),
]


def seed_demo_votes(store: VoteStore) -> bool:
    """Load the demo history into an empty store. Returns False if it already had votes."""
    if not store.is_empty():
        return False
    for name, option, submitted in DEMO_VOTES:
        store.add_record(name, option, week_start_ms(submitted), to_epoch_ms(submitted))
    logger.info("Seeded %d demo votes", len(DEMO_VOTES))
    return True
