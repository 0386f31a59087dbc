"""In-memory stand-in for the parts of the Firestore client the app uses.

Listeners are notified synchronously on every write to their collection,
which makes subscription behaviour deterministic in tests.
"""
import itertools
from datetime import datetime, timedelta, timezone

from firebase_admin import firestore
from google.api_core.exceptions import AlreadyExists, ServiceUnavailable

from clinic.core.firebase import StoreClient

_BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


class FakeSnapshot:
    def __init__(self, ref, data):
        self.reference = ref
        self.id = ref.id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeWatch:
    def __init__(self, db, query, callback):
        self.db = db
        self.query = query
        self.callback = callback

    def unsubscribe(self):
        if self in self.db.listeners:
            self.db.listeners.remove(self)


class FakeQuery:
    def __init__(self, db, path, order=None):
        self.db = db
        self.path = path
        self.order = order

    def order_by(self, field, direction=None):
        return FakeQuery(self.db, self.path, (field, direction == firestore.Query.DESCENDING))

    def _docs(self):
        if self.db.fail_reads:
            raise ServiceUnavailable("store offline")
        docs = [
            FakeSnapshot(FakeDocumentRef(self.db, self.path, doc_id), data)
            for doc_id, data in self.db.data.get(self.path, {}).items()
        ]
        if self.order:
            field, desc = self.order
            docs = [d for d in docs if field in d._data]
            docs.sort(key=lambda d: d._data[field], reverse=desc)
        return docs

    def stream(self):
        return iter(self._docs())

    def on_snapshot(self, callback):
        watch = FakeWatch(self.db, self, callback)
        self.db.listeners.append(watch)
        callback(self._docs(), [], datetime.now(timezone.utc))
        return watch


class FakeCollection(FakeQuery):
    def __init__(self, db, path):
        super().__init__(db, path)

    def document(self, doc_id=None):
        return FakeDocumentRef(self.db, self.path, doc_id or self.db.new_id())

    def add(self, data):
        ref = self.document()
        ref.set(data)
        return self.db.now(), ref


class FakeDocumentRef:
    def __init__(self, db, collection_path, doc_id):
        self.db = db
        self.collection_path = collection_path
        self.id = doc_id

    @property
    def path(self):
        return f"{self.collection_path}/{self.id}"

    def collection(self, name):
        return FakeCollection(self.db, f"{self.path}/{name}")

    def get(self):
        if self.db.fail_reads:
            raise ServiceUnavailable("store offline")
        return FakeSnapshot(self, self.db.data.get(self.collection_path, {}).get(self.id))

    def set(self, data, merge=False):
        if self.db.fail_writes:
            raise ServiceUnavailable("store offline")
        docs = self.db.data.setdefault(self.collection_path, {})
        resolved = self.db.resolve(data)
        if merge and self.id in docs:
            docs[self.id] = {**docs[self.id], **resolved}
        else:
            docs[self.id] = resolved
        self.db.writes.append((self.collection_path, self.id))
        self.db.notify(self.collection_path)

    def create(self, data):
        if self.id in self.db.data.get(self.collection_path, {}):
            raise AlreadyExists(f"Document already exists: {self.path}")
        self.set(data)


class FakeFirestore:
    def __init__(self):
        self.data = {}
        self.listeners = []
        self.writes = []
        self.fail_reads = False
        self.fail_writes = False
        self._ids = itertools.count(1)
        self._ticks = itertools.count(1)

    def collection(self, path):
        return FakeCollection(self, path)

    def new_id(self):
        return f"doc{next(self._ids)}"

    def now(self):
        return _BASE_TIME + timedelta(seconds=next(self._ticks))

    def resolve(self, data):
        return {
            k: (self.now() if v is firestore.SERVER_TIMESTAMP else v)
            for k, v in data.items()
        }

    def notify(self, path):
        for watch in list(self.listeners):
            if watch.query.path == path:
                watch.callback(watch.query._docs(), [], datetime.now(timezone.utc))

    def listeners_on(self, path):
        return [w for w in self.listeners if w.query.path == path]

    def seed(self, path, doc_id, data):
        self.data.setdefault(path, {})[doc_id] = dict(data)
        self.notify(path)


def make_store(tokens=None):
    """StoreClient over a FakeFirestore; ``tokens`` maps ID token -> claims."""
    tokens = tokens or {}
    db = FakeFirestore()

    def verify(id_token):
        if id_token not in tokens:
            raise ValueError("Invalid ID token")
        return tokens[id_token]

    return StoreClient(db=db, token_verifier=verify), db
