import unittest
from datetime import datetime, timezone

from fake_firestore import make_store

from clinic.services.subscriptions import ClinicState, LiveCollection

DATE_FORMAT = "%d/%m/%Y"


class TestLiveCollection(unittest.TestCase):
    def setUp(self):
        self.store, self.db = make_store()

    def test_each_emission_replaces_snapshot(self):
        live = LiveCollection(self.store.collection("reviews"), lambda d: d.id, "reviews")
        live.start()
        self.assertEqual(live.snapshot(), [])

        self.db.seed("reviews", "r1", {})
        self.db.seed("reviews", "r2", {})
        self.assertEqual(live.snapshot(), ["r1", "r2"])

        del self.db.data["reviews"]["r1"]
        self.db.notify("reviews")
        self.assertEqual(live.snapshot(), ["r2"])

    def test_malformed_document_is_skipped(self):
        def transform(doc):
            if doc.id == "bad":
                raise KeyError("broken document")
            return doc.id

        live = LiveCollection(self.store.collection("reviews"), transform, "reviews")
        self.db.seed("reviews", "r1", {})
        live.start()
        self.db.seed("reviews", "bad", {})
        self.db.seed("reviews", "r2", {})

        self.assertEqual(live.snapshot(), ["r1", "r2"])
        self.assertEqual(live.emissions, 3)

    def test_failed_preparation_keeps_previous_snapshot(self):
        class Failing(LiveCollection):
            def _prepare(self, items):
                if "bad" in items:
                    raise ValueError("cannot order")
                return items

        live = Failing(self.store.collection("reviews"), lambda d: d.id, "reviews")
        self.db.seed("reviews", "r1", {})
        live.start()
        self.db.seed("reviews", "bad", {})

        self.assertEqual(live.snapshot(), ["r1"])

    def test_close_is_idempotent(self):
        live = LiveCollection(self.store.collection("reviews"), lambda d: d.id, "reviews")
        live.start()
        live.close()
        live.close()
        self.assertEqual(self.db.listeners_on("reviews"), [])
        self.assertFalse(live.active)


class TestClinicState(unittest.TestCase):
    def setUp(self):
        self.store, self.db = make_store()
        self.clinic = ClinicState(self.store, DATE_FORMAT)

    def tearDown(self):
        self.clinic.close()

    def test_registration_date_display(self):
        self.db.seed("patients", "p1", {"name": "Ana", "registered_at": datetime(2025, 3, 14, 12, tzinfo=timezone.utc)})
        self.db.seed("patients", "p2", {"name": "Luis"})
        self.clinic.start()

        by_id = {p.id: p.record for p in self.clinic.patients.snapshot()}
        self.assertRegex(by_id["p1"].registered_at, r"^\d{2}/03/2025$")
        self.assertEqual(by_id["p2"].registered_at, "No date")

    def test_reviews_newest_first(self):
        self.db.seed("reviews", "old", {"created_at": datetime(2025, 1, 1, tzinfo=timezone.utc)})
        self.db.seed("reviews", "new", {"created_at": datetime(2025, 2, 1, tzinfo=timezone.utc)})
        self.clinic.start()
        self.assertEqual([r.id for r in self.clinic.reviews.snapshot()], ["new", "old"])

    def test_three_subscriptions_and_teardown(self):
        self.clinic.start()
        for path in ("patients", "sessions", "reviews"):
            self.assertEqual(len(self.db.listeners_on(path)), 1)

        self.clinic.close()
        self.assertEqual(self.db.listeners, [])

    def test_one_failing_subscription_does_not_block_others(self):
        def boom(callback):
            raise RuntimeError("watch refused")

        self.clinic.sessions._query.on_snapshot = boom
        self.clinic.start()

        self.assertFalse(self.clinic.sessions.active)
        self.assertTrue(self.clinic.patients.active)
        self.assertTrue(self.clinic.reviews.active)

    def test_loosely_typed_documents_still_listed(self):
        self.db.seed("patients", "p1", {"name": "Ana", "age": 34})
        self.db.seed("patients", "legacy", {"name": "Rosa", "profession": None, "age": None})
        self.db.seed("patients", "p3", {"name": 1234, "medical_history": ["asma"]})
        self.db.seed("sessions", "s1", {"created_at": datetime(2025, 1, 1, tzinfo=timezone.utc), "notes": None, "points": 36})
        self.db.seed("reviews", "r1", {"created_at": datetime(2025, 1, 1, tzinfo=timezone.utc), "diagnosis": None, "time": 930})
        self.clinic.start()

        by_id = {p.id: p.record for p in self.clinic.patients.snapshot()}
        self.assertEqual(sorted(by_id), ["legacy", "p1", "p3"])
        self.assertEqual(by_id["p1"].age, "34")
        self.assertEqual(by_id["legacy"].profession, "")
        self.assertEqual(by_id["legacy"].age, "")
        self.assertEqual(by_id["p3"].name, "1234")

        session = self.clinic.sessions.snapshot()[0].record
        self.assertEqual((session.notes, session.points), ("", "36"))
        review = self.clinic.reviews.snapshot()[0].record
        self.assertEqual((review.diagnosis, review.time), ("", "930"))

    def test_patient_lookup(self):
        self.db.seed("patients", "p1", {"name": "Ana"})
        self.clinic.start()
        self.assertEqual(self.clinic.patient("p1").record.name, "Ana")
        self.assertIsNone(self.clinic.patient("missing"))


if __name__ == '__main__':
    unittest.main()
