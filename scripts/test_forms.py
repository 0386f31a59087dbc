import unittest

from fake_firestore import make_store

from clinic.services.forms import PatientForm, ReviewForm, SessionForm
from clinic.services.history import PatientHistory
from clinic.services.subscriptions import ClinicState

DATE_FORMAT = "%d/%m/%Y"


class TestPatientForm(unittest.TestCase):
    def setUp(self):
        self.store, self.db = make_store()
        self.form = PatientForm(self.store)

    def test_register_with_required_fields_only(self):
        self.form.update(name="Ana Pérez", age="34")
        result = self.form.submit()

        self.assertTrue(result.ok)
        patients = self.db.data["patients"]
        self.assertEqual(len(patients), 1)
        doc = patients[result.id]
        self.assertEqual(doc["name"], "Ana Pérez")
        self.assertEqual(doc["age"], "34")
        self.assertEqual(doc["search_key"], "ana pérez")
        self.assertIsNotNone(doc["registered_at"])
        self.assertEqual(doc["profession"], "")
        self.assertEqual(self.form.draft, self.form.initial())

    def test_missing_age_is_rejected_locally(self):
        self.form.update(name="Ana Pérez")
        result = self.form.submit()

        self.assertFalse(result.ok)
        self.assertEqual(self.db.writes, [])
        self.assertEqual(self.form.draft["name"], "Ana Pérez")

    def test_write_failure_keeps_draft(self):
        self.db.fail_writes = True
        self.form.update(name="Ana Pérez", age="34", profession="Ingeniera")
        result = self.form.submit()

        self.assertFalse(result.ok)
        self.assertEqual(result.message, "Error registering patient.")
        self.assertEqual(self.form.draft["profession"], "Ingeniera")

    def test_unknown_field(self):
        with self.assertRaises(ValueError):
            self.form.update(rut="12.345.678-9")


class TestSessionForm(unittest.TestCase):
    def setUp(self):
        self.store, self.db = make_store()
        self.db.seed("patients", "p1", {"name": "Ana Pérez"})
        self.db.seed("patients", "p2", {"name": "Luis Gómez"})
        self.clinic = ClinicState(self.store, DATE_FORMAT)
        self.clinic.start()
        self.form = SessionForm(self.store, self.clinic)

    def tearDown(self):
        self.clinic.close()

    def test_defaults(self):
        self.assertEqual(self.form.draft["patient_id"], "")
        self.assertRegex(self.form.draft["date"], r"^\d{4}-\d{2}-\d{2}$")
        self.assertRegex(self.form.draft["time"], r"^\d{2}:\d{2}$")

    def test_choices_follow_snapshot_order(self):
        self.assertEqual(self.form.choices(), [("p1", "Ana Pérez"), ("p2", "Luis Gómez")])

    def test_without_patient_no_write(self):
        self.form.update(diagnosis="Deficiencia de Yin")
        result = self.form.submit()

        self.assertFalse(result.ok)
        self.assertEqual(result.message, "Please select a patient and a date.")
        self.assertEqual(self.db.writes, [])

    def test_saved_under_patient(self):
        self.form.update(patient_id="p1", reason="Dolor lumbar", points="IG4, H3", pulse_left="Tenso")
        result = self.form.submit()

        self.assertTrue(result.ok)
        doc = self.db.data["patients/p1/sessions"][result.id]
        self.assertEqual(doc["reason"], "Dolor lumbar")
        self.assertEqual(doc["pulse_left"], "Tenso")
        self.assertIn("created_at", doc)
        self.assertNotIn("sessions", self.db.data)
        self.assertEqual(self.form.draft["patient_id"], "")


class TestReviewForm(unittest.TestCase):
    def setUp(self):
        self.store, self.db = make_store()
        self.db.seed("patients", "p1", {"name": "Ana Pérez"})
        self.clinic = ClinicState(self.store, DATE_FORMAT)
        self.clinic.start()
        self.history = PatientHistory(self.store, self.clinic, DATE_FORMAT)
        self.form = ReviewForm(self.store, self.history)

    def tearDown(self):
        self.history.close()
        self.clinic.close()

    def test_requires_selected_patient(self):
        self.form.update(diagnosis="Mejoría")
        self.assertFalse(self.form.submit().ok)
        self.assertEqual(self.db.writes, [])

    def test_requires_diagnosis(self):
        self.history.select(self.clinic.patient("p1"))
        self.assertFalse(self.form.submit().ok)

    def test_review_is_denormalized_and_visible_after_emission(self):
        self.history.select(self.clinic.patient("p1"))
        self.form.update(diagnosis="Mejoría", notes="Continuar tratamiento")
        result = self.form.submit()

        self.assertTrue(result.ok)
        reviews = self.clinic.reviews.snapshot()
        self.assertEqual(len(reviews), 1)
        self.assertEqual(reviews[0].record.patient_id, "p1")
        self.assertEqual(reviews[0].record.patient_name, "Ana Pérez")
        self.assertEqual(self.form.draft, {"diagnosis": "", "treatment": "", "notes": ""})


if __name__ == '__main__':
    unittest.main()
