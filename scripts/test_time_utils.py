import unittest
from datetime import date, datetime

from clinic.services.time_utils import NO_DATE, display_date, parse_date, today_iso

FMT = "%d/%m/%Y"


class TestTimeUtils(unittest.TestCase):
    def test_display_naive_datetime(self):
        self.assertEqual(display_date(datetime(2025, 3, 14, 9, 30), FMT), "14/03/2025")

    def test_display_passes_strings_through(self):
        self.assertEqual(display_date("2025-03-14", FMT), "2025-03-14")

    def test_display_missing(self):
        self.assertEqual(display_date(None, FMT), NO_DATE)
        self.assertEqual(display_date("", FMT), NO_DATE)

    def test_parse_iso_form_input(self):
        self.assertEqual(parse_date("2025-03-14", FMT), datetime(2025, 3, 14))

    def test_parse_display_format(self):
        self.assertEqual(parse_date("14/03/2025", FMT), datetime(2025, 3, 14))

    def test_parse_garbage(self):
        self.assertIsNone(parse_date("No date", FMT))
        self.assertIsNone(parse_date(None, FMT))

    def test_parse_date_object(self):
        self.assertEqual(parse_date(date(2025, 3, 14), FMT), datetime(2025, 3, 14))

    def test_today(self):
        self.assertEqual(today_iso(), date.today().isoformat())


if __name__ == '__main__':
    unittest.main()
