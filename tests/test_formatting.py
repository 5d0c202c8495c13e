import unittest
from datetime import datetime

from cfd_status.utils.formatting import format_duration, format_error_row, format_header, format_timestamp


class FormattingTests(unittest.TestCase):
    def test_header_columns(self) -> None:
        header = format_header()
        self.assertEqual(len(header), 66)
        self.assertTrue(header.startswith("Case "))
        self.assertTrue(header.endswith("ETA"))

    def test_timestamp(self) -> None:
        self.assertEqual(format_timestamp(datetime(2026, 3, 4, 5, 6, 7)), "2026-03-04 05:06:07")

    def test_error_row(self) -> None:
        self.assertEqual(format_error_row("case", "gone"), "case".ljust(20) + "  ERROR: gone")
        self.assertIn("no observation yet", format_error_row("case", None))

    def test_duration(self) -> None:
        self.assertEqual(format_duration(180), "03m")
        self.assertEqual(format_duration(3_720), "01h02m")
        self.assertEqual(format_duration(90_000), "1d 01h00m")
        self.assertEqual(format_duration(-5), "00m")


if __name__ == "__main__":
    unittest.main()
