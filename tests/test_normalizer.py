import unittest

from loge_seatmap.normalizer import FieldPaths, RecordNormalizer, normalize, parse_seat_number, resolve_path

from sample_data import crm_record


class TestParseSeatNumber(unittest.TestCase):
    def test_float_then_truncate(self):
        self.assertEqual(parse_seat_number("32.0"), 32)
        self.assertEqual(parse_seat_number("32.9"), 32)
        self.assertEqual(parse_seat_number(33.0), 33)
        self.assertEqual(parse_seat_number(" 7 "), 7)

    def test_rejects_non_numeric_and_negative(self):
        for raw in ("A12", "nan", "inf", "", None, -1, "-3.5", True, 10**400, "1e400"):
            self.assertIsNone(parse_seat_number(raw), raw)


class TestRecordNormalizer(unittest.TestCase):
    def test_groups_by_row(self):
        out = normalize([crm_record("C", "32.0", booking="G1"), crm_record("D", 5), crm_record("C", 33.0, booking="G1")])
        self.assertEqual(sorted(out), ["C", "D"])
        self.assertEqual([s.seat_number for s in out["C"]], [32, 33])
        seat = out["C"][0]
        self.assertEqual(seat.day, "Day 1 - Friday")
        self.assertEqual(seat.event, "Rodeo")
        self.assertEqual(seat.display_name, "Acme Ltd")
        self.assertEqual(seat.booking_id, "G1")
        self.assertEqual(seat.seat_id, "C32")

    def test_missing_booking_gets_singleton_identity(self):
        out = normalize([crm_record("D", 5, record_id="r1"), crm_record("D", 6, record_id="r2")])
        self.assertEqual([s.booking_id for s in out["D"]], ["single:r1", "single:r2"])

    def test_bad_records_are_counted_not_fatal(self):
        bad_row = crm_record("", 4)
        no_seat = crm_record("C", None)
        n = RecordNormalizer()
        out = n.normalize([bad_row, no_seat, crm_record("C", "abc"), "garbage", crm_record("C", 1)])
        self.assertEqual([s.seat_number for s in out["C"]], [1])
        self.assertEqual(n.report.total, 5)
        self.assertEqual(n.report.accepted, 1)
        self.assertEqual(n.report.skipped_missing, 3)
        self.assertEqual(n.report.skipped_unparseable, 1)
        self.assertEqual(n.skipped, 4)

    def test_huge_seat_number_does_not_abort_batch(self):
        n = RecordNormalizer()
        out = n.normalize([crm_record("C", 10**400), crm_record("C", 1)])
        self.assertEqual([s.seat_number for s in out["C"]], [1])
        self.assertEqual(n.report.skipped_unparseable, 1)

    def test_flat_dotted_keys_and_custom_paths(self):
        rec = {"PricebookEntry.Product2.Row__c": "B", "PricebookEntry.Product2.Seat_Number__c": "12"}
        self.assertEqual(resolve_path(rec, "PricebookEntry.Product2.Row__c"), "B")
        out = normalize([rec])
        self.assertEqual(out["B"][0].seat_number, 12)
        self.assertEqual(out["B"][0].record_id, "record-0")

        paths = FieldPaths(row="row", seat_number="seat", booking_id="booking", record_id="id")
        out = normalize([{"row": "A", "seat": 3, "booking": "X", "id": "9"}], paths)
        self.assertEqual(out["A"][0].booking_id, "X")


if __name__ == "__main__":
    unittest.main()
