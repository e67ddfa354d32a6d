import unittest

from loge_seatmap.normalizer import normalize
from loge_seatmap.projector import DetailProjector, compress_ranges, format_seat_ranges
from loge_seatmap.segmentation import SegmentationEngine
from loge_seatmap.topology import Pillar, VenueTopology

from sample_data import booking_records, crm_record


class TestRangeCompression(unittest.TestCase):
    def test_compress(self):
        self.assertEqual(compress_ranges([43, 38, 39, 42, 39]), [(38, 39), (42, 43)])
        self.assertEqual(format_seat_ranges([38, 39, 42, 43]), "38-39, 42-43")
        self.assertEqual(format_seat_ranges([5, 7, 8, 9]), "5, 7-9")
        self.assertEqual(format_seat_ranges([]), "")


class TestDetailProjector(unittest.TestCase):
    def setUp(self):
        topo = VenueTopology.build([Pillar("E", 40, 41)], {"F": [(30, 44), (45, 60)]})
        self.engine = SegmentationEngine(topo)
        self.projector = DetailProjector()

    def _segments(self, records, row):
        return self.engine.segment(normalize(records)[row], row)

    def test_pillar_straddling_segment(self):
        [seg] = self._segments(booking_records("E", [38, 39, 42, 43], "B1", account="Stampede Co"), "E")
        view = self.projector.project(seg, [seg])
        self.assertEqual(view.kind, "group")
        self.assertEqual(view.seat_range, "38-39, 42-43")
        self.assertEqual(view.seat_count, 4)
        self.assertEqual(view.display_name, "Stampede Co")

    def test_multi_segment_booking_is_reassembled(self):
        segs = self._segments(booking_records("F", [42, 43, 44, 45, 46], "B7") + [crm_record("F", 47, booking="B8")], "F")
        first = segs[0]
        self.assertTrue(first.is_multi_segment)
        view = self.projector.project(first, segs)
        self.assertEqual(view.seat_range, "42-46")
        self.assertEqual(view.seat_count, 5)
        self.assertEqual(view.title, "Row F seats 42-46")

    def test_multi_segment_only_joins_same_day_and_event(self):
        segs = self._segments(
            booking_records("F", [43, 44, 45], "B7") + booking_records("F", [50, 51], "B7", day="Day 2 - Saturday"),
            "F",
        )
        view = self.projector.project(segs[0], segs)
        self.assertEqual(view.seat_numbers, (43, 44, 45))

    def test_single_seat(self):
        [seg] = self._segments([crm_record("A", 12, record_id="00k1", account="Solo")], "A")
        view = self.projector.project(seg, [seg])
        self.assertEqual(view.kind, "single")
        self.assertEqual(
            (view.seat_number, view.day, view.event, view.display_name, view.record_id),
            (12, "Day 1 - Friday", "Rodeo", "Solo", "00k1"),
        )

    def test_missing_segment_yields_empty_view(self):
        [seg] = self._segments(booking_records("C", [1, 2], "G"), "C")
        self.assertTrue(self.projector.project(seg, []).is_empty)
        self.assertTrue(self.projector.project(None, [seg]).is_empty)


if __name__ == "__main__":
    unittest.main()
