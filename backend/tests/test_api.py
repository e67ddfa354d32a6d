import os
import unittest


def _record(row, seat, booking=None, day="Day 1 - Friday", event="Rodeo", rid=None):
    rec = {
        "Id": rid or f"00k{row}{seat}",
        "PricebookEntry": {
            "Product2": {"Row__c": row, "Seat_Number__c": seat, "Day_of_Stampede__c": day, "Event_Type__c": event}
        },
        "Opportunity": {"Account": {"Name": "Acme Ltd"}},
    }
    if booking:
        rec["OpportunityId"] = booking
    return rec


class TestSeatMapAPI(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        # Import after env vars are set so settings pick them up.
        os.environ.pop("LOGE_SEATMAP_RECORDS_FILE", None)
        os.environ.pop("LOGE_SEATMAP_TOPOLOGY_FILE", None)
        from backend.app import main

        cls.main = main

    def setUp(self):
        from fastapi.testclient import TestClient

        from loge_seatmap.controller import SeatMapController

        self.main.reset_controller(SeatMapController())
        self.c = TestClient(self.main.app)
        records = [_record("C", f"{n}.0", "G1") for n in (32, 33, 34, 35)]
        records += [_record("C", 36, "G2"), _record("E", 38, "G3"), _record("E", 39, "G3")]
        records += [_record("E", 42, "G3"), _record("E", 43, "G3"), _record("B", "bad")]
        records += [_record("A", 7, day="Day 2 - Saturday", event="Evening Show", rid="solo")]
        self.summary = self.c.put("/records", json={"records": records}).json()

    def tearDown(self):
        self.main.reset_controller(None)

    def test_health_and_options(self):
        self.assertEqual(self.c.get("/health").json(), {"ok": True})
        opts = self.c.get("/options").json()
        self.assertEqual(len(opts["days"]), 10)
        self.assertEqual(opts["events"][0]["value"], "Rodeo")

    def test_load_summary(self):
        self.assertEqual(self.summary["total"], 11)
        self.assertEqual(self.summary["accepted"], 10)
        self.assertEqual(self.summary["skipped_unparseable"], 1)
        self.assertEqual(self.summary["rows"], 3)

    def test_segments_with_filter(self):
        rows = self.c.get("/segments", params={"day": "Day 1 - Friday", "event": "Rodeo"}).json()
        self.assertEqual([r["row"] for r in rows], ["C", "E"])
        c_segments = rows[0]["segments"]
        self.assertEqual([(s["booking_id"], s["start_seat"], s["end_seat"]) for s in c_segments], [("G1", 32, 35), ("G2", 36, 36)])
        e_segment = rows[1]["segments"][0]
        self.assertEqual(e_segment["member_seat_ids"], ["E38", "E39", "E42", "E43"])
        self.assertTrue(e_segment["is_connected"])

    def test_selection_flow(self):
        rows = self.c.get("/segments").json()
        e_id = next(r for r in rows if r["row"] == "E")["segments"][0]["segment_id"]
        detail = self.c.post("/selection", json={"segment_id": e_id}).json()
        self.assertEqual(detail["seat_range"], "38-39, 42-43")
        self.assertEqual(detail["seat_count"], 4)
        self.assertEqual(self.c.get("/state").json()["selected_segment_id"], e_id)

        cleared = self.c.delete("/selection").json()
        self.assertEqual(cleared["kind"], "none")

        solo = next(r for r in rows if r["row"] == "A")["segments"][0]["segment_id"]
        detail = self.c.post("/selection", json={"segment_id": solo}).json()
        self.assertEqual((detail["kind"], detail["seat_number"], detail["record_id"]), ("single", 7, "solo"))

    def test_get_segments_is_read_only(self):
        rows = self.c.get("/segments").json()
        e_id = next(r for r in rows if r["row"] == "E")["segments"][0]["segment_id"]
        self.c.post("/selection", json={"segment_id": e_id})

        rows = self.c.get("/segments", params={"day": "Day 2 - Saturday"}).json()
        self.assertEqual([r["row"] for r in rows], ["A"])
        state = self.c.get("/state").json()
        self.assertEqual(state["filter"], {"day": "", "event": ""})
        self.assertEqual(state["selected_segment_id"], e_id)

    def test_put_filter_changes_shared_state(self):
        rows = self.c.get("/segments").json()
        e_id = next(r for r in rows if r["row"] == "E")["segments"][0]["segment_id"]
        self.c.post("/selection", json={"segment_id": e_id})

        state = self.c.put("/filter", json={"day": "Day 2 - Saturday", "event": ""}).json()
        self.assertEqual(state["filter"], {"day": "Day 2 - Saturday", "event": ""})
        self.assertEqual([r["row"] for r in state["rows"]], ["A"])
        self.assertIsNone(state["selected_segment_id"])
        self.assertEqual([r["row"] for r in self.c.get("/segments").json()], ["A"])

    def test_bad_topology_file_is_400(self):
        from loge_seatmap.config import Settings

        saved = self.main.settings
        self.main.settings = Settings(topology_file="/nonexistent/topology.json")
        self.main.reset_controller(None)
        try:
            r = self.c.get("/state")
        finally:
            self.main.settings = saved
        self.assertEqual(r.status_code, 400)
        self.assertIn("file not found", r.json()["detail"])

    def test_unknown_segment_is_404(self):
        r = self.c.post("/selection", json={"segment_id": "Z9-9:none"})
        self.assertEqual(r.status_code, 404)

    def test_group_bookings(self):
        payload = {
            "groupBookings": [
                {"groupName": "Team Alpha", "seatCount": 4, "seatLocations": ["C32", "C33", "C34", "C35"]},
                {"groupName": "Crew Epsilon", "seatCount": 3, "seatLocations": ["E42", "E43", "E44"]},
            ]
        }
        rows = self.c.post("/group-bookings/segments", json=payload).json()
        self.assertEqual([r["row"] for r in rows], ["C", "E"])
        self.assertEqual(rows[0]["segments"][0]["seat_count"], 4)
        self.assertEqual(rows[1]["segments"][0]["display_name"], "Crew Epsilon")


if __name__ == "__main__":
    unittest.main()
