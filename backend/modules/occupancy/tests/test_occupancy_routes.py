# backend/modules/occupancy/tests/test_occupancy_routes.py

"""
Tests for the occupancy API endpoints
"""

import pytest
from datetime import date, datetime, time
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from modules.occupancy.enums import ReservationStatus
from modules.occupancy.models import LiveSession, Reservation, Venue, VenueTable

DAY = date(2024, 6, 14)


@pytest.fixture
def floor(db_session: Session):
    """A venue with a browsing session on T1 and overlapping bookings on T2"""
    venue = Venue(name="Meeple Hall", slug="meeple-hall")
    db_session.add(venue)
    db_session.flush()

    t1 = VenueTable(venue_id=venue.id, label="T1", capacity=4)
    t2 = VenueTable(venue_id=venue.id, label="T2", capacity=4)
    db_session.add_all([t1, t2])
    db_session.flush()

    db_session.add_all(
        [
            LiveSession(
                venue_id=venue.id,
                table_id=t1.id,
                created_at=datetime(2024, 6, 14, 19, 0),
            ),
            LiveSession(
                venue_id=venue.id,
                table_id=t1.id,
                created_at=datetime(2024, 6, 14, 18, 55),
            ),
        ]
    )

    def booking(table, start, end, guest):
        return Reservation(
            venue_id=venue.id,
            table_id=table.id,
            reservation_date=DAY,
            start_time=time.fromisoformat(start),
            end_time=time.fromisoformat(end),
            status=ReservationStatus.CONFIRMED,
            party_size=2,
            guest_name=guest,
        )

    db_session.add_all(
        [
            booking(t1, "21:20", "23:00", "Ada"),
            booking(t2, "20:00", "21:30", "Grace"),
            booking(t2, "21:00", "22:00", "Linus"),
        ]
    )
    db_session.flush()
    return {"venue": venue, "t1": t1, "t2": t2}


class TestOccupancyRoutes:
    """Test occupancy endpoints"""

    def test_get_venue_occupancy(self, client: TestClient, floor):
        response = client.get(f"/api/v1/occupancy/venues/{floor['venue'].id}")

        assert response.status_code == 200
        data = response.json()
        assert data["date"] == "2024-06-14"
        assert data["conflict_count"] == 1
        assert data["duplicate_session_table_ids"] == [floor["t1"].id]
        assert data["config"]["buffer_minutes"] == 15

        tables = {t["label"]: t for t in data["tables"]}
        assert set(tables) == {"T1", "T2"}

        t1 = tables["T1"]
        assert t1["occupant"]["activity"] == "browsing"
        assert t1["occupant"]["elapsed_minutes"] == 30
        assert t1["occupant"]["elapsed_label"] == "30m"
        assert t1["occupant"]["has_duplicates"] is True
        # Default 120 minute session ends 21:00, twenty minutes before the booking
        assert t1["risk"]["risk_level"] == "medium"
        assert t1["risk"]["buffer_minutes"] == 20
        assert t1["risk"]["is_estimated"] is True
        assert t1["risk"]["end_estimate_source"] == "default_session_duration"

        t2 = tables["T2"]
        assert t2["occupant"] is None
        assert t2["conflicts"][0]["overlap_minutes"] == 30
        assert t2["conflicts"][0]["overlap"] == {
            "date": "2024-06-14",
            "start": "21:00",
            "end": "21:30",
        }
        assert t2["conflicts"][0]["severity"] == "critical"

    def test_other_date_has_no_live_occupants(self, client: TestClient, floor):
        response = client.get(
            f"/api/v1/occupancy/venues/{floor['venue'].id}", params={"date": "2024-06-15"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["conflict_count"] == 0
        assert all(t["occupant"] is None for t in data["tables"])

    def test_unknown_venue(self, client: TestClient):
        response = client.get("/api/v1/occupancy/venues/999")

        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"

    def test_malformed_reservation(self, client: TestClient, db_session: Session, floor):
        db_session.add(
            Reservation(
                venue_id=floor["venue"].id,
                table_id=floor["t2"].id,
                reservation_date=DAY,
                start_time=time(22, 0),
                end_time=time(21, 0),
                status=ReservationStatus.CONFIRMED,
                party_size=2,
                guest_name="Backwards",
            )
        )
        db_session.flush()

        response = client.get(f"/api/v1/occupancy/venues/{floor['venue'].id}")

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "MALFORMED_RECORD"
        assert body["context"]["record_type"] == "reservation"
        assert "context" not in client.get("/api/v1/occupancy/venues/999").json()

    def test_alerts(self, client: TestClient, floor):
        response = client.get(f"/api/v1/occupancy/venues/{floor['venue'].id}/alerts")

        assert response.status_code == 200
        alerts = response.json()
        assert [a["type"] for a in alerts] == [
            "conflict",
            "turnover_risk",
            "duplicate_sessions",
        ]
        assert alerts[0]["severity"] == "critical"
        assert alerts[1]["severity"] == "medium"
        assert "9:20 PM" in alerts[1]["message"]
        assert alerts[2]["severity"] == "warning"
