"""Unit tests for live-marker reconciliation."""

from typing import Optional
from unittest.mock import MagicMock

from flightboard.markers import MarkerContent, MarkerReconciler, marker_rotation
from flightboard.models import (
    Airline,
    Endpoint,
    FlightIdentifier,
    FlightRecord,
    FlightStatus,
    LiveTelemetry,
)


def _make_record(
    flight_iata: str,
    lat: Optional[float] = 47.5,
    lon: Optional[float] = 8.5,
    direction: float = 90.0,
    live: bool = True,
    number: Optional[str] = None,
) -> FlightRecord:
    return FlightRecord(
        flight_date="2025-02-17",
        status=FlightStatus.ACTIVE,
        departure=Endpoint(airport="London", iata="LHR"),
        arrival=Endpoint(airport="Zurich", iata="ZRH"),
        airline=Airline(name="Swiss"),
        flight=FlightIdentifier(number=number or flight_iata, iata=flight_iata),
        live=(
            LiveTelemetry(
                latitude=lat,
                longitude=lon,
                direction=direction,
                altitude=8839.6,
                speed_horizontal=755.4,
            )
            if live
            else None
        ),
    )


class TestApply:
    """Upserts and removals per snapshot."""

    def test_creates_handles_for_live_flights(self) -> None:
        surface = MagicMock()
        reconciler = MarkerReconciler(surface)

        reconciler.apply([_make_record("LX1"), _make_record("LX2", live=False)])

        assert reconciler.ids == {"LX1"}
        handle = reconciler.get("LX1")
        assert (handle.latitude, handle.longitude) == (47.5, 8.5)
        assert handle.rotation == 45.0
        assert handle.content == MarkerContent(
            title="LX1", airline="Swiss", origin="London", altitude_m=8840, speed_kmh=755
        )
        surface.add.assert_called_once_with(handle)

    def test_requires_both_coordinates(self) -> None:
        reconciler = MarkerReconciler()
        reconciler.apply(
            [
                _make_record("LX1", lat=None),
                _make_record("LX2", lon=None),
                _make_record("LX3", lat=0.0, lon=0.0),
            ]
        )
        assert reconciler.ids == {"LX3"}

    def test_non_finite_coordinates_never_reach_the_surface(self) -> None:
        surface = MagicMock()
        reconciler = MarkerReconciler(surface)
        snapshot = [_make_record("LX1", lat=float("nan")), _make_record("LX2", lon=float("inf"))]

        reconciler.apply(snapshot)
        reconciler.apply(snapshot)

        assert len(reconciler) == 0
        surface.add.assert_not_called()
        surface.update.assert_not_called()

    def test_non_finite_readings_do_not_churn_updates(self) -> None:
        surface = MagicMock()
        reconciler = MarkerReconciler(surface)
        snapshot = [_make_record("LX1", direction=float("nan"))]

        reconciler.apply(snapshot)
        reconciler.apply(snapshot)

        assert reconciler.get("LX1").rotation == -45.0
        surface.add.assert_called_once()
        surface.update.assert_not_called()

    def test_key_falls_back_to_number(self) -> None:
        reconciler = MarkerReconciler()
        reconciler.apply([_make_record("", number="318")])
        assert "318" in reconciler

    def test_snapshot_replacement(self) -> None:
        surface = MagicMock()
        reconciler = MarkerReconciler(surface)
        reconciler.apply([_make_record("X"), _make_record("Y")])
        x_handle = reconciler.get("X")
        y_handle = reconciler.get("Y")

        reconciler.apply([_make_record("Y", lat=47.6), _make_record("Z")])

        assert reconciler.ids == {"Y", "Z"}
        assert reconciler.get("Y") is y_handle
        assert y_handle.latitude == 47.6
        surface.remove.assert_called_once_with(x_handle)
        surface.update.assert_called_once_with(y_handle)
        assert surface.add.call_count == 3

    def test_idempotent(self) -> None:
        surface = MagicMock()
        reconciler = MarkerReconciler(surface)
        snapshot = [_make_record("LX1"), _make_record("LX2")]

        reconciler.apply(snapshot)
        handles = {h.flight_id: h for h in reconciler}
        surface.reset_mock()
        reconciler.apply(snapshot)

        assert reconciler.ids == {"LX1", "LX2"}
        assert len(reconciler) == 2
        assert all(reconciler.get(i) is h for i, h in handles.items())
        surface.add.assert_not_called()
        surface.update.assert_not_called()
        surface.remove.assert_not_called()

    def test_duplicate_ids_share_one_handle(self) -> None:
        reconciler = MarkerReconciler()
        reconciler.apply([_make_record("LX1", lat=47.0), _make_record("LX1", lat=48.0)])
        assert len(reconciler) == 1
        assert reconciler.get("LX1").latitude == 48.0

    def test_empty_snapshot_clears(self) -> None:
        surface = MagicMock()
        reconciler = MarkerReconciler(surface)
        reconciler.apply([_make_record("LX1")])

        reconciler.apply([])

        assert len(reconciler) == 0
        assert surface.remove.call_count == 1
        reconciler.apply([_make_record("LX2")])
        assert reconciler.ids == {"LX2"}

    def test_works_without_surface(self) -> None:
        reconciler = MarkerReconciler()
        reconciler.apply([_make_record("LX1")])
        reconciler.apply([_make_record("LX1", direction=180.0)])
        assert reconciler.get("LX1").rotation == 135.0


class TestSequencing:
    """Stale snapshots are discarded."""

    def test_older_sequence_ignored(self) -> None:
        reconciler = MarkerReconciler()
        assert reconciler.apply([_make_record("NEW")], sequence=2) is True
        assert reconciler.apply([_make_record("OLD")], sequence=1) is False
        assert reconciler.ids == {"NEW"}

    def test_same_sequence_reapplied(self) -> None:
        reconciler = MarkerReconciler()
        reconciler.apply([_make_record("A")], sequence=3)
        assert reconciler.apply([_make_record("B")], sequence=3) is True
        assert reconciler.ids == {"B"}

    def test_untagged_snapshots_always_apply(self) -> None:
        reconciler = MarkerReconciler()
        reconciler.apply([_make_record("A")], sequence=5)
        assert reconciler.apply([_make_record("B")]) is True


class TestClear:
    def test_clear_releases_everything(self) -> None:
        surface = MagicMock()
        reconciler = MarkerReconciler(surface)
        reconciler.apply([_make_record("A"), _make_record("B")])
        reconciler.clear()
        assert len(reconciler) == 0
        assert surface.remove.call_count == 2


def test_marker_rotation_offset() -> None:
    assert marker_rotation(90.0) == 45.0
    assert marker_rotation(None) == -45.0
