import logging

import pytest

from app.core.errors import InvalidQuery, NoResults, UpstreamUnavailable, VenueClosed
from app.models.venue import Venue
from app.services.attendance_service import toggle_attendance
from app.services.venue_directory import (
    SearchCriteria,
    fetch_venue_detail,
    register_venue,
    search_venues,
)
from factories import make_business, search_page


class NullBus:
    def publish(self, venue_id, event):
        return 0


BOSTON = SearchCriteria(location="Boston")


def test_boston_scenario_pages(db, provider):
    provider.search_response = search_page(21, total=36)
    first = search_venues(db, provider, BOSTON, page=0)
    assert len(first["venues"]) == 20
    assert first["lastPage"] is False

    provider.search_response = search_page(15, start=20, total=35)
    second = search_venues(db, provider, BOSTON, page=1)
    assert len(second["venues"]) == 15
    assert second["lastPage"] is True


def test_search_sends_fixed_query_shape(db, provider):
    provider.search_response = search_page(3)
    search_venues(db, provider, BOSTON, page=2)
    assert provider.search_calls == [
        {
            "categories": "bars,sportsbars",
            "radius": 32187,
            "limit": 21,
            "offset": 40,
            "sort_by": "distance",
            "location": "Boston",
        }
    ]


def test_search_by_coordinates(db, provider):
    provider.search_response = search_page(1)
    search_venues(db, provider, SearchCriteria.parse(None, "42.36", "-71.06"))
    call = provider.search_calls[0]
    assert call["latitude"] == pytest.approx(42.36)
    assert call["longitude"] == pytest.approx(-71.06)
    assert "location" not in call


def test_closed_venues_dropped_before_truncating(db, provider):
    provider.search_response = search_page(21, closed={"b0", "b5"})
    result = search_venues(db, provider, BOSTON)
    ids = [v["id"] for v in result["venues"]]
    assert "b0" not in ids and "b5" not in ids
    assert len(ids) == 19
    assert result["lastPage"] is False
    assert db.get(Venue, "b0") is None


def test_unseen_venues_registered_with_zero_going(db, provider, caplog):
    provider.search_response = search_page(3)
    with caplog.at_level(logging.INFO):
        result = search_venues(db, provider, BOSTON)
    assert {v["going"] for v in result["venues"]} == {0}
    assert db.query(Venue).count() == 3
    assert "Registered new venue: b0" in caplog.text
    assert result["venues"][0] == {
        "id": "b0",
        "name": "Bar b0",
        "image": "https://img.example/b0.jpg",
        "going": 0,
    }


def test_known_venues_carry_going_count(db, provider, register):
    register("b1")
    bus = NullBus()
    toggle_attendance(db, bus, "b1", "u1")
    toggle_attendance(db, bus, "b1", "u2")
    provider.search_response = search_page(3)

    result = search_venues(db, provider, BOSTON)
    going = {v["id"]: v["going"] for v in result["venues"]}
    assert going == {"b0": 0, "b1": 2, "b2": 0}


def test_no_results(db, provider):
    provider.search_response = {"businesses": [], "total": 0}
    with pytest.raises(NoResults) as exc:
        search_venues(db, provider, BOSTON)
    assert exc.value.expected is True


def test_page_past_the_end_is_empty_last_page(db, provider):
    provider.search_response = {"businesses": [], "total": 12}
    assert search_venues(db, provider, BOSTON, page=3) == {"venues": [], "lastPage": True}


def test_upstream_failure_propagates(db, provider):
    provider.error = UpstreamUnavailable(status_code=429)
    with pytest.raises(UpstreamUnavailable) as exc:
        search_venues(db, provider, BOSTON)
    assert exc.value.status_code == 429
    assert db.query(Venue).count() == 0


@pytest.mark.parametrize(
    "location,latitude,longitude",
    [
        (None, None, None),
        ("   ", None, None),
        (None, "42.3", None),
        (None, None, "-71.0"),
        (None, "north", "-71.0"),
        (None, "91", "0"),
        (None, "0", "181"),
    ],
)
def test_invalid_criteria(location, latitude, longitude):
    with pytest.raises(InvalidQuery):
        SearchCriteria.parse(location, latitude, longitude)


def test_location_wins_over_coordinates():
    criteria = SearchCriteria.parse(" Boston ", "42.3", "-71.0")
    assert criteria.to_params() == {"location": "Boston"}


def test_negative_page_rejected(db, provider):
    with pytest.raises(InvalidQuery):
        search_venues(db, provider, BOSTON, page=-1)
    assert provider.search_calls == []


def test_detail_registers_unseen_venue(db, provider):
    provider.businesses["v1"] = make_business(
        "v1",
        url="https://www.yelp.com/biz/v1",
        price="$$",
        rating=4.5,
        location={"display_address": ["1 Main St", "Boston, MA 02110"]},
        display_phone="(617) 555-0100",
    )
    detail = fetch_venue_detail(db, provider, "v1")
    assert detail == {
        "name": "Bar v1",
        "image": "https://img.example/v1.jpg",
        "yelpUrl": "https://www.yelp.com/biz/v1",
        "price": "$$",
        "rating": 4.5,
        "address": "1 Main St, Boston, MA 02110",
        "phone": "(617) 555-0100",
        "going": 0,
    }
    assert db.get(Venue, "v1") is not None


def test_detail_includes_live_going(db, provider, register):
    register("v1")
    toggle_attendance(db, NullBus(), "v1", "u1")
    provider.businesses["v1"] = make_business("v1")
    assert fetch_venue_detail(db, provider, "v1")["going"] == 1


def test_closed_venue_is_gone_and_not_registered(db, provider):
    provider.businesses["v1"] = make_business("v1", is_closed=True)
    with pytest.raises(VenueClosed) as exc:
        fetch_venue_detail(db, provider, "v1")
    assert exc.value.status_code == 410
    assert db.get(Venue, "v1") is None


def test_register_is_idempotent(db, session_factory):
    assert register_venue(db, "v1") is True
    assert register_venue(db, "v1") is False
    # Row committed by another request first
    other = session_factory()
    try:
        other.add(Venue(venue_id="v2"))
        other.commit()
        assert register_venue(db, "v2") is False
    finally:
        other.close()
    assert db.query(Venue).count() == 2


def test_register_lost_race_keeps_one_row(db, session_factory, monkeypatch, caplog):
    caplog.set_level(logging.INFO)
    with session_factory() as other:
        other.add(Venue(venue_id="v1"))
        other.commit()
    # Existence check ran before the other request committed
    monkeypatch.setattr(db, "get", lambda *args, **kwargs: None)

    assert register_venue(db, "v1") is False
    assert "Registered new venue" not in caplog.text
    monkeypatch.undo()
    with session_factory() as s:
        assert s.query(Venue).count() == 1


def test_malformed_row_still_counts_toward_lookahead(db, provider):
    response = search_page(20)
    response["businesses"].append({"name": "no id"})
    provider.search_response = response

    result = search_venues(db, provider, BOSTON, 0)

    assert result["lastPage"] is False
    assert len(result["venues"]) == 20
