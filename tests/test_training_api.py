"""
API tests for the training endpoints

Runs the whole stack (routers -> TrainingService -> SqlTrainingStore) against
an in-memory database with a pinned clock.
"""
from uuid import uuid4

import pytest

from core.exceptions import CHECK_IN_FIRST


PEAK_CHECK_IN = {
    "energy": 5,
    "soreness": "NONE",
    "focus": 5,
    "mood": "EXCITED",
    "time_available_minutes": 30,
}


@pytest.fixture
def child(client):
    response = client.post("/v1/children", json={"display_name": "Maya", "birth_year": 2014})
    assert response.status_code == 201
    return response.json()["id"]


def check_in(client, child, **overrides):
    body = dict(PEAK_CHECK_IN, **overrides)
    return client.post(f"/v1/children/{child}/check-ins", json=body)


def log_session(client, child, **overrides):
    body = {"effort_level": 6, "mood": "FOCUSED", "duration_minutes": 20}
    body.update(overrides)
    return client.post(f"/v1/children/{child}/sessions", json=body)


class TestChildren:

    def test_blank_name_rejected(self, client):
        response = client.post("/v1/children", json={"display_name": "   "})

        assert response.status_code == 422
        assert response.json()["field"] == "display_name"

    def test_unknown_child_is_404(self, client):
        response = client.get(f"/v1/children/{uuid4()}/plan/today")

        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"


class TestCheckIn:

    def test_create_returns_mode(self, client, child):
        response = check_in(client, child)

        assert response.status_code == 201
        data = response.json()
        assert data["child_id"] == child
        assert data["session_mode"]["mode"] == "PEAK"
        assert data["session_mode"]["label"] == "Peak Day"
        assert data["session_mode"]["adjustments"]["rep_multiplier"] == 1.2

    def test_pain_flag_is_recovery(self, client, child):
        response = check_in(client, child, pain_flag=True)

        assert response.json()["session_mode"]["mode"] == "RECOVERY"
        assert response.json()["session_mode"]["adjustments"]["suggested_duration_minutes"] == 15

    def test_out_of_range_names_field(self, client, child):
        response = check_in(client, child, energy=9)

        assert response.status_code == 422
        data = response.json()
        assert data["field"] == "energy"
        assert data["error_code"] == "VALIDATION_ERROR_ENERGY"

    def test_today_returns_latest(self, client, child, clock):
        assert client.get(f"/v1/children/{child}/check-ins/today").json() is None

        check_in(client, child, energy=1, focus=1, mood="TIRED", soreness="MEDIUM")
        clock.advance(hours=1)
        check_in(client, child)

        data = client.get(f"/v1/children/{child}/check-ins/today").json()
        assert data["energy"] == 5
        assert data["session_mode"]["mode"] == "PEAK"

    def test_yesterdays_check_in_is_not_today(self, client, child, clock):
        check_in(client, child)
        clock.advance(days=1)

        assert client.get(f"/v1/children/{child}/check-ins/today").json() is None

    def test_quality_rating(self, client, child):
        check_in_id = check_in(client, child).json()["id"]

        response = client.patch(
            f"/v1/children/{child}/check-ins/{check_in_id}/quality", json={"quality_rating": 4}
        )

        assert response.status_code == 200
        assert response.json()["quality_rating"] == 4
        assert response.json()["completed"] is True

    def test_quality_rating_out_of_range(self, client, child):
        check_in_id = check_in(client, child).json()["id"]

        response = client.patch(
            f"/v1/children/{child}/check-ins/{check_in_id}/quality", json={"quality_rating": 7}
        )

        assert response.status_code == 422
        assert response.json()["field"] == "quality_rating"

    def test_quality_rating_unknown_check_in(self, client, child):
        response = client.patch(
            f"/v1/children/{child}/check-ins/{uuid4()}/quality", json={"quality_rating": 3}
        )

        assert response.status_code == 404


class TestPlan:

    def test_plan_needs_check_in(self, client, child):
        response = client.get(f"/v1/children/{child}/plan/today")

        assert response.status_code == 409
        assert response.json()["error_code"] == "NO_CHECK_IN"
        assert response.json()["detail"] == CHECK_IN_FIRST

    def test_plan_after_check_in(self, client, child):
        check_in(client, child)

        response = client.get(f"/v1/children/{child}/plan/today")

        assert response.status_code == 200
        data = response.json()
        assert data["mode"] == "PEAK"
        assert data["arc_id"] is None
        assert data["items"]
        assert data["total_minutes"] == sum(i["target_minutes"] for i in data["items"])

    def test_plan_is_stable_across_requests(self, client, child):
        check_in(client, child)

        first = client.get(f"/v1/children/{child}/plan/today").json()
        second = client.get(f"/v1/children/{child}/plan/today").json()

        assert first == second

    def test_plan_includes_arc(self, client, child):
        client.post(f"/v1/children/{child}/arcs/start", json={"arc_id": "vision"})
        check_in(client, child, pain_flag=True)

        data = client.get(f"/v1/children/{child}/plan/today").json()

        assert data["arc_id"] == "vision"
        assert data["arc_day_label"] == "Day 1 of 5"
        assert data["recovery_activity"]
        assert any(i["from_arc"] for i in data["items"])
        assert data["items"][0]["kind"] == "game_iq"


class TestSessions:

    def test_log_and_list(self, client, child, clock):
        log_session(client, child, drill_id="scanning.color_cue", wins=["Scanned 3 times", ""])
        clock.advance(hours=2)
        log_session(client, child, arc_id="tempo")

        sessions = client.get(f"/v1/children/{child}/sessions").json()

        assert len(sessions) == 2
        assert sessions[0]["arc_id"] == "tempo"
        assert sessions[1]["drill_id"] == "scanning.color_cue"
        assert sessions[1]["wins"] == ["Scanned 3 times"]

    def test_contact_info_scrubbed(self, client, child):
        response = log_session(client, child, wins=["text me 555-123-4567"])

        assert response.status_code == 201
        assert response.json()["wins"] == ["text me [removed]"]

    @pytest.mark.parametrize("overrides,field", [
        ({"effort_level": 11}, "effort_level"),
        ({"duration_minutes": 0}, "duration_minutes"),
        ({"drill_id": "scanning.moonwalk"}, "drill_id"),
        ({"arc_id": "juggling"}, "arc_id"),
        ({"wins": ["a", "b", "c", "d"]}, "wins"),
    ])
    def test_invalid_session(self, client, child, overrides, field):
        response = log_session(client, child, **overrides)

        assert response.status_code == 422
        assert response.json()["field"] == field

    def test_consistency(self, client, child, clock):
        for _ in range(3):
            log_session(client, child)
            clock.advance(days=1)
        clock.advance(days=-1)

        data = client.get(f"/v1/children/{child}/consistency").json()

        assert data["streak_days"] == 3
        assert data["this_week_count"] == 3
        assert data["weekly_counts"][0] == 3
        assert data["celebration"]


class TestArcs:

    def test_catalog(self, client):
        data = client.get("/v1/arcs").json()

        assert [a["id"] for a in data] == ["vision", "tempo", "decision_chain"]
        assert data[1]["intensity_bias"] == "light"

    def test_arc_detail(self, client):
        data = client.get("/v1/arcs/decision_chain").json()

        assert data["recommended_duration_days"] == 7

    def test_unknown_arc_is_404(self, client, child):
        assert client.get("/v1/arcs/juggling").status_code == 404

        response = client.post(f"/v1/children/{child}/arcs/start", json={"arc_id": "juggling"})
        assert response.status_code == 404

    def test_only_one_arc_at_a_time(self, client, child):
        assert client.post(f"/v1/children/{child}/arcs/start", json={"arc_id": "vision"}).status_code == 201

        response = client.post(f"/v1/children/{child}/arcs/start", json={"arc_id": "tempo"})

        assert response.status_code == 409
        assert response.json()["error_code"] == "ARC_CONFLICT"

    def test_pause_and_resume(self, client, child, clock):
        client.post(f"/v1/children/{child}/arcs/start", json={"arc_id": "vision"})
        clock.advance(days=1)

        paused = client.post(f"/v1/children/{child}/arcs/pause", json={"reason": "travel"})
        assert paused.status_code == 200
        assert paused.json()["status"] == "paused"
        assert paused.json()["pause_reason"] == "travel"

        clock.advance(days=3)
        resumed = client.post(f"/v1/children/{child}/arcs/resume")
        assert resumed.json()["status"] == "active"

        progress = client.get(f"/v1/children/{child}/arcs/progress").json()
        assert progress["day_index"] == 1
        assert progress["day_label"] == "Day 2 of 5"

    def test_pause_without_body(self, client, child):
        client.post(f"/v1/children/{child}/arcs/start", json={"arc_id": "tempo"})

        response = client.post(f"/v1/children/{child}/arcs/pause")

        assert response.status_code == 200
        assert response.json()["pause_reason"] is None

    def test_bad_pause_reason(self, client, child):
        client.post(f"/v1/children/{child}/arcs/start", json={"arc_id": "tempo"})

        response = client.post(f"/v1/children/{child}/arcs/pause", json={"reason": "bored"})

        assert response.status_code == 422
        assert response.json()["field"] == "reason"

    def test_pause_and_resume_need_a_running_arc(self, client, child):
        assert client.post(f"/v1/children/{child}/arcs/pause").status_code == 409
        assert client.post(f"/v1/children/{child}/arcs/resume").status_code == 409

        client.post(f"/v1/children/{child}/arcs/start", json={"arc_id": "tempo"})
        assert client.post(f"/v1/children/{child}/arcs/resume").status_code == 409

    def test_completion_needs_engagement(self, client, child, clock):
        client.post(f"/v1/children/{child}/arcs/start", json={"arc_id": "vision"})
        clock.advance(days=4)

        current = client.get(f"/v1/children/{child}/arcs/current").json()
        assert current["status"] == "active"

        log_session(client, child, arc_id="vision")

        assert client.get(f"/v1/children/{child}/arcs/current").json() is None
        progress = client.get(f"/v1/children/{child}/arcs/progress").json()
        assert progress["status"] == "completed"
        assert progress["progress_percent"] == 100
        assert progress["completion_message"].startswith("Vision Arc Complete!")

        suggestion = client.get(f"/v1/children/{child}/arcs/next").json()
        assert suggestion["arc_id"] == "tempo"
        assert suggestion["all_complete"] is False
        assert suggestion["recommend"] is True

    def test_next_arc_for_new_child(self, client, child):
        data = client.get(f"/v1/children/{child}/arcs/next").json()

        assert data["arc_id"] == "vision"
        assert data["all_complete"] is False

    def test_no_progress_before_any_arc(self, client, child):
        assert client.get(f"/v1/children/{child}/arcs/progress").json() is None


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
