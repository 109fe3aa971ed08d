from models.habit_log import HabitLog
from services.habit_log_service import HabitLogService


def make_habit(client, headers, name="Meditate"):
    return client.post("/api/v1/habits", json={"name": name}, headers=headers).json()["habit"]


def toggle(client, headers, habit_id, date="2024-01-01"):
    return client.post("/api/v1/logs/toggle", json={"habitId": habit_id, "date": date}, headers=headers)


def test_toggle_cycles_between_states(client, alice, db):
    habit = make_habit(client, alice)

    states = [toggle(client, alice, habit["id"]).json()["log"]["completed"] for _ in range(3)]
    assert states == [True, False, True]
    assert db.query(HabitLog).count() == 1


def test_toggle_response_shape(client, alice):
    habit = make_habit(client, alice)
    log = toggle(client, alice, habit["id"], "2024-03-05").json()["log"]
    assert set(log) == {"id", "habitId", "date", "completed"}
    assert log["habitId"] == habit["id"]
    assert log["date"] == "2024-03-05T00:00:00.000Z"


def test_toggle_accepts_string_habit_id(client, alice):
    habit = make_habit(client, alice)
    resp = toggle(client, alice, str(habit["id"]))
    assert resp.status_code == 200
    assert resp.json()["log"]["completed"] is True


def test_range_returns_toggled_day(client, alice):
    habit = make_habit(client, alice)
    toggle(client, alice, habit["id"], "2024-01-01")

    resp = client.get("/api/v1/logs?start=2024-01-01&end=2024-01-01", headers=alice)
    assert resp.status_code == 200
    logs = resp.json()["logs"]
    assert len(logs) == 1
    assert logs[0]["habitId"] == habit["id"]
    assert logs[0]["completed"] is True


def test_range_is_inclusive_on_both_ends(client, alice):
    habit = make_habit(client, alice)
    for day in ["2023-12-31", "2024-01-01", "2024-01-02", "2024-01-03", "2024-01-04"]:
        toggle(client, alice, habit["id"], day)

    logs = client.get("/api/v1/logs?start=2024-01-01&end=2024-01-03", headers=alice).json()["logs"]
    assert sorted(l["date"][:10] for l in logs) == ["2024-01-01", "2024-01-02", "2024-01-03"]


def test_range_end_before_start_is_empty(client, alice):
    habit = make_habit(client, alice)
    toggle(client, alice, habit["id"], "2024-01-01")
    resp = client.get("/api/v1/logs?start=2024-01-02&end=2024-01-01", headers=alice)
    assert resp.status_code == 200
    assert resp.json() == {"logs": []}


def test_range_only_returns_callers_logs(client, alice, bob):
    habit = make_habit(client, alice)
    toggle(client, alice, habit["id"])
    resp = client.get("/api/v1/logs?start=2024-01-01&end=2024-01-01", headers=bob)
    assert resp.json() == {"logs": []}


def test_range_rejects_missing_or_bad_dates(client, alice):
    for query in ["", "?start=2024-01-01", "?end=2024-01-01",
                  "?start=2024-13-01&end=2024-01-01", "?start=2024-01-01&end=nope",
                  "?start=2024-02-30&end=2024-03-01"]:
        resp = client.get(f"/api/v1/logs{query}", headers=alice)
        assert resp.status_code == 400, query
        assert "error" in resp.json()


def test_toggle_requires_fields(client, alice, db):
    habit = make_habit(client, alice)
    bodies = [
        {},
        {"habitId": habit["id"]},
        {"date": "2024-01-01"},
        {"habitId": "", "date": "2024-01-01"},
        {"habitId": habit["id"], "date": ""},
    ]
    for body in bodies:
        resp = client.post("/api/v1/logs/toggle", json=body, headers=alice)
        assert resp.status_code == 400, body
    assert db.query(HabitLog).count() == 0


def test_toggle_rejects_bad_date(client, alice, db):
    habit = make_habit(client, alice)
    resp = toggle(client, alice, habit["id"], "01/02/2024")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid date format. Use YYYY-MM-DD"}
    assert db.query(HabitLog).count() == 0


def test_toggle_other_users_habit_is_not_found(client, alice, bob, db):
    habit = make_habit(client, alice)
    resp = toggle(client, bob, habit["id"])
    assert resp.status_code == 404
    assert resp.json() == {"error": "Habit not found"}
    assert db.query(HabitLog).count() == 0


def test_toggle_unknown_habit_is_not_found(client, alice):
    assert toggle(client, alice, 9999).status_code == 404
    assert toggle(client, alice, "abc").status_code == 404
    assert toggle(client, alice, 0).status_code == 404
    assert toggle(client, alice, 10**20).status_code == 404
    assert toggle(client, alice, str(10**20)).status_code == 404


def test_toggle_recovers_from_concurrent_create(client, alice, db, monkeypatch):
    habit = make_habit(client, alice)
    assert toggle(client, alice, habit["id"]).json()["log"]["completed"] is True

    # Pretend this request looked before the other one inserted
    real_find = HabitLogService._find_log
    calls = []

    def stale_first_lookup(session, habit_id, day):
        calls.append(day)
        if len(calls) == 1:
            return None
        return real_find(session, habit_id, day)

    monkeypatch.setattr(HabitLogService, "_find_log", staticmethod(stale_first_lookup))

    resp = toggle(client, alice, habit["id"])
    assert resp.status_code == 200
    assert resp.json()["log"]["completed"] is False
    assert len(calls) == 2
    assert db.query(HabitLog).count() == 1


def test_toggle_rejects_boolean_habit_id(client, alice, db):
    make_habit(client, alice)
    resp = toggle(client, alice, True)
    assert resp.status_code == 400
    assert "error" in resp.json()
    assert db.query(HabitLog).count() == 0
