def _event(client, title, slots=None, generic=False):
    body = {"title": title, "generic": generic}
    if slots is not None:
        body["slots"] = slots
    r = client.post("/events/", json=body)
    assert r.status_code == 200, r.text
    return r.json()["id"]


def _character(client, owner, role):
    r = client.post("/characters/", json={"owner": owner, "name": f"{owner}-main", "role": role})
    assert r.status_code == 200, r.text
    return r.json()["id"]


def _signup(client, event_id, username, prefs=None, character_id=None):
    body = {"username": username}
    if prefs is not None:
        body["preferred_roles"] = prefs
    if character_id is not None:
        body["character_id"] = character_id
    r = client.post(f"/events/{event_id}/signups", json=body)
    assert r.status_code == 200, r.text
    return r.json()["id"]


def _auto_fill(client, event_id, key=None, dry_run=False):
    headers = {"Idempotency-Key": key} if key else {}
    r = client.post(
        f"/events/{event_id}/roster/auto-fill",
        params={"dry_run": str(dry_run).lower()},
        headers=headers,
    )
    assert r.status_code == 200, r.text
    return r.json()


def test_roster_starts_with_everyone_in_pool(client):
    event_id = _event(client, "Pool Raid")
    a = _signup(client, event_id, "ann", ["tank"])
    b = _signup(client, event_id, "ben")

    r = client.get(f"/events/{event_id}/roster")
    assert r.status_code == 200, r.text
    roster = r.json()
    assert [p["signup_id"] for p in roster["pool"]] == [a, b]
    assert roster["assignments"] == []
    assert [x["role"] for x in roster["roles"]] == ["tank", "healer", "dps", "flex"]
    assert roster["generic"] is False


def test_auto_fill_seats_by_priority_and_persists(client):
    event_id = _event(client, "Auto Raid", slots={"tank": 2, "healer": 4, "dps": 14})
    flex_dps = _signup(client, event_id, "fiona", ["dps", "healer"], _character(client, "fiona", "dps"))
    rigid_healer = _signup(client, event_id, "hank", ["healer"])
    char_tank = _signup(client, event_id, "tara", character_id=_character(client, "tara", "tank"))
    nobody = _signup(client, event_id, "nils")
    all_three = _signup(client, event_id, "abe", ["dps", "healer", "tank"])

    out = _auto_fill(client, event_id)
    assert out["total_filled"] == 4
    assert out["open_seats"] == 20
    assert out["unseated"] == [nobody]

    seats = {a["signup_id"]: a for a in out["assignments"]}
    assert (seats[rigid_healer]["slot"], seats[rigid_healer]["position"]) == ("healer", 1)
    assert (seats[char_tank]["slot"], seats[char_tank]["position"]) == ("tank", 1)
    assert (seats[flex_dps]["slot"], seats[flex_dps]["position"]) == ("healer", 2)
    assert seats[flex_dps]["is_override"] is True
    assert (seats[all_three]["slot"], seats[all_three]["position"]) == ("tank", 2)
    assert [(s["label"], s["count"]) for s in out["summary"]] == [("Tank", 2), ("Healer", 2)]

    roster = client.get(f"/events/{event_id}/roster").json()
    assert [p["signup_id"] for p in roster["pool"]] == [nobody]
    assert [(a["slot"], a["position"]) for a in roster["assignments"]] == [
        ("tank", 1),
        ("tank", 2),
        ("healer", 1),
        ("healer", 2),
    ]


def test_auto_fill_dry_run_does_not_save(client):
    event_id = _event(client, "Preview Raid")
    s1 = _signup(client, event_id, "pat", ["dps"])

    out = _auto_fill(client, event_id, dry_run=True)
    assert out["dry_run"] is True
    assert out["total_filled"] == 1
    assert out["assignments"][0]["signup_id"] == s1

    roster = client.get(f"/events/{event_id}/roster").json()
    assert roster["assignments"] == []
    assert [p["signup_id"] for p in roster["pool"]] == [s1]


def test_auto_fill_keeps_existing_seats(client):
    event_id = _event(client, "Manual Then Auto", slots={"tank": 2, "healer": 1, "dps": 2})
    manual = _signup(client, event_id, "mo", ["dps"])
    r = client.post(f"/events/{event_id}/roster/assign", json={"signup_id": manual, "slot": "tank", "position": 1})
    assert r.status_code == 200, r.text
    assert r.json()["is_override"] is False  # no character attached

    t = _signup(client, event_id, "ty", ["tank"])
    out = _auto_fill(client, event_id)
    assert out["open_seats"] == 4
    assert out["assignments"] == [{"signup_id": t, "slot": "tank", "position": 2, "is_override": False}]

    roster = client.get(f"/events/{event_id}/roster").json()
    seated = {a["signup_id"]: (a["slot"], a["position"]) for a in roster["assignments"]}
    assert seated[manual] == ("tank", 1)


def test_auto_fill_replays_for_same_idempotency_key(client):
    event_id = _event(client, "Replay Raid")
    _signup(client, event_id, "rae", ["dps"])

    first = _auto_fill(client, event_id, key="fill-1")
    late = _signup(client, event_id, "lou", ["dps"])

    # same key + same request -> cached response, nothing new seated
    replay = _auto_fill(client, event_id, key="fill-1")
    assert replay == first
    pool = client.get(f"/events/{event_id}/roster").json()["pool"]
    assert [p["signup_id"] for p in pool] == [late]

    fresh = _auto_fill(client, event_id, key="fill-2")
    assert fresh["total_filled"] == 1
    assert fresh["assignments"][0]["signup_id"] == late
    assert fresh["assignments"][0]["position"] == 2


def test_auto_fill_requires_key_outside_tests(client, monkeypatch):
    event_id = _event(client, "Keyless Raid")
    monkeypatch.setenv("TESTING", "0")
    r = client.post(f"/events/{event_id}/roster/auto-fill")
    assert r.status_code == 400
    assert "Idempotency-Key" in r.json()["detail"]


def test_generic_event_fills_players_only(client):
    event_id = _event(client, "Board Games", slots={"player": 2, "bench": 2})
    ids = [_signup(client, event_id, name, ["tank"]) for name in ("g1", "g2", "g3")]

    out = _auto_fill(client, event_id)
    assert [(a["signup_id"], a["slot"], a["position"]) for a in out["assignments"]] == [
        (ids[0], "player", 1),
        (ids[1], "player", 2),
    ]
    # bench is never auto-filled
    assert out["unseated"] == [ids[2]]
    assert out["open_seats"] == 2

    roster = client.get(f"/events/{event_id}/roster").json()
    assert roster["generic"] is True
    assert [x["role"] for x in roster["roles"]] == ["player", "bench"]


def test_manual_assign_validation(client):
    event_id = _event(client, "Manual Raid", slots={"tank": 1, "healer": 1, "dps": 1})
    healer_char = _character(client, "hal", "healer")
    s1 = _signup(client, event_id, "hal", character_id=healer_char)
    s2 = _signup(client, event_id, "ivy")
    url = f"/events/{event_id}/roster/assign"

    # role not on this board
    r = client.post(url, json={"signup_id": s1, "slot": "player", "position": 1})
    assert r.status_code == 400
    r = client.post(url, json={"signup_id": s1, "slot": "bench", "position": 1})
    assert r.status_code == 400
    # position beyond capacity
    r = client.post(url, json={"signup_id": s1, "slot": "tank", "position": 2})
    assert r.status_code == 400
    # unknown signup
    r = client.post(url, json={"signup_id": 999999, "slot": "tank", "position": 1})
    assert r.status_code == 404

    r = client.post(url, json={"signup_id": s1, "slot": "tank", "position": 1})
    assert r.status_code == 200, r.text
    assert r.json()["is_override"] is True  # healer character seated as tank

    # seat taken
    r = client.post(url, json={"signup_id": s2, "slot": "tank", "position": 1})
    assert r.status_code == 409
    # already seated
    r = client.post(url, json={"signup_id": s1, "slot": "dps", "position": 1})
    assert r.status_code == 409


def test_unseat_returns_signup_to_pool(client):
    event_id = _event(client, "Unseat Raid")
    s1 = _signup(client, event_id, "uma", ["healer"])
    _auto_fill(client, event_id)

    r = client.delete(f"/events/{event_id}/roster/{s1}")
    assert r.status_code == 200, r.text
    roster = client.get(f"/events/{event_id}/roster").json()
    assert roster["assignments"] == []
    assert [p["signup_id"] for p in roster["pool"]] == [s1]

    assert client.delete(f"/events/{event_id}/roster/{s1}").status_code == 404


def test_default_layout_open_seats_exclude_flex(client):
    event_id = _event(client, "Full Default Raid")
    ids = [_signup(client, event_id, f"d{i}", ["dps", "healer", "tank"]) for i in range(25)]

    out = _auto_fill(client, event_id, key="default-fill")
    assert out["total_filled"] == 20
    assert out["open_seats"] == 20
    assert out["unseated"] == ids[20:]
    assert [(s["role"], s["count"]) for s in out["summary"]] == [("tank", 2), ("healer", 4), ("dps", 14)]


def test_flex_seats_are_manual_only(client):
    event_id = _event(client, "Flex Raid")
    flexer = _signup(client, event_id, "flo", ["dps"])
    r = client.post(f"/events/{event_id}/roster/assign", json={"signup_id": flexer, "slot": "flex", "position": 5})
    assert r.status_code == 200, r.text

    late = _signup(client, event_id, "lee", ["dps"])
    out = _auto_fill(client, event_id, key="flex-fill")
    assert out["open_seats"] == 20
    assert out["assignments"] == [{"signup_id": late, "slot": "dps", "position": 1, "is_override": False}]


def test_manual_assign_marks_override_for_roleless_character(client):
    event_id = _event(client, "Roleless Raid", slots={"tank": 1, "dps": 1})
    s1 = _signup(client, event_id, "rory", character_id=_character(client, "rory", None))
    r = client.post(f"/events/{event_id}/roster/assign", json={"signup_id": s1, "slot": "tank", "position": 1})
    assert r.status_code == 200, r.text
    assert r.json()["is_override"] is True


def test_auto_fill_commit_race_returns_409_and_rolls_back(client, monkeypatch):
    from raid_roster.logic.auto_fill import AutoFillResult, NewAssignment
    from raid_roster.routers import roster as roster_router

    event_id = _event(client, "Race Raid", slots={"tank": 1, "dps": 2})
    seated = _signup(client, event_id, "sam", ["tank"])
    waiting = _signup(client, event_id, "wes", ["tank"])
    r = client.post(f"/events/{event_id}/roster/assign", json={"signup_id": seated, "slot": "tank", "position": 1})
    assert r.status_code == 200, r.text

    # a stale snapshot still thinks tank #1 is free
    def stale_auto_fill(db, event):
        seat = NewAssignment(signup_id=waiting, slot="tank", position=1, is_override=False)
        return AutoFillResult(new_assignments=[seat], total_filled=1), 3

    monkeypatch.setattr(roster_router, "auto_fill_event", stale_auto_fill)

    r = client.post(f"/events/{event_id}/roster/auto-fill", headers={"Idempotency-Key": "race-1"})
    assert r.status_code == 409
    assert "reload" in r.json()["detail"]

    roster = client.get(f"/events/{event_id}/roster").json()
    assert [(a["signup_id"], a["slot"], a["position"]) for a in roster["assignments"]] == [(seated, "tank", 1)]
    assert [p["signup_id"] for p in roster["pool"]] == [waiting]
