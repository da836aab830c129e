from healthconnect.services.metrics import utc_today


def test_add_goal_creates_with_default_target(client, patient):
    _, headers = patient
    res = client.post("/goals/add", headers=headers, json={"type": "water", "value": 3})
    assert res.status_code == 200
    goal = res.json()["goal"]
    assert goal["value"] == 3
    assert goal["target"] == 8
    assert goal["date"] == utc_today().isoformat()


def test_repeated_logs_keep_one_record(client, store, patient):
    body, headers = patient
    for v in (1, 4, 6):
        client.post("/goals/add", headers=headers, json={"type": "water", "value": v})
    docs = list(store.daily_metrics.find({"user_id": body["_id"], "type": "water"}))
    assert len(docs) == 1
    assert docs[0]["value"] == 6


def test_set_target_keeps_value(client, patient):
    _, headers = patient
    client.post("/goals/add", headers=headers, json={"type": "calories", "value": 1500})
    res = client.put("/goals/set-target", headers=headers, json={"type": "calories", "target": 1800})
    assert res.status_code == 200
    goal = res.json()["goal"]
    assert (goal["value"], goal["target"]) == (1500, 1800)

    res = client.post("/goals/add", headers=headers, json={"type": "calories", "value": 1900})
    assert res.json()["goal"]["target"] == 1800


def test_set_target_before_any_log(client, patient):
    _, headers = patient
    res = client.put("/goals/set-target", headers=headers, json={"type": "sleep", "target": 7})
    assert res.json()["goal"]["value"] == 0
    assert res.json()["goal"]["target"] == 7


def test_goal_validation(client, patient):
    _, headers = patient
    assert client.post("/goals/add", headers=headers, json={"type": "steps", "value": 3}).status_code == 400
    assert client.post("/goals/add", headers=headers, json={"type": "water", "value": -1}).status_code == 400
    assert client.put("/goals/set-target", headers=headers, json={"type": "water", "target": 0}).status_code == 400


def test_providers_cannot_log_goals(client, doctor):
    _, headers = doctor
    assert client.post("/goals/add", headers=headers, json={"type": "water", "value": 1}).status_code == 403


def test_history_is_self_or_assigned(client, patient, doctor, register):
    p_body, p_headers = patient
    d_body, d_headers = doctor
    other, other_headers = register("patient", "other@example.com")
    client.post("/goals/add", headers=p_headers, json={"type": "water", "value": 2})
    client.post("/goals/add", headers=p_headers, json={"type": "sleep", "value": 6})

    res = client.get("/goals/history", headers=p_headers)
    assert res.status_code == 200
    assert [r["type"] for r in res.json()] == ["sleep", "water"]

    res = client.get("/goals/history", headers=p_headers, params={"type": "water"})
    assert [r["value"] for r in res.json()] == [2]

    # another patient or an unassigned doctor cannot read it
    assert client.get("/goals/history", headers=other_headers, params={"patientId": p_body["_id"]}).status_code == 403
    assert client.get("/goals/history", headers=d_headers, params={"patientId": p_body["_id"]}).status_code == 403

    client.post("/doctors/assign", headers=p_headers, json={"doctorId": d_body["_id"]})
    res = client.get("/goals/history", headers=d_headers, params={"patientId": p_body["_id"]})
    assert res.status_code == 200
    assert len(res.json()) == 2


def test_history_bad_range(client, patient):
    _, headers = patient
    res = client.get("/goals/history", headers=headers, params={"from": "2024-02-10", "to": "2024-02-01"})
    assert res.status_code == 400
    res = client.get("/goals/history", headers=headers, params={"from": "yesterday"})
    assert res.status_code == 400
