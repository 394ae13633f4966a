def _stage(client, request_id, new_stage, headers, comment=None):
    return client.post(
        f"/api/workflow/{request_id}/stage",
        json={"new_stage": new_stage, "comment": comment},
        headers=headers,
    )


def test_graphs_endpoint(client, staff_login):
    headers = staff_login()
    graphs = client.get("/api/workflow/graphs", headers=headers).json()["items"]
    assert {g["key"] for g in graphs} == {"default", "scholarship", "grant"}

    fallback = client.get("/api/workflow/graphs/wash", headers=headers).json()
    assert fallback["key"] == "default"


def test_stage_transition_and_history(client, register_user, create_request, staff_login):
    ben, _ = register_user()
    request = create_request(ben, type="grant")
    jane = staff_login()
    rid = request["request_id"]

    resp = _stage(client, rid, "initial_review", jane, comment="Eligible")
    assert resp.status_code == 200
    assert resp.json()["workflow"]["current_stage"] == "initial_review"

    workflow = client.get(f"/api/workflow/{rid}", headers=jane).json()
    assert workflow["stage"]["required_role"] == "head_of_programs"
    assert [s["id"] for s in workflow["next_stages"]] == ["officer_review", "rejected", "cancelled"]

    history = client.get(f"/api/workflow/{rid}/history", headers=ben).json()["items"]
    assert [h["sequence"] for h in history] == [1, 2]
    assert history[-1]["previous_status"] == "submitted"
    assert history[-1]["new_status"] == "initial_review"
    assert history[-1]["details"] == "Eligible"

    detail = client.get(f"/api/requests/{rid}", headers=ben).json()
    assert detail["request"]["status"] == "under_review"


def test_invalid_transition_is_409(client, register_user, create_request, staff_login):
    ben, _ = register_user()
    request = create_request(ben)
    resp = _stage(client, request["request_id"], "approved", staff_login())

    assert resp.status_code == 409
    error = resp.json()["error"]
    assert error["code"] == "INVALID_TRANSITION"
    assert error["details"]["allowed_stages"] == ["initial_review", "rejected", "cancelled"]


def test_transition_notifies_requester(client, register_user, create_request, staff_login):
    ben, _ = register_user()
    request = create_request(ben)
    _stage(client, request["request_id"], "rejected", staff_login(), comment="Incomplete")

    items = client.get("/api/notifications", headers=ben).json()["items"]
    latest = next(n for n in items if n["title"] == "Request status updated")
    assert latest["type"] == "error"
    assert "Incomplete" in latest["message"]


def test_beneficiary_can_only_cancel(client, register_user, create_request):
    ben, _ = register_user()
    request = create_request(ben)

    assert _stage(client, request["request_id"], "initial_review", ben).status_code == 403
    resp = _stage(client, request["request_id"], "cancelled", ben)
    assert resp.status_code == 200
    assert client.get(f"/api/requests/{request['request_id']}", headers=ben).json()["request"]["status"] == "cancelled"


def test_other_beneficiary_cannot_cancel(client, register_user, create_request):
    ben, _ = register_user()
    amy, _ = register_user()
    request = create_request(ben)
    assert _stage(client, request["request_id"], "cancelled", amy).status_code == 403


def test_delegate_notifies_delegatee(client, register_user, create_request, staff_login):
    ben, _ = register_user()
    request = create_request(ben)
    jane = staff_login()

    resp = client.post(
        f"/api/workflow/{request['request_id']}/delegate",
        json={"staff_id": "staff_APO001", "staff_name": "Sam", "reason": "Needs a site check"},
        headers=jane,
    )
    assert resp.status_code == 200
    assert resp.json()["workflow"]["assigned_to"] == "staff_APO001"

    sam = staff_login("APO001", "Sam")
    items = client.get("/api/notifications", headers=sam).json()["items"]
    assert items[0]["category"] == "request_assignment"

    pending = client.get("/api/approvals", headers=sam).json()
    assert request["request_id"] in [p["request"]["request_id"] for p in pending["items"]]

    history = client.get(f"/api/workflow/{request['request_id']}/history", headers=jane).json()["items"]
    assert history[-1]["action"] == "assignment"
    assert history[-1]["details"] == "Needs a site check"


def test_beneficiary_cannot_delegate(client, register_user, create_request):
    ben, _ = register_user()
    request = create_request(ben)
    resp = client.post(
        f"/api/workflow/{request['request_id']}/delegate",
        json={"staff_id": "staff_APO001"},
        headers=ben,
    )
    assert resp.status_code == 403


def test_comments(client, register_user, create_request, staff_login):
    ben, _ = register_user()
    request = create_request(ben)
    jane = staff_login()

    resp = client.post(
        f"/api/workflow/{request['request_id']}/comments", json={"comment": "Please add receipts"}, headers=jane
    )
    assert resp.status_code == 201
    assert resp.json()["action"] == "comment"

    unread = client.get("/api/notifications/unread-count", headers=ben).json()["unread_count"]
    assert unread == 2


def test_pending_approvals_follow_required_role(client, register_user, create_request, staff_login):
    ben, _ = register_user()
    request = create_request(ben)
    jane = staff_login()
    dana = staff_login("DIR001", "Dana")
    admin = staff_login("ADM001", "Ada")

    assert client.get("/api/approvals", headers=jane).json()["total"] == 0
    assert client.get("/api/approvals", headers=admin).json()["total"] == 1

    _stage(client, request["request_id"], "initial_review", jane)
    pending = client.get("/api/approvals", headers=jane).json()
    assert pending["total"] == 1
    assert pending["items"][0]["stage"]["id"] == "initial_review"
    assert client.get("/api/approvals", headers=dana).json()["total"] == 0


def test_approvals_are_staff_only(client, register_user):
    ben, _ = register_user()
    assert client.get("/api/approvals", headers=ben).status_code == 403
