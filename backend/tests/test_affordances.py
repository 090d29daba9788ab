from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import auth_header


@pytest.mark.parametrize(
    "role,flags",
    [
        ("SALES", (False, True, False)),
        ("MANAGER", (True, True, False)),
        ("ADMIN", (True, False, True)),
    ],
)
def test_me_flags_follow_role(client: TestClient, org, role, flags):
    r = client.get("/v1/me", headers=auth_header(role, org["boss"], manager_id=org["admin"], sub="u1"))
    assert r.status_code == 200
    body = r.json()
    assert (body["can_comment"], body["can_create_report"], body["can_access_employee_management"]) == flags
    assert body["can_view_team_status"] is (role != "SALES")
    assert (body["sub"], body["employee_id"], body["manager_id"]) == ("u1", org["boss"], org["admin"])


def test_owner_permissions(client: TestClient, org):
    r = client.get(f"/v1/daily-reports/{org['sato_report']}/permissions", headers=auth_header("SALES", org["sato"]))
    body = r.json()
    assert (body["can_view"], body["can_edit"], body["can_delete"], body["can_comment"]) == (True, True, True, False)
    assert body["comments"] == [{"comment_id": org["boss_comment"], "can_delete": False}]


def test_manager_permissions_on_direct_report(client: TestClient, org):
    r = client.get(f"/v1/daily-reports/{org['sato_report']}/permissions", headers=auth_header("MANAGER", org["boss"]))
    body = r.json()
    assert (body["can_view"], body["can_edit"], body["can_comment"]) == (True, False, True)
    assert body["comments"] == [{"comment_id": org["boss_comment"], "can_delete": True}]


def test_unreachable_report_offers_nothing(client: TestClient, org):
    r = client.get(f"/v1/daily-reports/{org['yamada_report']}/permissions", headers=auth_header("MANAGER", org["boss"]))
    body = r.json()
    assert body["can_view"] is False
    assert body["can_comment"] is False
    assert body["comments"] == []


def test_permissions_for_missing_report(client: TestClient, org):
    r = client.get("/v1/daily-reports/999999/permissions", headers=auth_header("ADMIN", org["admin"]))
    assert r.status_code == 404


ACTORS = [
    ("SALES", "sato"),
    ("SALES", "yamada"),
    ("MANAGER", "boss"),
    ("MANAGER", "other_boss"),
    ("ADMIN", "admin"),
]


@pytest.mark.parametrize("role,who", ACTORS)
@pytest.mark.parametrize("report", ["sato_report", "yamada_report", "boss_report"])
def test_affordances_match_enforcement(client: TestClient, org, role, who, report):
    headers = auth_header(role, org[who])
    report_id = org[report]
    perms = client.get(f"/v1/daily-reports/{report_id}/permissions", headers=headers).json()

    view = client.get(f"/v1/daily-reports/{report_id}", headers=headers)
    assert (view.status_code == 200) is perms["can_view"]

    # An empty comment body passes every authorization check and then fails validation.
    comment = client.post(f"/v1/daily-reports/{report_id}/comments", json={"comment_content": ""}, headers=headers)
    assert (comment.status_code == 422) is perms["can_comment"]

    # Likewise an empty update body reaches validation only when editing is allowed.
    edit = client.put(f"/v1/daily-reports/{report_id}", json={}, headers=headers)
    assert (edit.status_code == 422) is perms["can_edit"]
