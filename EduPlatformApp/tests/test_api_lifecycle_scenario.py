from datetime import timedelta

import pytest
from django.utils import timezone

from rest_framework.test import APIClient

pytestmark = pytest.mark.django_db

def login(user):
    client = APIClient()
    token = client.post("/api/v1/auth/token/", {"email": user.email, "password": "pass1234"}, format="json").data["access"]
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client


def test_collective_work_end_to_end(trainer, director, students, course):
    t_client = login(trainer)
    s1_client = login(students[0])

    created = t_client.post("/api/v1/works/", {
        "course": course.id,
        "title": "Team project",
        "kind": "COLLECTIVE",
        "group_mode": "STAFF_DEFINED",
        "due_at": (timezone.now() + timedelta(days=5)).isoformat(),
    }, format="multipart")
    assert created.status_code == 201
    work_id = created.data["id"]
    assert created.data["deadline"]["tier"] == "warning"

    member_ids = [s.id for s in students[:3]]
    refused = s1_client.post(f"/api/v1/works/{work_id}/groups/", {"name": "Alpha", "member_ids": member_ids}, format="json")
    assert refused.status_code == 403
    assert refused.data["kind"] == "NotAuthorized"

    group = t_client.post(f"/api/v1/works/{work_id}/groups/", {"name": "Alpha", "member_ids": member_ids}, format="json")
    assert group.status_code == 201
    assert [m["id"] for m in group.data["members"]] == member_ids
    group_id = group.data["id"]

    sub = s1_client.post(f"/api/v1/works/{work_id}/groups/{group_id}/submit/", {"content_text": "Our report"}, format="multipart")
    assert sub.status_code == 201
    assert sub.data["target_kind"] == "group"
    assert sub.data["state"] == "SUBMITTED"

    evaluation = t_client.post("/api/v1/evaluations/", {"submission": sub.data["id"], "grade": 14, "comment": "Good job"}, format="json")
    assert evaluation.status_code == 201
    assert evaluation.data["band"] == "Good"

    again = login(students[1]).post(f"/api/v1/works/{work_id}/groups/{group_id}/submit/", {"content_text": "v2"}, format="multipart")
    assert again.status_code == 409
    assert again.data["kind"] == "AlreadyEvaluated"

    d_client = login(director)
    corrected = d_client.post(
        f"/api/v1/evaluations/{evaluation.data['id']}/correct/",
        {"grade": 16, "comment": "Recount", "reason": "clerical error"},
        format="json",
    )
    assert corrected.status_code == 200
    assert corrected.data["grade"] == "16.00"
    assert corrected.data["evaluator"]["id"] == trainer.id
    assert corrected.data["corrected_by"]["id"] == director.id

    mine = s1_client.get("/api/v1/evaluations/mine/")
    assert mine.status_code == 200
    assert mine.data["results"][0]["evaluation"]["grade"] == "16.00"
