"""Tests for team API endpoints.

Covers the invite and join request flows over HTTP and the error envelope
returned when a precondition fails.
"""

TEAMS = "/api/v1/teams"


def _create_team(client, **body):
    response = client.post(f"{TEAMS}/", json={"name": "Owls", **body})
    assert response.status_code == 201
    return response.json()["team"]


class TestCreateTeam:
    def test_leader_holds_first_slot(self, client, world):
        team = _create_team(client, max_members=2)

        assert team["leader_id"] == world.lea.id
        assert team["occupied"] == 1
        assert team["is_full"] is False
        assert team["balance_score"] == 17
        assert world.participants.raw(world.lea.id).team_id == team["id"]

    def test_second_team_refused(self, client):
        _create_team(client)
        response = client.post(f"{TEAMS}/", json={"name": "Larks"})
        assert response.status_code == 400
        assert response.json()["error"]["kind"] == "AlreadyInTeam"

    def test_capacity_out_of_range_is_validation_error(self, client):
        response = client.post(f"{TEAMS}/", json={"name": "Owls", "max_members": 9})
        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["field"] == "max_members"


class TestInviteFlow:
    def test_invite_and_accept(self, client, world):
        team = _create_team(client, max_members=2)

        response = client.post(f"{TEAMS}/{team['id']}/invite", json={"participant_id": world.kim.id})
        assert response.status_code == 200
        body = response.json()
        assert body["email_sent"] is True
        invite_id = body["invite"]["id"]
        assert body["invite"]["status"] == "Pending"

        world.current = world.kim
        response = client.post(f"{TEAMS}/{team['id']}/invites/{invite_id}/accept")
        assert response.status_code == 200
        joined = response.json()["team"]
        assert joined["occupied"] == 2
        assert joined["is_full"] is True
        assert joined["balance_score"] == 34

    def test_non_leader_cannot_invite(self, client, world):
        team = _create_team(client)
        world.current = world.kim
        response = client.post(f"{TEAMS}/{team['id']}/invite", json={"participant_id": world.lea.id})
        assert response.status_code == 403
        assert response.json()["error"]["kind"] == "PermissionDenied"

    def test_duplicate_invite_conflicts(self, client, world):
        team = _create_team(client)
        client.post(f"{TEAMS}/{team['id']}/invite", json={"participant_id": world.kim.id})
        response = client.post(f"{TEAMS}/{team['id']}/invite", json={"participant_id": world.kim.id})
        assert response.status_code == 409
        assert response.json()["error"]["kind"] == "Duplicate"

    def test_unknown_team(self, client):
        response = client.get(f"{TEAMS}/missing")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "TEAM_NOT_FOUND"


class TestJoinRequestFlow:
    def test_request_and_approve(self, client, world):
        team = _create_team(client)

        world.current = world.kim
        response = client.post(f"{TEAMS}/{team['id']}/join-request", json={"message": "Designer here"})
        assert response.status_code == 200
        request_id = response.json()["join_request"]["id"]

        world.current = world.lea
        response = client.post(f"{TEAMS}/{team['id']}/join-request/{request_id}/approve")
        assert response.status_code == 200
        assert [m["participant_id"] for m in response.json()["team"]["members"]] == [world.kim.id]

    def test_leave(self, client, world):
        team = _create_team(client)
        world.current = world.kim
        request_id = client.post(f"{TEAMS}/{team['id']}/join-request", json={}).json()["join_request"]["id"]
        world.current = world.lea
        client.post(f"{TEAMS}/{team['id']}/join-request/{request_id}/approve")

        world.current = world.kim
        response = client.post(f"{TEAMS}/{team['id']}/leave")
        assert response.status_code == 200
        assert response.json()["team"]["occupied"] == 1
        assert world.participants.raw(world.kim.id).availability.status == "Available"

    def test_leader_cannot_leave(self, client, world):
        team = _create_team(client)
        response = client.post(f"{TEAMS}/{team['id']}/leave")
        assert response.status_code == 400
        assert response.json()["error"]["kind"] == "InvalidState"


class TestTeamViews:
    def test_balance_score_and_list(self, client):
        team = _create_team(client)

        response = client.get(f"{TEAMS}/{team['id']}/balance-score")
        assert response.json() == {
            "balance_score": 17,
            "breakdown": {"role_diversity": 9, "skill_spread": 8, "soft_skill_coverage": 0},
            "grade": "Needs Improvement",
        }
        listed = client.get(f"{TEAMS}/").json()["teams"]
        assert [t["id"] for t in listed] == [team["id"]]

    def test_card(self, client, world):
        team = _create_team(client)
        card = client.get(f"{TEAMS}/{team['id']}/card").json()
        assert card["leader"] == {"name": "Lea", "role": "Developer"}
        assert card["member_count"] == 1
        assert sorted(card["skills"]["technical"]) == ["Node", "React"]

    def test_meeting_link(self, client):
        team = _create_team(client)
        response = client.patch(
            f"{TEAMS}/{team['id']}/meeting-link", json={"meeting_link": "https://meet.example/owls"}
        )
        assert response.status_code == 200
        assert response.json()["meeting_link"] == "https://meet.example/owls"
