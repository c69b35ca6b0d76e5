"""Tests for TeamRepository.

Every composition change is a single conditional update; these tests pin
the filters that make the write conditional.
"""

import asyncio
from datetime import datetime, timezone

from teamsync.models.team import BalanceBreakdown, JoinRequest, TeamInvite, TeamMember
from teamsync.repositories.teams import TeamRepository
from tests.mocks.mongodb import create_mock_collection, create_mock_db

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def _repo(**returns):
    collection = create_mock_collection(**returns)
    return TeamRepository(create_mock_db({"teams": collection})), collection


class TestAddMember:
    def test_filter_checks_roster_and_free_slot(self):
        repo, collection = _repo()
        member = TeamMember(participant_id="p-2", role="Designer", joined_at=NOW)

        assert asyncio.run(repo.add_member("t-1", member, NOW)) is True

        query, update = collection.update_one.call_args.args
        assert query["_id"] == "t-1"
        assert query["members.participant_id"] == {"$ne": "p-2"}
        assert query["$expr"] == {"$lte": [{"$add": [{"$size": "$members"}, 1, 1]}, "$max_members"]}
        assert update["$push"]["members"]["participant_id"] == "p-2"
        assert update["$set"] == {"updated_at": NOW}

    def test_no_match_means_refused(self):
        repo, _ = _repo(modified_count=0)
        assert asyncio.run(repo.add_member("t-1", TeamMember(participant_id="p-2"), NOW)) is False


class TestRemoveMember:
    def test_pulls_by_participant(self):
        repo, collection = _repo()
        asyncio.run(repo.remove_member("t-1", "p-2", NOW))
        query, update = collection.update_one.call_args.args
        assert query == {"_id": "t-1", "members.participant_id": "p-2"}
        assert update["$pull"] == {"members": {"participant_id": "p-2"}}


class TestQueues:
    def test_push_invite_refuses_second_pending(self):
        repo, collection = _repo()
        invite = TeamInvite(participant_id="p-3", expires_at=NOW)

        asyncio.run(repo.push_invite("t-1", invite, NOW))

        query, update = collection.update_one.call_args.args
        assert query["pending_invites"] == {
            "$not": {"$elemMatch": {"participant_id": "p-3", "status": "Pending"}}
        }
        assert update["$push"]["pending_invites"]["_id"] == invite.id

    def test_push_join_request(self):
        repo, collection = _repo()
        request = JoinRequest(participant_id="p-4", message="Hi")
        asyncio.run(repo.push_join_request("t-1", request, NOW))
        query, _ = collection.update_one.call_args.args
        assert query["join_requests"]["$not"]["$elemMatch"]["participant_id"] == "p-4"

    def test_set_invite_status_only_from_pending(self):
        repo, collection = _repo(modified_count=0)

        assert asyncio.run(repo.set_invite_status("t-1", "inv-1", "Accepted", NOW)) is False

        query, update = collection.update_one.call_args.args
        assert query["pending_invites"] == {"$elemMatch": {"_id": "inv-1", "status": "Pending"}}
        assert update["$set"]["pending_invites.$.status"] == "Accepted"

    def test_set_join_request_status(self):
        repo, collection = _repo()
        assert asyncio.run(repo.set_join_request_status("t-1", "jr-1", "Rejected", NOW)) is True
        _, update = collection.update_one.call_args.args
        assert update["$set"]["join_requests.$.status"] == "Rejected"


class TestExpireInvites:
    def test_array_filter_targets_overdue_pending(self):
        repo, collection = _repo(modified_count=3)

        assert asyncio.run(repo.expire_invites(NOW)) == 3

        query, update = collection.update_many.call_args.args
        assert query == {"pending_invites": {"$elemMatch": {"status": "Pending", "expires_at": {"$lt": NOW}}}}
        assert update == {"$set": {"pending_invites.$[elem].status": "Expired"}}
        assert collection.update_many.call_args.kwargs["array_filters"] == [
            {"elem.status": "Pending", "elem.expires_at": {"$lt": NOW}}
        ]


class TestDetails:
    def test_capacity_change_guarded_by_roster_size(self):
        repo, collection = _repo()
        asyncio.run(repo.update_details("t-1", {"max_members": 3, "name": "Owls"}))
        query, update = collection.update_one.call_args.args
        assert query["$expr"] == {"$lte": [{"$add": [{"$size": "$members"}, 1]}, 3]}
        assert update == {"$set": {"max_members": 3, "name": "Owls"}}

    def test_plain_edit_has_no_capacity_guard(self):
        repo, collection = _repo()
        asyncio.run(repo.update_details("t-1", {"description": "We build"}))
        query, _ = collection.update_one.call_args.args
        assert query == {"_id": "t-1"}

    def test_refused_when_nothing_matched(self):
        repo, _ = _repo(matched_count=0, modified_count=0)
        assert asyncio.run(repo.update_details("t-1", {"max_members": 2})) is False

    def test_set_balance(self):
        repo, collection = _repo()
        breakdown = BalanceBreakdown(role_diversity=18, skill_spread=16, soft_skill_coverage=0)
        asyncio.run(repo.set_balance("t-1", 34, breakdown, False))
        _, update = collection.update_one.call_args.args
        assert update["$set"] == {
            "balance_score": 34,
            "balance_breakdown": {"role_diversity": 18, "skill_spread": 16, "soft_skill_coverage": 0},
            "is_complete": False,
        }


class TestFindMany:
    def test_zero_limit_means_unbounded(self):
        repo, collection = _repo(find=[])
        asyncio.run(repo.find_many({}, limit=0, sort=[("balance_score", -1)]))
        cursor = collection.find.return_value
        cursor.limit.assert_not_called()
        cursor.sort.assert_called_once_with([("balance_score", -1)])
        cursor.to_list.assert_called_once_with(None)

    def test_builds_models(self):
        doc = {"_id": "t-1", "name": "Owls", "leader_id": "p-1"}
        repo, _ = _repo(find=[doc])
        teams = asyncio.run(repo.find_many({}))
        assert teams[0].id == "t-1"
        assert teams[0].occupied == 1
