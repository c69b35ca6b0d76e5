"""Tests for ParticipantRepository query logic using mocked MongoDB."""

import asyncio
from datetime import datetime, timezone

from teamsync.repositories.participants import ParticipantRepository
from tests.mocks.mongodb import create_mock_collection, create_mock_db

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def _repo(**returns):
    collection = create_mock_collection(**returns)
    return ParticipantRepository(create_mock_db({"participants": collection})), collection


class TestGetByEmail:
    def test_normalizes_email(self):
        repo, collection = _repo(find_one=None)
        asyncio.run(repo.get_by_email("  Sam@Example.COM "))
        collection.find_one.assert_called_once_with({"email": "sam@example.com"})

    def test_returns_model(self):
        repo, _ = _repo(find_one={"_id": "p-1", "email": "sam@example.com", "name": "Sam"})
        participant = asyncio.run(repo.get_by_email("sam@example.com"))
        assert participant.id == "p-1"
        assert participant.availability.status == "Available"


class TestClaimAndRelease:
    def test_claim_requires_no_team(self):
        repo, collection = _repo()

        assert asyncio.run(repo.claim_team("p-1", "t-1", NOW)) is True

        query, update = collection.update_one.call_args.args
        assert query == {"_id": "p-1", "team_id": None}
        assert update["$set"]["team_id"] == "t-1"
        assert update["$set"]["availability.status"] == "In Team"

    def test_claim_refused(self):
        repo, _ = _repo(modified_count=0)
        assert asyncio.run(repo.claim_team("p-1", "t-1", NOW)) is False

    def test_release_only_from_that_team(self):
        repo, collection = _repo()
        asyncio.run(repo.release_team("p-1", "t-1", NOW))
        query, update = collection.update_one.call_args.args
        assert query == {"_id": "p-1", "team_id": "t-1"}
        assert update["$set"]["team_id"] is None
        assert update["$set"]["availability.status"] == "Available"


class TestProfile:
    def test_set_availability_refused_in_team(self):
        repo, collection = _repo(matched_count=0, modified_count=0)
        assert asyncio.run(repo.set_availability("p-1", "Not Available", NOW)) is False
        query, _ = collection.update_one.call_args.args
        assert query == {"_id": "p-1", "team_id": None}

    def test_set_availability_unchanged_value_still_succeeds(self):
        """Setting the current value matches without modifying."""
        repo, _ = _repo(matched_count=1, modified_count=0)
        assert asyncio.run(repo.set_availability("p-1", "Available", NOW)) is True

    def test_update_profile_guarded_by_lock(self):
        repo, collection = _repo()
        asyncio.run(repo.update_profile("p-1", {"bio": "Hi"}))
        query, update = collection.update_one.call_args.args
        assert query == {"_id": "p-1", "profile_locked": False}
        assert update == {"$set": {"bio": "Hi"}}


class TestAutomationQueries:
    def test_boost_solo(self):
        repo, collection = _repo(modified_count=2)
        cutoff = datetime(2025, 2, 26, 12, 0, tzinfo=timezone.utc)

        assert asyncio.run(repo.boost_solo(created_before=cutoff, now=NOW)) == 2

        query, update = collection.update_many.call_args.args
        assert query == {
            "availability.status": "Available",
            "team_id": None,
            "created_at": {"$lt": cutoff},
            "visibility_boost.is_boost": False,
        }
        assert update["$set"]["visibility_boost.boost_date"] == NOW

    def test_lock_all_profiles_skips_locked(self):
        repo, collection = _repo(modified_count=5)
        assert asyncio.run(repo.lock_all_profiles()) == 5
        query, update = collection.update_many.call_args.args
        assert query == {"profile_locked": False}
        assert update == {"$set": {"profile_locked": True}}

    def test_disable_available(self):
        repo, collection = _repo()
        asyncio.run(repo.disable_available(NOW))
        query, update = collection.update_many.call_args.args
        assert query == {"availability.status": "Available"}
        assert update["$set"]["availability.status"] == "Not Available"
