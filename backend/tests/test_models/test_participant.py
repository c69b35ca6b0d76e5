"""Tests for the Participant model."""

import pytest
from pydantic import ValidationError

from teamsync.models.participant import Participant, dedupe_skills


class TestEmail:
    def test_normalized(self):
        participant = Participant(email="  Sam@Example.COM ", name="Sam")
        assert participant.email == "sam@example.com"

    def test_invalid(self):
        with pytest.raises(ValidationError):
            Participant(email="not-an-email", name="Sam")


class TestDefaults:
    def test_new_participant_is_available_and_teamless(self):
        participant = Participant(email="sam@example.com", name="Sam")
        assert participant.is_available
        assert not participant.in_team
        assert participant.role_preference == "Open to Any"
        assert participant.experience_level == "Intermediate"
        assert participant.profile_locked is False
        assert participant.visibility_boost.is_boost is False


class TestSkills:
    def test_dedupe_keeps_order(self):
        assert dedupe_skills([" React", "Node", "React ", "", "  "]) == ["React", "Node"]

    def test_dedupe_is_case_sensitive(self):
        assert dedupe_skills(["Python", "python"]) == ["Python", "python"]

    def test_applied_on_construction(self):
        participant = Participant(email="sam@example.com", name="Sam", technical_skills=["Go", " Go"])
        assert participant.technical_skills == ["Go"]

    def test_soft_skills_restricted_and_unique(self):
        participant = Participant(
            email="sam@example.com", name="Sam", soft_skills=["Pitching", "Pitching", "Leadership"]
        )
        assert participant.soft_skills == ["Pitching", "Leadership"]
        with pytest.raises(ValidationError):
            Participant(email="sam@example.com", name="Sam", soft_skills=["Juggling"])

    def test_bio_length_limit(self):
        with pytest.raises(ValidationError):
            Participant(email="sam@example.com", name="Sam", bio="x" * 501)
