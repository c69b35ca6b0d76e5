"""
Generative Text Service

Thin client for the Gemini REST API. Every operation has a deterministic
fallback so a slow, failing or unconfigured model never breaks the request
that asked for it; only ``check_health`` reports the failure itself.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

from teamsync.core.config import settings
from teamsync.core.constants import (
    FALLBACK_SKILLS,
    MAX_BIO_LENGTH,
    MAX_TEAM_DESCRIPTION_LENGTH,
)
from teamsync.core.http_utils import HTTPRequestError, post_json
from teamsync.core.metrics import ai_fallbacks_total
from teamsync.models.participant import Participant, RolePreference
from teamsync.models.team import Team

logger = logging.getLogger(__name__)

SERVICE_NAME = "Gemini API"

MAX_SUGGESTED_SKILLS = 5
MAX_RECOMMENDED_TEAMS = 5

FALLBACK_COMPATIBILITY_SCORE = 70
UNPARSED_COMPATIBILITY_SCORE = 75
FALLBACK_COMPATIBILITY_ANALYSIS = "AI analysis temporarily unavailable. Manual review recommended."
UNPARSED_RECOMMENDATION_REASON = "Compatible team looking for diverse skills."

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


class AIUnavailableError(Exception):
    """The model could not produce an answer."""


def _clamp_score(value: Any, default: int) -> int:
    try:
        score = int(round(float(value)))
    except (TypeError, ValueError):
        return default
    return max(0, min(100, score))


def _skills_phrase(skills: List[str], default: str) -> str:
    return ", ".join(skills[:3]) if skills else default


def fallback_bio(bio: str, skills: List[str], role: str) -> str:
    """Expand whatever the participant wrote into a presentable bio."""
    original = (bio or "").strip()
    role = role or RolePreference.DEVELOPER.value

    if len(original) > 10:
        return (
            f"{original}. I specialize in {role} with expertise in "
            f"{_skills_phrase(skills, 'modern technologies')}. Passionate about collaborative "
            "problem-solving and delivering high-quality solutions in fast-paced environments."
        )
    if original:
        return (
            f"{original}. As a {role}, I bring strong expertise in "
            f"{_skills_phrase(skills, 'cutting-edge technologies')}, with a proven track record in "
            "delivering innovative solutions. I'm passionate about leveraging technology to solve "
            "complex problems and thrive in collaborative, fast-paced environments. Always eager "
            "to learn and contribute to impactful projects."
        )
    return (
        f"Experienced {role} with strong skills in {_skills_phrase(skills, 'software development')}. "
        "Passionate about innovation, teamwork, and building impactful solutions. Proven ability "
        "to deliver high-quality results in collaborative environments. Excited to contribute "
        "technical expertise and creative problem-solving to challenging projects."
    )


def fallback_skills(role: str) -> List[str]:
    return list(FALLBACK_SKILLS.get(role, FALLBACK_SKILLS[RolePreference.OPEN_TO_ANY.value]))


def fallback_team_description(team_name: str) -> str:
    return f"{team_name} - A diverse team ready to innovate and build amazing solutions."


def fallback_recommendations(open_teams: List[Team]) -> List[Dict[str, Any]]:
    """Rank open teams in the order given, with falling scores."""
    return [
        {
            "team_id": team.id,
            "score": max(50, 90 - index * 10),
            "reason": (
                f"This team is looking for members and has "
                f"{team.max_members - team.occupied} open spots."
            ),
        }
        for index, team in enumerate(open_teams)
    ]


class GenerativeTextService:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.model = model or settings.GEMINI_MODEL
        self.api_url = (api_url or settings.GEMINI_API_URL).rstrip("/")
        self.timeout = timeout or settings.GEMINI_TIMEOUT_SECONDS

    async def generate(self, prompt: str) -> str:
        """Send one prompt and return the text of the first candidate."""
        if not self.api_key:
            raise AIUnavailableError("GEMINI_API_KEY not configured")

        try:
            payload = await post_json(
                f"{self.api_url}/models/{self.model}:generateContent",
                data={"contents": [{"parts": [{"text": prompt}]}]},
                headers={"x-goog-api-key": self.api_key},
                timeout=self.timeout,
                service_name=SERVICE_NAME,
            )
        except HTTPRequestError as e:
            raise AIUnavailableError(str(e)) from e

        try:
            parts = payload["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts).strip()
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise AIUnavailableError(f"Unexpected response shape: {e}") from e
        if not text:
            raise AIUnavailableError("Empty response")
        return text

    def _fallback(self, operation: str, error: Exception) -> None:
        logger.warning(f"AI {operation} unavailable, using fallback: {error}")
        ai_fallbacks_total.labels(operation=operation).inc()

    async def improve_bio(self, bio: str, skills: List[str], role: str) -> str:
        prompt = (
            "Improve this hackathon participant profile bio. Make it engaging and professional:\n\n"
            f"Current Bio: {bio or 'No bio yet'}\n"
            f"Role: {role}\n"
            f"Skills: {', '.join(skills)}\n\n"
            "Generate an improved bio (max 100 words) that highlights their strengths for team formation."
        )
        try:
            improved = await self.generate(prompt)
        except AIUnavailableError as e:
            self._fallback("improve_bio", e)
            improved = fallback_bio(bio, skills, role)
        return improved[:MAX_BIO_LENGTH]

    async def suggest_skills(self, role: str, current_skills: List[str]) -> List[str]:
        prompt = (
            f'For a hackathon participant with role "{role}" who has these skills: '
            f"{', '.join(current_skills)}.\n\n"
            "Suggest 3-5 complementary technical skills they should consider adding. "
            "Return only skill names, comma-separated."
        )
        try:
            text = await self.generate(prompt)
        except AIUnavailableError as e:
            self._fallback("suggest_skills", e)
            return fallback_skills(role)

        suggestions = [s.strip() for s in text.split(",") if s.strip()]
        if not suggestions:
            return fallback_skills(role)
        return suggestions[:MAX_SUGGESTED_SKILLS]

    async def analyze_compatibility(self, participant: Participant, team: Team) -> Dict[str, Any]:
        prompt = (
            "Analyze team compatibility:\n\n"
            "Participant Profile:\n"
            f"- Role: {participant.role_preference}\n"
            f"- Technical Skills: {', '.join(participant.technical_skills)}\n"
            f"- Soft Skills: {', '.join(participant.soft_skills)}\n"
            f"- Experience: {participant.experience_level}\n"
            f"- Bio: {participant.bio or 'Not provided'}\n\n"
            "Team Profile:\n"
            f"- Name: {team.name}\n"
            f"- Current Size: {team.occupied}/{team.max_members}\n"
            f"- Balance Score: {team.balance_score}/100\n\n"
            "Provide a brief compatibility analysis (2-3 sentences) and a compatibility score (0-100).\n"
            'Format: {"score": number, "analysis": "text"}'
        )
        try:
            text = await self.generate(prompt)
        except AIUnavailableError as e:
            self._fallback("analyze_compatibility", e)
            return {"score": FALLBACK_COMPATIBILITY_SCORE, "analysis": FALLBACK_COMPATIBILITY_ANALYSIS}

        match = _JSON_OBJECT.search(text)
        if match:
            try:
                parsed = json.loads(match.group(0))
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, dict) and parsed.get("analysis"):
                return {
                    "score": _clamp_score(parsed.get("score"), UNPARSED_COMPATIBILITY_SCORE),
                    "analysis": str(parsed["analysis"]),
                }
        return {"score": UNPARSED_COMPATIBILITY_SCORE, "analysis": text}

    async def generate_team_description(self, team_name: str, roster: List[Participant]) -> str:
        member_summary = "; ".join(
            f"{m.role_preference} with {', '.join(m.technical_skills[:3])}" for m in roster
        )
        prompt = (
            "Generate a compelling team description for a hackathon team:\n\n"
            f"Team Name: {team_name}\n"
            f"Members: {member_summary}\n\n"
            "Create a brief, exciting description (2-3 sentences) that showcases the team's strengths."
        )
        try:
            description = await self.generate(prompt)
        except AIUnavailableError as e:
            self._fallback("generate_team_description", e)
            description = fallback_team_description(team_name)
        return description[:MAX_TEAM_DESCRIPTION_LENGTH]

    async def recommend_teams(self, participant: Participant, open_teams: List[Team]) -> List[Dict[str, Any]]:
        """Rank teams with free slots for a participant."""
        if not open_teams:
            return []

        candidates = open_teams[:MAX_RECOMMENDED_TEAMS]
        teams_info = [
            {
                "id": t.id,
                "name": t.name,
                "size": t.occupied,
                "maxMembers": t.max_members,
                "balanceScore": t.balance_score,
            }
            for t in candidates
        ]
        prompt = (
            "Recommend the best team for this participant:\n\n"
            "Participant:\n"
            f"- Role: {participant.role_preference}\n"
            f"- Skills: {', '.join(participant.technical_skills)}\n"
            f"- Experience: {participant.experience_level}\n\n"
            "Available Teams:\n"
            f"{json.dumps(teams_info, indent=2)}\n\n"
            "Rank the teams by compatibility and provide a compatibility score (0-100) and explain "
            "briefly why each matches.\n"
            'Format: [{"teamId": "id", "score": number, "reason": "text"}]'
        )
        try:
            text = await self.generate(prompt)
        except AIUnavailableError as e:
            self._fallback("recommend_teams", e)
            return fallback_recommendations(open_teams)

        known_ids = {t.id for t in candidates}
        match = _JSON_ARRAY.search(text)
        if match:
            try:
                parsed = json.loads(match.group(0))
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, list):
                ranked = [
                    {
                        "team_id": item["teamId"],
                        "score": _clamp_score(item.get("score"), UNPARSED_COMPATIBILITY_SCORE),
                        "reason": str(item.get("reason", "")),
                    }
                    for item in parsed
                    if isinstance(item, dict) and item.get("teamId") in known_ids
                ]
                if ranked:
                    return ranked

        return [
            {"team_id": t.id, "score": UNPARSED_COMPATIBILITY_SCORE, "reason": UNPARSED_RECOMMENDATION_REASON}
            for t in candidates[:3]
        ]

    async def check_health(self) -> Dict[str, Any]:
        try:
            await self.generate("Hello")
        except AIUnavailableError as e:
            return {"available": False, "message": str(e)}
        return {"available": True, "message": "AI service operational"}
