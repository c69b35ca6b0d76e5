"""
Shared Constants

Centralized constants used across the application to ensure consistency.
"""

from typing import Dict, List

# Participant availability states
AVAILABILITY_AVAILABLE = "Available"
AVAILABILITY_NOT_AVAILABLE = "Not Available"
AVAILABILITY_IN_TEAM = "In Team"

# States a participant may set on themselves
SELF_SERVICE_AVAILABILITY = [AVAILABILITY_AVAILABLE, AVAILABILITY_NOT_AVAILABLE]

# Invite lifecycle
INVITE_STATUS_PENDING = "Pending"
INVITE_STATUS_ACCEPTED = "Accepted"
INVITE_STATUS_DECLINED = "Declined"
INVITE_STATUS_EXPIRED = "Expired"

# Join request lifecycle
REQUEST_STATUS_PENDING = "Pending"
REQUEST_STATUS_APPROVED = "Approved"
REQUEST_STATUS_REJECTED = "Rejected"

# Terminal states per queue entry type
INVITE_TERMINAL_STATES = [INVITE_STATUS_ACCEPTED, INVITE_STATUS_DECLINED, INVITE_STATUS_EXPIRED]
REQUEST_TERMINAL_STATES = [REQUEST_STATUS_APPROVED, REQUEST_STATUS_REJECTED]

# Team capacity bounds (leader counts as one slot)
TEAM_MIN_MEMBERS = 2
TEAM_MAX_MEMBERS = 6
TEAM_DEFAULT_MAX_MEMBERS = 4

# Free-text limits
MAX_MESSAGE_LENGTH = 500
MAX_BIO_LENGTH = 500
MAX_TEAM_DESCRIPTION_LENGTH = 1000

# Visibility boost
SOLO_BOOST_REASON = "Solo for 3+ days"

# Balance score reference points ("full marks")
BALANCE_ROLE_REFERENCE = 4
BALANCE_SKILL_REFERENCE = 10
BALANCE_SOFT_SKILL_REFERENCE = 6

# Balance score weights (maximum points per term)
BALANCE_ROLE_WEIGHT = 35
BALANCE_SKILL_WEIGHT = 40
BALANCE_SOFT_SKILL_WEIGHT = 25

# Grade bands, checked in order (lower bound inclusive)
BALANCE_GRADES: List[tuple] = [
    (80, "Excellent"),
    (60, "Good"),
    (40, "Fair"),
]
BALANCE_GRADE_FALLBACK = "Needs Improvement"

# Discovery / listing limits
DISCOVERY_LIMIT = 50
TEAM_LIST_LIMIT = 50

# Role shortage threshold for organizer analytics (percent of participants)
ROLE_SHORTAGE_PERCENT = 15

# Fallback skill suggestions when the generative-text service is unavailable
FALLBACK_SKILLS: Dict[str, List[str]] = {
    "Developer": ["Git", "REST APIs", "Testing", "Docker", "CI/CD"],
    "Designer": ["Prototyping", "User Research", "Design Systems", "Responsive Design", "Accessibility"],
    "ML/AI": ["Deep Learning", "Data Preprocessing", "Model Deployment", "Feature Engineering", "Computer Vision"],
    "Product Manager": ["User Stories", "Roadmapping", "Stakeholder Management", "Analytics", "MVP Development"],
    "Open to Any": ["Communication", "Problem Solving", "Collaboration", "Time Management", "Adaptability"],
}


def grade_for_score(score: int) -> str:
    """Map a 0-100 balance score to its display grade."""
    for lower_bound, grade in BALANCE_GRADES:
        if score >= lower_bound:
            return grade
    return BALANCE_GRADE_FALLBACK
