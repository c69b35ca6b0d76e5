from typing import Optional

from jinja2 import Environment

# Plain-text bodies only; the rich HTML mails are rendered by the frontend mailer.
env = Environment(autoescape=False, trim_blocks=True, lstrip_blocks=True)

TEAM_INVITE_TEMPLATE = env.from_string(
    """Hi there,

{{ inviter_name }} has invited you to join the team "{{ team_name }}" on {{ project_name }}.
{% if message %}

Message from {{ inviter_name }}:
"{{ message }}"
{% endif %}

The invite expires in {{ valid_hours }} hours. Review it here:
{{ link }}
"""
)


def get_team_invite_text(
    team_name: str,
    inviter_name: str,
    message: Optional[str],
    link: str,
    project_name: str = "TeamSync",
    valid_hours: int = 48,
) -> str:
    return TEAM_INVITE_TEMPLATE.render(
        team_name=team_name,
        inviter_name=inviter_name,
        message=message,
        link=link,
        project_name=project_name,
        valid_hours=valid_hours,
    )
