"""Values shared by every environment."""

DEFAULT_MAILING_LISTS = [
    {"id": "managers", "name": "Managers", "emails": ["manager1@example.com", "manager2@example.com"]},
    {"id": "team_alpha", "name": "Team Alpha", "emails": ["alpha_lead@example.com", "memberA@example.com"]},
    {"id": "hr_department", "name": "HR Department", "emails": ["hr@example.com"]},
]
