"""Example: using the service layer directly (no Flask).

Controllers are thin; the business rules live in the services.
"""

import asyncio
import importlib

from config import get_settings_module

from src.timewise.timewise.auth.context import CurrentUser
from src.timewise.timewise.container import build_container


async def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(settings)
    user = CurrentUser(user_id="user1", name="Alice Wonderland", email="alice@example.com")

    result = await container.event_service.create_event(
        {
            "title": "Alice Wonderland - Vacation",
            "eventType": "vacation",
            "startDate": "2024-07-01",
            "endDate": "2024-07-05",
            "isFullDay": "true",
            "recipients": '["managers"]',
        },
        current_user=user,
    )
    print(result.to_dict())
    print([e.to_dict() for e in await container.event_service.list_events(user.user_id)])
    container.dispatcher.shutdown(wait=True)


if __name__ == "__main__":
    asyncio.run(main())
