"""Seed script: registers sample identities for local testing."""

import asyncio

from otp_login.config import settings
from otp_login.errors import Conflict
from otp_login.main import configure_logging, lifespan

SAMPLE_USERS = [
    ("Ann Lee", "ann@example.com", "ann-secret", "0xabc"),
    ("Bob Smith", "bob@example.com", "bob-secret", "0xdef"),
    ("Carol Davis", "carol@example.com", "carol-secret", None),
]


async def seed() -> None:
    """Insert sample identities, skipping ones that already exist."""
    configure_logging(settings.debug)
    created = 0
    preview = settings.model_copy(update={"notifier_backend": "log"})
    async with lifespan(preview) as service:
        for name, email, secret, ref in SAMPLE_USERS:
            try:
                await service.register(name, email, secret, ref)
                created += 1
            except Conflict:
                print(f"• {email} already registered, skipping")
    print(f"✅ Seeded {created} users into the database.")


if __name__ == "__main__":
    asyncio.run(seed())
