# API Routes Module
from app.api.routes import (
    admin,
    audio,
    auth,
    payments,
    progress,
    subscriptions,
    tts,
    vocabulary,
    webhooks,
)

__all__ = [
    "admin",
    "audio",
    "auth",
    "payments",
    "progress",
    "subscriptions",
    "tts",
    "vocabulary",
    "webhooks",
]
