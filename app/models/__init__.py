"""
Desire — ORM model registry.

Importing every model here ensures that Alembic (and any other tool that
inspects ``Base.metadata``) discovers all tables automatically.
"""

from app.models.user import ProfileVisibility, User
from app.models.match import Like, Match, canonical_pair
from app.models.notification import Notification, NotificationKind
from app.models.conversation import Conversation, Message
from app.models.favorite import Favorite

__all__ = [
    "User",
    "ProfileVisibility",
    "Like",
    "Match",
    "canonical_pair",
    "Notification",
    "NotificationKind",
    "Conversation",
    "Message",
    "Favorite",
]
