from talkhub.models.bot_response import BotResponse
from talkhub.models.conversation import Conversation
from talkhub.models.message import Message
from talkhub.models.profile import Profile
from talkhub.models.setting import Setting
from talkhub.models.ticket import Ticket

__all__ = [
    "Profile",
    "Conversation",
    "Message",
    "BotResponse",
    "Ticket",
    "Setting",
]
