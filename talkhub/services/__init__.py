from talkhub.services.bot_service import find_bot_response, get_active_bot_responses
from talkhub.services.conversation_service import (
    get_deliverable_conversation,
    get_or_create_conversation,
    touch_conversation,
)
from talkhub.services.message_service import save_message
from talkhub.services.settings_service import HubSettings, load_hub_settings
