from talkhub.schemas.message import SendMessageRequest, SendMessageResponse, UploadResponse
from talkhub.schemas.webhook import EvolutionEvent, WebhookResponse

__all__ = ["EvolutionEvent", "WebhookResponse", "SendMessageRequest", "SendMessageResponse", "UploadResponse"]
