from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from talkhub.config import settings
from talkhub.database import get_db
from talkhub.logging_config import setup_logging
from talkhub.models import BotResponse, Conversation, Message, Ticket
from talkhub.routers import dashboard, whatsapp

setup_logging(settings.log_level)

app = FastAPI(
    title="Evo Talk Hub API",
    description="Helpdesk backend bridging the Evolution API WhatsApp gateway",
    version="0.1.0",
    debug=settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

app.include_router(whatsapp.router)
app.include_router(dashboard.router)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/db-check")
def db_check(db: Session = Depends(get_db)):
    return {
        "status": "ok",
        "conversations": db.query(Conversation).count(),
        "messages": db.query(Message).count(),
        "tickets": db.query(Ticket).count(),
        "bot_responses": db.query(BotResponse).count(),
    }
