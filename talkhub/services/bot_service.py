"""Keyword auto-responder."""

from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from talkhub.models import BotResponse

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def get_active_bot_responses(db: Session) -> list[BotResponse]:
    return db.query(BotResponse).filter(BotResponse.is_active.is_(True)).all()


def _created_at(response: BotResponse) -> datetime:
    value = response.created_at
    if not isinstance(value, datetime):
        return _EPOCH
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _match_order(response: BotResponse) -> tuple:
    keyword = (response.keyword or "").strip()
    return (-len(keyword), _created_at(response), keyword.casefold())


def find_bot_response(responses: Iterable[BotResponse], content: Optional[str]) -> Optional[BotResponse]:
    """Return the response whose keyword occurs in the content, ignoring case.

    Longest keyword wins, then the oldest row, then keyword text, so the
    answer does not depend on the order rows come back from the database.
    """
    if not content:
        return None
    haystack = content.casefold()
    for response in sorted(responses, key=_match_order):
        if response.is_active is False:
            continue
        keyword = (response.keyword or "").strip()
        if keyword and keyword.casefold() in haystack:
            return response
    return None


def list_bot_responses(db: Session) -> list[BotResponse]:
    return db.query(BotResponse).order_by(BotResponse.created_at.desc()).all()


def create_bot_response(
    db: Session,
    keyword: str,
    response_text: str,
    *,
    is_active: bool = True,
    category: Optional[str] = None,
    created_by=None,
) -> BotResponse:
    now = datetime.now(timezone.utc)
    response = BotResponse(
        keyword=keyword.strip(),
        response_text=response_text,
        is_active=is_active,
        category=category,
        created_by=created_by,
        created_at=now,
        updated_at=now,
    )
    db.add(response)
    db.flush()
    return response


def update_bot_response(db: Session, response_id, changes: dict) -> Optional[BotResponse]:
    response = db.query(BotResponse).filter(BotResponse.id == response_id).first()
    if response is None:
        return None
    if "keyword" in changes and changes["keyword"] is not None:
        changes = {**changes, "keyword": changes["keyword"].strip()}
    for field, value in changes.items():
        setattr(response, field, value)
    response.updated_at = datetime.now(timezone.utc)
    db.flush()
    return response


def delete_bot_response(db: Session, response_id) -> bool:
    response = db.query(BotResponse).filter(BotResponse.id == response_id).first()
    if response is None:
        return False
    db.delete(response)
    db.flush()
    return True
