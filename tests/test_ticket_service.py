from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

from talkhub.models import Ticket
from talkhub.schemas.dashboard import TicketCreate, TicketUpdate
from talkhub.services.ticket_service import create_ticket, update_ticket


def _ticket(status="open", resolved_at=None):
    return SimpleNamespace(id="t-1", status=status, priority="medium", resolved_at=resolved_at, updated_at=None)


def _db_returning(ticket):
    db = MagicMock()
    db.query.return_value.filter.return_value.first.return_value = ticket
    return db


class TestCreateTicket:
    def test_starts_open(self):
        db = MagicMock()

        ticket = create_ticket(db, TicketCreate(title="Cobrança duplicada", priority="high"))

        assert isinstance(ticket, Ticket)
        assert ticket.status == "open"
        assert ticket.priority == "high"
        db.add.assert_called_once_with(ticket)
        db.flush.assert_called_once()


class TestUpdateTicket:
    def test_resolving_stamps_resolved_at(self):
        ticket = _ticket()

        update_ticket(_db_returning(ticket), "t-1", TicketUpdate(status="resolved"))

        assert ticket.status == "resolved"
        assert ticket.resolved_at is not None
        assert ticket.updated_at is not None

    def test_resolving_twice_keeps_first_stamp(self):
        first = datetime(2024, 1, 1, tzinfo=timezone.utc)
        ticket = _ticket(status="resolved", resolved_at=first)

        update_ticket(_db_returning(ticket), "t-1", TicketUpdate(status="resolved"))

        assert ticket.resolved_at == first

    def test_reopening_clears_resolved_at(self):
        ticket = _ticket(status="resolved", resolved_at=datetime(2024, 1, 1, tzinfo=timezone.utc))

        update_ticket(_db_returning(ticket), "t-1", TicketUpdate(status="in_progress"))

        assert ticket.resolved_at is None

    def test_priority_change_leaves_status(self):
        ticket = _ticket()

        update_ticket(_db_returning(ticket), "t-1", TicketUpdate(priority="urgent"))

        assert ticket.status == "open"
        assert ticket.priority == "urgent"
        assert ticket.resolved_at is None

    def test_unknown_ticket(self):
        assert update_ticket(_db_returning(None), "t-1", TicketUpdate(status="closed")) is None
