"""
Unit tests for EventService: the registration workflow and ownership gates.
"""
import pytest
from sqlalchemy import select, func

from app.core.exceptions import ConflictError, ForbiddenError, InvalidInputError, NotFoundError
from app.db.models import Event, Registration
from app.db.repositories import registrations, events
from app.services.event_service import EventService


async def _count(db_session, model) -> int:
    res = await db_session.execute(select(func.count()).select_from(model))
    return res.scalar()


@pytest.mark.unit
@pytest.mark.asyncio
class TestCreateAndUpdate:

    async def test_create_event(self, db_session, test_organizer):
        service = EventService(db_session)

        ev = await service.create_event("Launch", None, "2025-01-01", "10:00", test_organizer.id)

        assert ev.title == "Launch"
        assert ev.description == ""
        assert ev.organizer_id == test_organizer.id
        assert ev.organizer_name == "Test Organizer"
        assert ev.participant_count == 0

    @pytest.mark.parametrize("title,date,time", [
        (None, "2025-01-01", "10:00"),
        ("Launch", None, "10:00"),
        ("Launch", "2025-01-01", None),
        ("   ", "2025-01-01", "10:00"),
    ])
    async def test_create_event_requires_fields(self, db_session, test_organizer, title, date, time):
        service = EventService(db_session)

        with pytest.raises(InvalidInputError, match="Title, date, and time are required"):
            await service.create_event(title, "desc", date, time, test_organizer.id)

        assert await _count(db_session, Event) == 0

    async def test_update_event_partial(self, db_session, test_event, test_organizer):
        service = EventService(db_session)

        ev = await service.update_event(test_event.id, {"title": "Renamed"}, test_organizer.id)

        assert ev.title == "Renamed"
        assert ev.date == "2025-01-01"
        assert ev.description == "A test event description"

    async def test_title_is_trimmed_on_create_and_update(self, db_session, test_organizer):
        service = EventService(db_session)

        created = await service.create_event(" Launch ", None, "2025-01-01", "10:00", test_organizer.id)
        updated = await service.update_event(created.id, {"title": " Renamed "}, test_organizer.id)

        assert created.title == "Launch"
        assert updated.title == "Renamed"

    async def test_update_event_rejects_blank_title(self, db_session, test_event, test_organizer):
        service = EventService(db_session)

        with pytest.raises(InvalidInputError):
            await service.update_event(test_event.id, {"title": ""}, test_organizer.id)

    async def test_update_event_not_owner(self, db_session, test_event, other_organizer):
        service = EventService(db_session)

        with pytest.raises(ForbiddenError, match="only update your own events"):
            await service.update_event(test_event.id, {"title": "Hacked"}, other_organizer.id)

        ev = await events.get_event(db_session, test_event.id)
        assert ev.title == "Test Event"

    async def test_update_missing_event(self, db_session, test_organizer):
        service = EventService(db_session)

        with pytest.raises(NotFoundError):
            await service.update_event("not-an-id", {"title": "x"}, test_organizer.id)


@pytest.mark.unit
@pytest.mark.asyncio
class TestRegisterForEvent:

    async def test_register_returns_receipt(self, db_session, test_event, test_attendee, sent_emails,
                                            drain_notifications):
        service = EventService(db_session)

        receipt = await service.register_for_event(test_event.id, test_attendee.id)
        await drain_notifications()

        assert receipt.event_id == test_event.id
        assert receipt.event_title == "Test Event"
        assert receipt.registered_at is not None
        assert await registrations.is_registered(db_session, test_event.id, test_attendee.id)

        ev = await events.get_event(db_session, test_event.id)
        assert ev.participants == [test_attendee.id]

        assert len(sent_emails) == 1
        recipient, details = sent_emails[0]
        assert recipient == test_attendee.email
        assert details["title"] == "Test Event"
        assert details["date"] == "2025-01-01"

    async def test_register_twice_conflicts(self, db_session, test_event, test_attendee):
        service = EventService(db_session)
        await service.register_for_event(test_event.id, test_attendee.id)

        with pytest.raises(ConflictError, match="already registered"):
            await service.register_for_event(test_event.id, test_attendee.id)

        assert await _count(db_session, Registration) == 1

    async def test_lost_insert_race_conflicts(self, db_session, test_event, test_attendee, monkeypatch):
        """When both existence checks miss, the unique constraint still yields Conflict."""
        event_id, user_id = test_event.id, test_attendee.id
        service = EventService(db_session)
        await service.register_for_event(event_id, user_id)

        async def never_registered(*args, **kwargs):
            return False
        monkeypatch.setattr(registrations, "is_registered", never_registered)

        with pytest.raises(ConflictError, match="already registered"):
            await service.register_for_event(event_id, user_id)

        assert await _count(db_session, Registration) == 1

    async def test_register_missing_event(self, db_session, test_attendee, sent_emails):
        service = EventService(db_session)

        with pytest.raises(NotFoundError, match="Event not found"):
            await service.register_for_event("00000000-0000-0000-0000-000000000000", test_attendee.id)

        assert await _count(db_session, Registration) == 0
        assert sent_emails == []

    async def test_register_malformed_event_id(self, db_session, test_attendee):
        service = EventService(db_session)

        with pytest.raises(NotFoundError):
            await service.register_for_event("nope", test_attendee.id)

    async def test_email_failure_does_not_fail_registration(self, db_session, test_event, test_attendee,
                                                           drain_notifications):
        async def broken_notifier(recipient, event):
            raise RuntimeError("SMTP down")

        service = EventService(db_session, notifier=broken_notifier)

        receipt = await service.register_for_event(test_event.id, test_attendee.id)
        await drain_notifications()

        assert receipt.event_title == "Test Event"
        assert await registrations.is_registered(db_session, test_event.id, test_attendee.id)

    async def test_email_failure_result_is_absorbed(self, db_session, test_event, test_attendee,
                                                    drain_notifications):
        async def failing_notifier(recipient, event):
            return {"success": False, "error": "mailbox full"}

        service = EventService(db_session, notifier=failing_notifier)

        await service.register_for_event(test_event.id, test_attendee.id)
        await drain_notifications()

        assert await _count(db_session, Registration) == 1


@pytest.mark.unit
@pytest.mark.asyncio
class TestDeleteAndRegistrants:

    async def test_delete_cascades_registrations(self, db_session, test_event, test_organizer,
                                                 test_attendee, second_attendee):
        event_id = test_event.id
        service = EventService(db_session)
        await service.register_for_event(event_id, test_attendee.id)
        await service.register_for_event(event_id, second_attendee.id)

        assert await service.delete_event(event_id, test_organizer.id) is True

        assert await events.get_event(db_session, event_id) is None
        assert await _count(db_session, Registration) == 0
        for user in (test_attendee, second_attendee):
            assert await registrations.is_registered(db_session, event_id, user.id) is False

    async def test_delete_not_owner(self, db_session, test_registration, test_event, other_organizer):
        service = EventService(db_session)

        with pytest.raises(ForbiddenError, match="only delete your own events"):
            await service.delete_event(test_event.id, other_organizer.id)

        assert await events.get_event(db_session, test_event.id) is not None
        assert await _count(db_session, Registration) == 1

    async def test_delete_missing_event(self, db_session, test_organizer):
        service = EventService(db_session)

        with pytest.raises(NotFoundError):
            await service.delete_event("00000000-0000-0000-0000-000000000000", test_organizer.id)

    async def test_get_event_registrations(self, db_session, test_registration, test_event,
                                           test_organizer, test_attendee):
        service = EventService(db_session)

        rows = await service.get_event_registrations(test_event.id, test_organizer.id)

        assert len(rows) == 1
        assert rows[0].registration_id == test_registration.id
        assert rows[0].user_id == test_attendee.id
        assert rows[0].user_name == "Test Attendee"
        assert rows[0].user_email == "attendee@example.com"

    async def test_get_event_registrations_not_owner(self, db_session, test_registration, test_event,
                                                     test_attendee):
        service = EventService(db_session)

        with pytest.raises(ForbiddenError):
            await service.get_event_registrations(test_event.id, test_attendee.id)

    async def test_get_event_includes_organizer_email(self, db_session, test_registration, test_event):
        service = EventService(db_session)

        ev = await service.get_event(test_event.id)

        assert ev.organizer_email == "organizer@example.com"
        assert ev.participant_count == 1
