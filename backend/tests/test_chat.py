"""
CourseHub Backend: Chat Tests
=============================

What:  ChatService rules and the /api/chat endpoints.

What we test:
    ✅ Participant checks on send (sender, receiver, self-message)
    ✅ Conversation ordering and pagination
    ✅ Recent conversations grouped per counterpart with unread counts
    ✅ Read receipts, unread counters and sender-only delete
"""

from uuid import uuid4

import pytest

from coursehub.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from coursehub.schemas.chat import MessageSendRequest
from coursehub.services.chat_service import ChatService


def _msg(seed, receiver, content="hello", course=None):
    return MessageSendRequest(
        course_id=(course or seed.course).id, receiver_id=receiver.id, content=content
    )


class TestChatService:

    def setup_method(self):
        self.service = ChatService()

    @pytest.mark.asyncio
    async def test_send_message(self, db_session, seed):
        message = await self.service.send_message(
            db_session, seed.student, _msg(seed, seed.instructor, "  office hours?  ")
        )

        assert message.sender.id == seed.student.id
        assert message.receiver.id == seed.instructor.id
        assert message.content == "office hours?"
        assert message.is_read is False
        assert message.read_at is None

    @pytest.mark.asyncio
    async def test_cannot_message_self(self, db_session, seed):
        with pytest.raises(ValidationError):
            await self.service.send_message(db_session, seed.student, _msg(seed, seed.student))

    @pytest.mark.asyncio
    async def test_sender_must_be_participant(self, db_session, seed):
        with pytest.raises(PermissionDeniedError) as exc_info:
            await self.service.send_message(db_session, seed.outsider, _msg(seed, seed.student))
        assert exc_info.value.message == "You are not a participant of this course"

    @pytest.mark.asyncio
    async def test_receiver_must_be_participant(self, db_session, seed):
        with pytest.raises(PermissionDeniedError) as exc_info:
            await self.service.send_message(db_session, seed.student, _msg(seed, seed.outsider))
        assert exc_info.value.message == "Recipient is not a participant of this course"

    @pytest.mark.asyncio
    async def test_unknown_receiver(self, db_session, seed):
        request = MessageSendRequest(course_id=seed.course.id, receiver_id=uuid4(), content="hi")
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.send_message(db_session, seed.student, request)
        assert exc_info.value.message == "User not found"

    @pytest.mark.asyncio
    async def test_conversation_is_oldest_first_and_private(self, db_session, seed):
        await self.service.send_message(db_session, seed.student, _msg(seed, seed.instructor, "1"))
        await self.service.send_message(db_session, seed.instructor, _msg(seed, seed.student, "2"))
        await self.service.send_message(db_session, seed.classmate,
                                        _msg(seed, seed.instructor, "not yours"))

        messages, pagination = await self.service.get_conversation(
            db_session, seed.student, seed.course.id, seed.instructor.id
        )

        assert [m.content for m in messages] == ["1", "2"]
        assert pagination.total == 2

    @pytest.mark.asyncio
    async def test_recent_conversations(self, db_session, seed):
        await self.service.send_message(db_session, seed.student,
                                        _msg(seed, seed.instructor, "q1"))
        await self.service.send_message(db_session, seed.student,
                                        _msg(seed, seed.instructor, "q2"))
        await self.service.send_message(db_session, seed.classmate,
                                        _msg(seed, seed.instructor, "hey"))

        summaries = await self.service.get_recent_conversations(
            db_session, seed.instructor, seed.course.id
        )

        by_user = {s.user.id: s for s in summaries}
        assert set(by_user) == {seed.student.id, seed.classmate.id}
        assert by_user[seed.student.id].unread_count == 2
        assert by_user[seed.student.id].last_message.content in {"q1", "q2"}
        assert by_user[seed.classmate.id].unread_count == 1

    @pytest.mark.asyncio
    async def test_mark_read_is_receiver_only_and_idempotent(self, db_session, seed):
        sent = await self.service.send_message(db_session, seed.student,
                                               _msg(seed, seed.instructor))

        with pytest.raises(PermissionDeniedError):
            await self.service.mark_as_read(db_session, seed.student, sent.id)

        first = await self.service.mark_as_read(db_session, seed.instructor, sent.id)
        assert first.is_read is True
        assert first.read_at is not None

        second = await self.service.mark_as_read(db_session, seed.instructor, sent.id)
        # SQLite hands back naive datetimes
        assert second.read_at.replace(tzinfo=None) == first.read_at.replace(tzinfo=None)

    @pytest.mark.asyncio
    async def test_unread_count_by_course(self, db_session, seed):
        await self.service.send_message(db_session, seed.student, _msg(seed, seed.instructor))
        await self.service.send_message(db_session, seed.classmate, _msg(seed, seed.instructor))

        counts = await self.service.get_unread_count(db_session, seed.instructor)

        assert counts.unread_count == 2
        assert counts.by_course == {seed.course.id: 2}

    @pytest.mark.asyncio
    async def test_delete_is_sender_only(self, db_session, seed):
        sent = await self.service.send_message(db_session, seed.student,
                                               _msg(seed, seed.instructor))

        with pytest.raises(PermissionDeniedError):
            await self.service.delete_message(db_session, seed.instructor, sent.id)

        await self.service.delete_message(db_session, seed.student, sent.id)
        with pytest.raises(NotFoundError):
            await self.service.mark_as_read(db_session, seed.instructor, sent.id)

    @pytest.mark.asyncio
    async def test_participants_exclude_caller(self, db_session, seed):
        people = await self.service.get_participants(db_session, seed.student, seed.course.id)
        assert [p.name for p in people] == ["Ada Lovelace", "Linus Pauling"]

        with pytest.raises(PermissionDeniedError):
            await self.service.get_participants(db_session, seed.outsider, seed.course.id)


class TestChatEndpoints:

    @pytest.mark.asyncio
    async def test_send_and_read_over_http(self, test_client, seed, auth_headers):
        sent = await test_client.post(
            "/api/chat/send",
            json={"course_id": str(seed.course.id), "receiver_id": str(seed.instructor.id),
                  "content": "Is the lab due Friday?"},
            headers=auth_headers(seed.student),
        )
        assert sent.status_code == 201
        message_id = sent.json()["data"]["id"]

        unread = await test_client.get("/api/chat/unread", headers=auth_headers(seed.instructor))
        assert unread.json()["data"]["unread_count"] == 1

        read = await test_client.put(f"/api/chat/read/{message_id}",
                                     headers=auth_headers(seed.instructor))
        assert read.status_code == 200
        assert read.json()["data"]["is_read"] is True

        conversation = await test_client.get(
            f"/api/chat/conversation/{seed.course.id}/{seed.student.id}",
            headers=auth_headers(seed.instructor),
        )
        body = conversation.json()
        assert [m["content"] for m in body["data"]] == ["Is the lab due Friday?"]
        assert body["pagination"]["total"] == 1

    @pytest.mark.asyncio
    async def test_blank_message_rejected(self, test_client, seed, auth_headers):
        response = await test_client.post(
            "/api/chat/send",
            json={"course_id": str(seed.course.id), "receiver_id": str(seed.instructor.id),
                  "content": "   "},
            headers=auth_headers(seed.student),
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_participants_and_delete_routes(self, test_client, seed, auth_headers):
        participants = await test_client.get(f"/api/chat/participants/{seed.course.id}",
                                             headers=auth_headers(seed.instructor))
        assert {p["name"] for p in participants.json()["data"]} == {
            "Grace Hopper", "Linus Pauling",
        }

        sent = await test_client.post(
            "/api/chat/send",
            json={"course_id": str(seed.course.id), "receiver_id": str(seed.student.id),
                  "content": "See me after class"},
            headers=auth_headers(seed.instructor),
        )
        message_id = sent.json()["data"]["id"]

        recent = await test_client.get(f"/api/chat/recent/{seed.course.id}",
                                       headers=auth_headers(seed.student))
        [summary] = recent.json()["data"]
        assert summary["user"]["name"] == "Ada Lovelace"
        assert summary["unread_count"] == 1

        deleted = await test_client.delete(f"/api/chat/{message_id}",
                                           headers=auth_headers(seed.instructor))
        assert deleted.json() == {"success": True, "message": "Message deleted successfully"}
