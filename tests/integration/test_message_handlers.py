from __future__ import annotations

import pytest

from ibadgram.db.models import Message
from ibadgram.domain.enums import ChatRole
from ibadgram.domain.errors import ErrorCode, ErrorKind
from ibadgram.handlers.commands import (
    DeleteMessageHandler,
    SendMessageHandler,
    UpdateMessageHandler,
)
from ibadgram.schemas.commands import (
    DeleteMessageCommand,
    SendMessageCommand,
    UpdateMessageCommand,
)

pytestmark = pytest.mark.integration


async def _run(uow_factory, handler_cls, command, **kwargs):
    async with uow_factory() as uow:
        return await handler_cls(uow, **kwargs).handle(command)


async def test_send_message_allocates_per_chat_ids(uow_factory, seed, bus) -> None:
    alice, bob = await seed.user("Alice"), await seed.user("Bob")
    direct = await seed.one_to_one(alice, bob)
    personal = await seed.personal(alice)

    first = await _run(
        uow_factory, SendMessageHandler, SendMessageCommand(alice.id, direct.id, "hi"), notifications=bus
    )
    second = await _run(uow_factory, SendMessageHandler, SendMessageCommand(bob.id, direct.id, "hey"))
    note = await _run(uow_factory, SendMessageHandler, SendMessageCommand(alice.id, personal.id, "todo"))

    view = first.unwrap()
    assert view.message_id == 1
    assert view.fullname == "Alice"
    assert view.is_edited is False
    assert second.unwrap().message_id == 2
    assert note.unwrap().message_id == 1
    assert (await seed.get(Message, (direct.id, 2))).text == "hey"
    assert bus.names() == ["MessageSent"]


async def test_send_message_continues_after_deleted_ids(uow_factory, seed) -> None:
    alice = await seed.user("Alice")
    chat = await seed.personal(alice)
    await seed.message(chat, alice, deleted=True)

    result = await _run(uow_factory, SendMessageHandler, SendMessageCommand(alice.id, chat.id, "next"))

    assert result.unwrap().message_id == 2


async def test_send_message_carries_group_nickname(uow_factory, seed) -> None:
    alice = await seed.user("Alice")
    group = await seed.group(alice)

    result = await _run(uow_factory, SendMessageHandler, SendMessageCommand(alice.id, group.id, "welcome"))

    assert result.unwrap().nickname == "Creator"


@pytest.mark.parametrize("text", ["", " ", "x" * 1025])
async def test_send_message_validates_text(uow_factory, seed, text) -> None:
    alice = await seed.user("Alice")
    chat = await seed.personal(alice)

    result = await _run(uow_factory, SendMessageHandler, SendMessageCommand(alice.id, chat.id, text))

    assert result.kind is ErrorKind.VALIDATION


async def test_send_message_guards_run_in_order(uow_factory, seed) -> None:
    alice, bob = await seed.user("Alice"), await seed.user("Bob")
    unverified = await seed.user("Una", verified=False)
    group = await seed.group(alice)
    gone = await seed.group(alice, deleted=True)

    stranger = await _run(uow_factory, SendMessageHandler, SendMessageCommand(bob.id, group.id, "hi"))
    deleted = await _run(uow_factory, SendMessageHandler, SendMessageCommand(bob.id, gone.id, "hi"))
    not_verified = await _run(
        uow_factory, SendMessageHandler, SendMessageCommand(unverified.id, gone.id, "hi")
    )

    assert stranger.error.code is ErrorCode.CHAT_ACCESS_DENIED
    assert deleted.error.code is ErrorCode.CHAT_DELETED
    assert not_verified.error.code is ErrorCode.USER_NOT_VERIFIED


async def test_update_message_by_author(uow_factory, seed, bus) -> None:
    alice, bob = await seed.user("Alice"), await seed.user("Bob")
    chat = await seed.one_to_one(alice, bob)
    message = await seed.message(chat, alice, "draft")

    by_peer = await _run(
        uow_factory, UpdateMessageHandler, UpdateMessageCommand(bob.id, chat.id, message.id, "hacked")
    )
    by_author = await _run(
        uow_factory,
        UpdateMessageHandler,
        UpdateMessageCommand(alice.id, chat.id, message.id, "final"),
        notifications=bus,
    )

    stored = await seed.get(Message, (chat.id, message.id))
    assert by_peer.error.code is ErrorCode.NOT_MESSAGE_AUTHOR
    assert by_author.is_success
    assert stored.text == "final"
    assert stored.is_edited is True
    assert bus.names() == ["MessageUpdated"]


async def test_update_missing_or_deleted_message(uow_factory, seed) -> None:
    alice = await seed.user("Alice")
    chat = await seed.personal(alice)
    gone = await seed.message(chat, alice, deleted=True)

    missing = await _run(
        uow_factory, UpdateMessageHandler, UpdateMessageCommand(alice.id, chat.id, 42, "text")
    )
    deleted = await _run(
        uow_factory, UpdateMessageHandler, UpdateMessageCommand(alice.id, chat.id, gone.id, "text")
    )

    assert missing.error.code is ErrorCode.MESSAGE_NOT_FOUND
    assert deleted.error.code is ErrorCode.MESSAGE_DELETED


async def test_delete_message_by_author_or_group_admin(uow_factory, seed) -> None:
    alice, bob, carol = await seed.user("Alice"), await seed.user("Bob"), await seed.user("Carol")
    group = await seed.group(alice)
    await seed.member(group, bob, role=ChatRole.ADMIN)
    await seed.member(group, carol)
    from_carol = await seed.message(group, carol, "spam")
    from_alice = await seed.message(group, alice, "rules")

    by_member = await _run(
        uow_factory, DeleteMessageHandler, DeleteMessageCommand(carol.id, group.id, from_alice.id)
    )
    by_admin = await _run(
        uow_factory, DeleteMessageHandler, DeleteMessageCommand(bob.id, group.id, from_carol.id)
    )
    twice = await _run(
        uow_factory, DeleteMessageHandler, DeleteMessageCommand(bob.id, group.id, from_carol.id)
    )

    assert by_member.error.code is ErrorCode.NOT_MESSAGE_AUTHOR
    assert by_admin.is_success
    assert (await seed.get(Message, (group.id, from_carol.id))).is_deleted is True
    assert twice.error.code is ErrorCode.MESSAGE_DELETED


async def test_delete_message_in_one_to_one_needs_author(uow_factory, seed) -> None:
    alice, bob = await seed.user("Alice"), await seed.user("Bob")
    chat = await seed.one_to_one(alice, bob)
    message = await seed.message(chat, alice)

    by_peer = await _run(
        uow_factory, DeleteMessageHandler, DeleteMessageCommand(bob.id, chat.id, message.id)
    )
    by_author = await _run(
        uow_factory, DeleteMessageHandler, DeleteMessageCommand(alice.id, chat.id, message.id)
    )

    assert by_peer.error.code is ErrorCode.NOT_MESSAGE_AUTHOR
    assert by_author.is_success
