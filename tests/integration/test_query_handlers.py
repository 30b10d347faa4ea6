from __future__ import annotations

import pytest

from ibadgram.domain.enums import ChatRole
from ibadgram.domain.errors import ErrorCode, ErrorKind
from ibadgram.handlers.queries import (
    GetChatHandler,
    GetGroupMembersHandler,
    GetMessagesHandler,
    GetUserHandler,
    GetUserMembershipsHandler,
)
from ibadgram.schemas.commands import (
    GetChatQuery,
    GetGroupMembersQuery,
    GetMessagesQuery,
    GetUserMembershipsQuery,
    GetUserQuery,
)
from ibadgram.schemas.views import (
    DeletedChatView,
    DeletedUserView,
    GroupChatView,
    OneToOneChatView,
    PersonalChatView,
    UserView,
)

pytestmark = pytest.mark.integration


async def _run(uow_factory, handler_cls, query):
    async with uow_factory() as uow:
        return await handler_cls(uow).handle(query)


async def test_messages_are_paged_newest_first(uow_factory, seed) -> None:
    alice, bob = await seed.user("Alice"), await seed.user("Bob")
    group = await seed.group(alice, name="Team")
    await seed.member(group, bob, nickname="bobby")
    for index in range(5):
        await seed.message(group, bob if index % 2 else alice, f"m{index + 1}")
    await seed.message(group, alice, "removed", deleted=True)

    first = (await _run(uow_factory, GetMessagesHandler, GetMessagesQuery(bob.id, group.id, limit=2))).unwrap()
    last = (
        await _run(uow_factory, GetMessagesHandler, GetMessagesQuery(bob.id, group.id, limit=2, offset=4))
    ).unwrap()

    assert [m.text for m in first.messages] == ["m5", "m4"]
    assert first.messages[1].nickname == "bobby"
    assert first.messages[0].nickname == "Creator"
    assert first.pagination.total_count == 5
    assert first.pagination.has_next_page is True
    assert first.pagination.next_cursor == 2
    assert first.chat_info.chat_name == "Team"
    assert first.chat_info.user_role is ChatRole.MEMBER

    assert [m.text for m in last.messages] == ["m1"]
    assert last.pagination.has_next_page is False
    assert last.pagination.next_cursor is None


async def test_messages_require_membership(uow_factory, seed) -> None:
    alice, bob = await seed.user("Alice"), await seed.user("Bob")
    public = await seed.group(alice, is_private=False, shortname="open-room")

    stranger = await _run(uow_factory, GetMessagesHandler, GetMessagesQuery(bob.id, public.id))
    too_many = await _run(uow_factory, GetMessagesHandler, GetMessagesQuery(alice.id, public.id, limit=101))

    assert stranger.error.code is ErrorCode.CHAT_ACCESS_DENIED
    assert too_many.kind is ErrorKind.VALIDATION


async def test_group_members_search(uow_factory, seed) -> None:
    alice, bob, carol = await seed.user("Alice"), await seed.user("Bob"), await seed.user("Carol")
    gone = await seed.user("Gone", deleted=True)
    group = await seed.group(alice)
    await seed.member(group, bob, role=ChatRole.ADMIN)
    await seed.member(group, carol, nickname="cc")
    await seed.member(group, gone)

    page = (await _run(uow_factory, GetGroupMembersHandler, GetGroupMembersQuery(carol.id, group.id))).unwrap()
    admins = (
        await _run(
            uow_factory,
            GetGroupMembersHandler,
            GetGroupMembersQuery(carol.id, group.id, role_filter=ChatRole.ADMIN),
        )
    ).unwrap()
    everyone = (
        await _run(
            uow_factory,
            GetGroupMembersHandler,
            GetGroupMembersQuery(carol.id, group.id, include_deleted=True),
        )
    ).unwrap()

    assert page.total_count == 3
    assert [m.user_id for m in page.members] == [alice.id, bob.id, carol.id]
    assert page.members[0].role is ChatRole.CREATOR
    assert page.members[2].role is ChatRole.MEMBER
    assert page.members[2].nickname == "cc"
    assert [m.user_id for m in admins.members] == [bob.id]
    assert everyone.total_count == 4
    assert any(m.is_deleted for m in everyone.members)


async def test_group_members_only_for_groups(uow_factory, seed) -> None:
    alice, bob = await seed.user("Alice"), await seed.user("Bob")
    direct = await seed.one_to_one(alice, bob)

    result = await _run(uow_factory, GetGroupMembersHandler, GetGroupMembersQuery(alice.id, direct.id))

    assert result.error.code is ErrorCode.CHAT_TYPE_MISMATCH


async def test_user_memberships_are_sorted_and_skip_deleted_chats(uow_factory, seed) -> None:
    alice = await seed.user("Alice")
    zoo = await seed.group(alice, name="zoo")
    book = await seed.group(alice, name="Book club")
    await seed.group(alice, name="Archive", deleted=True)
    await seed.message(book, alice, "see you")

    views = (await _run(uow_factory, GetUserMembershipsHandler, GetUserMembershipsQuery(alice.id))).unwrap()

    assert [view.chat_id for view in views] == [book.id, zoo.id]
    assert views[0].last_message_text == "see you"
    assert views[1].last_message_text is None


async def test_get_chat_views(uow_factory, seed) -> None:
    alice = await seed.user("Alice")
    bob = await seed.user("Bob", shortname="bobby")
    personal = await seed.personal(alice)
    await seed.message(personal, alice)
    direct = await seed.one_to_one(alice, bob)
    group = await seed.group(alice, name="Team", is_private=False, shortname="team-room")
    await seed.member(group, bob)
    gone = await seed.group(alice, deleted=True)

    async def view(chat):
        return (await _run(uow_factory, GetChatHandler, GetChatQuery(alice.id, chat.id))).unwrap()

    assert await view(personal) == PersonalChatView(chat_id=personal.id, message_count=1)
    peer = await view(direct)
    assert isinstance(peer, OneToOneChatView)
    assert (peer.peer_id, peer.shortname) == (bob.id, "bobby")
    team = await view(group)
    assert isinstance(team, GroupChatView)
    assert (team.shortname, team.member_count, team.is_private) == ("team-room", 2, False)
    assert isinstance(await view(gone), DeletedChatView)


async def test_get_chat_access(uow_factory, seed) -> None:
    alice, bob, carol = await seed.user("Alice"), await seed.user("Bob"), await seed.user("Carol")
    public = await seed.group(alice, is_private=False, shortname="open-room")
    private = await seed.group(alice)
    direct = await seed.one_to_one(alice, bob)

    on_public = await _run(uow_factory, GetChatHandler, GetChatQuery(carol.id, public.id))
    on_private = await _run(uow_factory, GetChatHandler, GetChatQuery(carol.id, private.id))
    on_direct = await _run(uow_factory, GetChatHandler, GetChatQuery(carol.id, direct.id))

    assert on_public.unwrap().chat_id == public.id
    assert on_private.error.code is ErrorCode.CHAT_ACCESS_DENIED
    assert on_direct.error.code is ErrorCode.CHAT_ACCESS_DENIED


async def test_one_to_one_with_deleted_peer_reads_as_deleted(uow_factory, seed) -> None:
    alice = await seed.user("Alice")
    bob = await seed.user("Bob", deleted=True)
    direct = await seed.one_to_one(alice, bob)

    result = await _run(uow_factory, GetChatHandler, GetChatQuery(alice.id, direct.id))

    assert result.unwrap() == DeletedChatView(chat_id=direct.id)


async def test_get_user(uow_factory, seed) -> None:
    alice = await seed.user("Alice", shortname="alice")
    gone = await seed.user("Gone", deleted=True)

    found = (await _run(uow_factory, GetUserHandler, GetUserQuery(alice.id))).unwrap()
    deleted = (await _run(uow_factory, GetUserHandler, GetUserQuery(gone.id))).unwrap()

    assert isinstance(found, UserView)
    assert (found.firstname, found.shortname) == ("Alice", "alice")
    assert deleted == DeletedUserView(user_id=gone.id)


async def test_queries_never_write(uow_factory, seed) -> None:
    alice = await seed.user("Alice")
    group = await seed.group(alice)

    result = await _run(uow_factory, GetGroupMembersHandler, GetGroupMembersQuery(alice.id, group.id))

    assert result.unwrap().members[0].is_online is False
    assert GetGroupMembersHandler.read_only is True
    assert GetChatHandler.read_only is True
