from __future__ import annotations

from uuid import uuid4

import pytest

from ibadgram.db.models import Mention, User
from ibadgram.domain.enums import IsolationLevel, MentionOwner
from ibadgram.exceptions import ConflictError, InvalidTransactionStateError, PersistenceError

pytestmark = pytest.mark.integration


def _user(email: str = "carol@gmail.com") -> User:
    return User(
        id=uuid4(),
        firstname="Carol",
        email=email,
        password_hash="pbkdf2_sha256$1000$00",
        password_salt="00",
    )


async def test_transaction_state_machine(uow_factory) -> None:
    async with uow_factory() as uow:
        assert uow.is_active is False
        with pytest.raises(InvalidTransactionStateError):
            await uow.save_changes()
        with pytest.raises(InvalidTransactionStateError):
            await uow.commit_transaction()
        await uow.rollback_transaction()

        await uow.begin_transaction()
        assert uow.is_active is True
        with pytest.raises(InvalidTransactionStateError):
            await uow.begin_transaction()

        await uow.rollback_transaction()
        assert uow.is_active is False


async def test_begin_accepts_isolation_level(uow_factory) -> None:
    async with uow_factory() as uow:
        await uow.begin_transaction(IsolationLevel.SERIALIZABLE)
        assert uow.is_active is True
        await uow.rollback_transaction()


async def test_failed_begin_leaves_unit_of_work_idle(uow_factory) -> None:
    async with uow_factory() as uow:
        # sqlite only knows SERIALIZABLE and READ UNCOMMITTED
        with pytest.raises(PersistenceError):
            await uow.begin_transaction(IsolationLevel.READ_COMMITTED)
        assert uow.is_active is False
        assert uow.session.in_transaction() is False

        await uow.begin_transaction()
        assert uow.is_active is True
        await uow.rollback_transaction()


async def test_commit_persists_and_rollback_discards(uow_factory) -> None:
    kept, dropped = _user("kept@gmail.com"), _user("dropped@gmail.com")

    async with uow_factory() as uow:
        await uow.begin_transaction()
        await uow.users.add(kept)
        await uow.commit_transaction()
        assert uow.is_active is False

        await uow.begin_transaction()
        await uow.users.add(dropped)
        await uow.save_changes()
        await uow.rollback_transaction()

    async with uow_factory() as uow:
        await uow.begin_transaction()
        assert await uow.users.get_by_id(kept.id) is not None
        assert await uow.users.get_by_id(dropped.id) is None
        await uow.rollback_transaction()


async def test_save_changes_reports_staged_entities(uow_factory) -> None:
    async with uow_factory() as uow:
        await uow.begin_transaction()
        await uow.users.add(_user("one@gmail.com"))
        await uow.users.add(_user("two@gmail.com"))

        assert await uow.save_changes() == 2
        assert await uow.save_changes() == 0
        await uow.rollback_transaction()


async def test_storage_conflict_raises_and_resets(uow_factory) -> None:
    owner_a, owner_b = uuid4(), uuid4()
    async with uow_factory() as uow:
        await uow.begin_transaction()
        await uow.mentions.add(Mention(shortname="taken", owner_kind=MentionOwner.USER, owner_id=owner_a))
        await uow.commit_transaction()

        await uow.begin_transaction()
        await uow.mentions.add(Mention(shortname="taken", owner_kind=MentionOwner.USER, owner_id=owner_b))
        with pytest.raises(ConflictError):
            await uow.commit_transaction()
        assert uow.is_active is False

    async with uow_factory() as uow:
        await uow.begin_transaction()
        assert await uow.mentions.get_by_owner(MentionOwner.USER, owner_b) is None
        await uow.rollback_transaction()


async def test_repositories_are_memoized_per_unit_of_work(uow_factory) -> None:
    first, second = uow_factory(), uow_factory()

    assert first.users is first.users
    assert first.users is not second.users
    assert first.users._session is first.chats._session

    await first.dispose()
    await second.dispose()


async def test_dispose_is_idempotent_and_final(uow_factory) -> None:
    uow = uow_factory()
    await uow.begin_transaction()

    await uow.dispose()
    await uow.dispose()

    assert uow.is_active is False
    with pytest.raises(InvalidTransactionStateError):
        _ = uow.session
