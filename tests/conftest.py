from __future__ import annotations

import os
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable
from uuid import UUID, uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

os.environ.setdefault("IBADGRAM_JWT_SIGNING_KEY", "test-signing-key-for-ibadgram-suite-0123456789abcdef")
os.environ.setdefault("IBADGRAM_DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("IBADGRAM_PASSWORD_HASH_ITERATIONS", "1000")

from ibadgram.db.models import Chat, ChatMember, Mention, Message, User, utcnow  # noqa: E402
from ibadgram.db.session import create_engine, create_session_factory, init_models  # noqa: E402
from ibadgram.domain.enums import ChatRole, ChatType, MentionOwner  # noqa: E402
from ibadgram.domain.events import DomainEvent  # noqa: E402
from ibadgram.infrastructure.unit_of_work import SQLAlchemyUnitOfWork  # noqa: E402
from ibadgram.security.passwords import PasswordHasher  # noqa: E402
from ibadgram.security.tokens import TokenService  # noqa: E402
from ibadgram.services.email import LoggingEmailSender  # noqa: E402

DEFAULT_PASSWORD = "password123"


class RecordingNotificationBus:
    def __init__(self) -> None:
        self.events: list[DomainEvent] = []

    async def publish(self, event: DomainEvent) -> None:
        self.events.append(event)

    def names(self) -> list[str]:
        return [event.name for event in self.events]


@dataclass
class Seeder:
    """Writes fixtures straight through a session, outside any handler."""

    session_factory: async_sessionmaker[AsyncSession]
    password_hasher: PasswordHasher
    _message_ids: dict[UUID, int] = field(default_factory=lambda: defaultdict(int))

    async def save(self, *entities: Any) -> None:
        async with self.session_factory() as session:
            session.add_all(entities)
            await session.commit()

    async def get(self, model: type[Any], identity: Any) -> Any:
        async with self.session_factory() as session:
            return await session.get(model, identity)

    async def user(
        self,
        firstname: str = "Alice",
        *,
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
        verified: bool = True,
        confirmed: bool = True,
        shortname: str | None = None,
        deleted: bool = False,
    ) -> User:
        salt = self.password_hasher.generate_salt()
        user = User(
            id=uuid4(),
            firstname=firstname,
            email=email or f"{firstname.lower()}.{uuid4().hex[:8]}@gmail.com",
            password_salt=salt,
            password_hash=self.password_hasher.hash_password(password, salt),
            is_verified=verified,
            email_confirmed=confirmed or verified,
            is_deleted=deleted,
            created_at=utcnow(),
        )
        entities: list[Any] = [user]
        if shortname:
            entities.append(Mention(shortname=shortname, owner_kind=MentionOwner.USER, owner_id=user.id))
        await self.save(*entities)
        return user

    async def group(
        self,
        creator: User,
        *,
        name: str = "Team",
        is_private: bool = True,
        shortname: str | None = None,
        deleted: bool = False,
    ) -> Chat:
        chat = Chat(
            id=uuid4(),
            type=ChatType.GROUP,
            name=name,
            is_private=is_private,
            is_deleted=deleted,
            created_at=utcnow(),
        )
        entities: list[Any] = [
            chat,
            ChatMember(chat_id=chat.id, user_id=creator.id, role=ChatRole.CREATOR, nickname="Creator"),
        ]
        if shortname:
            entities.append(Mention(shortname=shortname, owner_kind=MentionOwner.CHAT, owner_id=chat.id))
        await self.save(*entities)
        return chat

    async def one_to_one(self, first: User, second: User) -> Chat:
        chat = Chat(
            id=uuid4(),
            type=ChatType.ONE_TO_ONE,
            direct_key=Chat.direct_key_for(first.id, second.id),
            created_at=utcnow(),
        )
        await self.save(
            chat,
            ChatMember(chat_id=chat.id, user_id=first.id),
            ChatMember(chat_id=chat.id, user_id=second.id),
        )
        return chat

    async def personal(self, user: User) -> Chat:
        chat = Chat(id=uuid4(), type=ChatType.PERSONAL, created_at=utcnow())
        await self.save(chat, ChatMember(chat_id=chat.id, user_id=user.id))
        return chat

    async def member(
        self,
        chat: Chat,
        user: User,
        *,
        role: ChatRole | None = None,
        nickname: str | None = None,
    ) -> ChatMember:
        member = ChatMember(chat_id=chat.id, user_id=user.id, role=role, nickname=nickname)
        await self.save(member)
        return member

    async def message(
        self, chat: Chat, user: User, text: str = "hello", *, deleted: bool = False
    ) -> Message:
        self._message_ids[chat.id] += 1
        message = Message(
            chat_id=chat.id,
            id=self._message_ids[chat.id],
            user_id=user.id,
            text=text,
            is_deleted=deleted,
            created_at=utcnow(),
        )
        await self.save(message)
        return message


@pytest.fixture
async def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'ibadgram.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest.fixture
def uow_factory(session_factory) -> Callable[[], SQLAlchemyUnitOfWork]:
    return lambda: SQLAlchemyUnitOfWork(session_factory)


@pytest.fixture
def password_hasher() -> PasswordHasher:
    return PasswordHasher(iterations=1000)


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(
        signing_key=os.environ["IBADGRAM_JWT_SIGNING_KEY"],
        issuer="ibadgram-tests",
        audience="ibadgram-tests",
    )


@pytest.fixture
def email_sender() -> LoggingEmailSender:
    return LoggingEmailSender()


@pytest.fixture
def bus() -> RecordingNotificationBus:
    return RecordingNotificationBus()


@pytest.fixture
def seed(session_factory, password_hasher) -> Seeder:
    return Seeder(session_factory=session_factory, password_hasher=password_hasher)
