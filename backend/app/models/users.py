from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.enums import Proficiency

user_native_languages = Table(
    "user_native_languages",
    Base.metadata,
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("language_id", ForeignKey("languages.id", ondelete="CASCADE"), primary_key=True),
)

# Connections are stored once per direction; both rows are written and removed together.
user_connections = Table(
    "user_connections",
    Base.metadata,
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("connection_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Language(Base):
    """Reference data describing a spoken language."""

    __tablename__ = "languages"

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(String(3), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    native_name: Mapped[str] = mapped_column(String(64), nullable=False)
    flag: Mapped[str] = mapped_column(String(16), default="", nullable=False)
    popularity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class User(Base):
    """Application user."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    profile_picture: Mapped[str] = mapped_column(
        String(512), default="default-avatar.png", nullable=False
    )
    avatar_path: Mapped[str | None] = mapped_column(String(512))
    avatar_content_type: Mapped[str | None] = mapped_column(String(128))
    avatar_updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    bio: Mapped[str | None] = mapped_column(Text)
    interests: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    location_country: Mapped[str | None] = mapped_column(String(64))
    location_city: Mapped[str | None] = mapped_column(String(64))
    is_online: Mapped[bool] = mapped_column(default=False, nullable=False)
    last_active: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    native_languages: Mapped[list[Language]] = relationship(
        secondary=user_native_languages, order_by="Language.name"
    )
    learning_languages: Mapped[list["UserLearningLanguage"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="UserLearningLanguage.position",
    )
    connections: Mapped[list["User"]] = relationship(
        secondary=user_connections,
        primaryjoin=lambda: User.id == user_connections.c.user_id,
        secondaryjoin=lambda: User.id == user_connections.c.connection_id,
    )

    @property
    def avatar_url(self) -> str:
        from app.config import get_settings

        if not self.avatar_path:
            return self.profile_picture
        settings = get_settings()
        base = settings.avatar_base_url.rstrip("/")
        version = (
            int(self.avatar_updated_at.timestamp()) if self.avatar_updated_at is not None else None
        )
        suffix = f"?v={version}" if version is not None else ""
        return f"{base}/{self.id}{suffix}"

    @property
    def location(self) -> dict[str, str | None]:
        return {"country": self.location_country, "city": self.location_city}

    def native_language_ids(self) -> set[int]:
        return {language.id for language in self.native_languages}

    def learning_language_ids(self) -> set[int]:
        return {entry.language_id for entry in self.learning_languages}


class UserLearningLanguage(Base):
    """Language a user is learning, with their self-assessed level."""

    __tablename__ = "user_learning_languages"
    __table_args__ = (
        UniqueConstraint("user_id", "language_id", name="uq_user_learning_language"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    language_id: Mapped[int] = mapped_column(
        ForeignKey("languages.id", ondelete="CASCADE"), nullable=False
    )
    proficiency: Mapped[Proficiency] = mapped_column(
        SAEnum(
            Proficiency,
            name="proficiency",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        default=Proficiency.BEGINNER,
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    user: Mapped[User] = relationship(back_populates="learning_languages")
    language: Mapped[Language] = relationship()
