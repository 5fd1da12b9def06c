"""
SQLAlchemy ORM models (users, wishes, offers)
"""
from decimal import Decimal
from sqlalchemy import String, DateTime, Integer, Text, Boolean, Numeric, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wishshare.infrastructure.db.session import Base


class User(Base):
    """
    User model (владелец слоя идентификации, здесь только читается)
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    about: Mapped[str] = mapped_column(
        String(200), nullable=False, server_default="Пока ничего не рассказал о себе"
    )
    avatar: Mapped[str] = mapped_column(
        String(1024), nullable=False, server_default="https://i.pravatar.cc/300"
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    wishes: Mapped[list["WishModel"]] = relationship(back_populates="owner")


class WishModel(Base):
    """Wish - подарок в вишлисте пользователя со сбором денег"""
    __tablename__ = "wishes"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    title: Mapped[str] = mapped_column(String(250), nullable=False)
    description: Mapped[str] = mapped_column(String(1024), nullable=False)
    link: Mapped[str] = mapped_column(Text, nullable=False)
    image: Mapped[str] = mapped_column(Text, nullable=False)

    # Finance
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    raised: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))

    # Сколько раз подарок скопировали другие пользователи
    copied: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True
    )
    updated_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    owner: Mapped[User] = relationship(back_populates="wishes")
    offers: Mapped[list["OfferModel"]] = relationship(
        back_populates="wish",
        cascade="all, delete-orphan",
        order_by="OfferModel.id",
    )


class OfferModel(Base):
    """Offer - заявка пользователя скинуться на подарок (пишется подсистемой заявок)"""
    __tablename__ = "offers"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    wish_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("wishes.id", ondelete="CASCADE"), nullable=False, index=True
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    hidden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    user: Mapped[User] = relationship()
    wish: Mapped[WishModel] = relationship(back_populates="offers")
