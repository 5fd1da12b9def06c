"""
Wish domain rules

Подарок (wish) - позиция вишлиста с целевой ценой, собранной суммой
и счётчиком копирований другими пользователями.
"""
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable


# Лимиты лент
WISHES_LATEST_LIMIT = 40
WISHES_MOST_COPIED_LIMIT = 20

# Error messages
WISH_ERROR_NOT_FOUND = "Подарок не найден"
WISH_ERROR_NOT_OWNER = "Можно изменять только свои подарки"
WISH_ERROR_CANNOT_CHANGE_PRICE = "Нельзя изменить стоимость подарка, на который уже скидываются"

# Поля, которые владелец может менять через update
WISH_EDITABLE_FIELDS = ("title", "description", "link", "image", "price")

# Поля, которые переносятся в копию подарка (allow-list)
WISH_COPYABLE_FIELDS = ("title", "description", "link", "image", "price")

# Relation sets
RELATIONS_OWNER = ("owner",)
RELATIONS_FULL = ("owner", "offers")


def is_owner(wish, user_id: int) -> bool:
    """Является ли пользователь владельцем подарка"""
    return wish.owner_id == user_id


def to_amount(value) -> Decimal:
    """
    Привести сумму (int / float / str / Decimal) к Decimal с 2 знаками

    Raises:
        ValueError: если значение не число
    """
    try:
        if not isinstance(value, Decimal):
            value = Decimal(str(value))
        if not value.is_finite():
            raise InvalidOperation
        return value.quantize(Decimal("0.01"))
    except InvalidOperation:
        raise ValueError(f"Некорректная сумма: {value!r}") from None


def is_price_locked(wish, new_price) -> bool:
    """
    Цену нельзя менять, если на подарок уже начали скидываться

    Args:
        wish: подарок (нужны price и raised)
        new_price: новая цена из запроса

    Returns:
        True если изменение цены запрещено
    """
    if new_price is None:
        return False
    is_price_changed = to_amount(new_price) != to_amount(wish.price)
    has_contributions = to_amount(wish.raised) > 0
    return is_price_changed and has_contributions


def copyable_fields(wish) -> Dict[str, Any]:
    """Описательные поля подарка для создания копии"""
    return {field: getattr(wish, field) for field in WISH_COPYABLE_FIELDS}


def _iso(value) -> str | None:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _money(value) -> str | None:
    if value is None:
        return None
    return str(to_amount(value))


def user_to_json(user) -> Dict[str, Any]:
    """Публичная проекция пользователя (без email и пароля)"""
    return {
        "id": user.id,
        "username": user.username,
        "about": user.about,
        "avatar": user.avatar,
        "created_at": _iso(user.created_at),
        "updated_at": _iso(user.updated_at),
    }


def offer_to_json(offer) -> Dict[str, Any]:
    """Проекция заявки без обратной ссылки на подарок"""
    return {
        "id": offer.id,
        "amount": _money(offer.amount),
        "hidden": offer.hidden,
        "created_at": _iso(offer.created_at),
        "updated_at": _iso(offer.updated_at),
        # Скрытая заявка не раскрывает участника
        "user": None if offer.hidden else user_to_json(offer.user),
    }


def wish_to_json(wish, relations: Iterable[str] = ()) -> Dict[str, Any]:
    """
    JSON-safe проекция подарка

    Args:
        wish: ORM-запись подарка
        relations: какие связи включить ("owner", "offers")

    Returns:
        dict со скалярными полями и запрошенными связями
    """
    data = {
        "id": wish.id,
        "title": wish.title,
        "description": wish.description,
        "link": wish.link,
        "image": wish.image,
        "price": _money(wish.price),
        "raised": _money(wish.raised),
        "copied": wish.copied,
        "created_at": _iso(wish.created_at),
        "updated_at": _iso(wish.updated_at),
    }
    relations = set(relations)
    if "owner" in relations:
        data["owner"] = user_to_json(wish.owner)
    if "offers" in relations:
        data["offers"] = [offer_to_json(offer) for offer in wish.offers]
    return data
