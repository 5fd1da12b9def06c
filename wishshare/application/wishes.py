"""
Wish use cases - business logic for wishes operations
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Sequence

from sqlalchemy.orm import Session

from wishshare.config import Settings, get_settings
from wishshare.domain.wish import (
    RELATIONS_FULL,
    RELATIONS_OWNER,
    WISH_EDITABLE_FIELDS,
    WISH_ERROR_CANNOT_CHANGE_PRICE,
    WISH_ERROR_NOT_FOUND,
    WISH_ERROR_NOT_OWNER,
    copyable_fields,
    is_owner,
    is_price_locked,
    to_amount,
    wish_to_json,
)
from wishshare.infrastructure.db.models import User, WishModel
from wishshare.infrastructure.wishes.repository import SqlAlchemyWishRepository, WishRepository

logger = logging.getLogger(__name__)


class WishError(ValueError):
    """Базовая ошибка операций с подарками (ошибка клиента, не сервера)"""
    pass


class WishNotFoundError(WishError):
    """Подарок не найден"""

    def __init__(self, message: str = WISH_ERROR_NOT_FOUND):
        super().__init__(message)


class WishNotOwnerError(WishError):
    """Пользователь не владелец подарка"""

    def __init__(self, message: str = WISH_ERROR_NOT_OWNER):
        super().__init__(message)


class WishPriceLockedError(WishError):
    """Цена заблокирована: на подарок уже скидываются"""

    def __init__(self, message: str = WISH_ERROR_CANNOT_CHANGE_PRICE):
        super().__init__(message)


class WishValidationError(WishError):
    """Ошибка валидации данных подарка"""
    pass


class WishesService:
    """
    CRUD подарков поверх WishRepository

    Сервис не хранит состояние между вызовами: всё состояние в хранилище.
    Ошибки хранилища не перехватываются и уходят вызывающему как есть.
    """

    def __init__(
        self,
        db: Session,
        repository: WishRepository | None = None,
        settings: Settings | None = None,
    ):
        self.db = db
        self.repo = repository or SqlAlchemyWishRepository(db)
        self.settings = settings or get_settings()

    def create(self, data: Dict[str, Any], owner: User) -> Dict[str, Any]:
        """Создать подарок от имени owner (raised = 0, copied = 0)"""
        wish = self._create(data, owner)
        return wish_to_json(wish, RELATIONS_OWNER)

    def find_by_id(self, wish_id: int) -> Dict[str, Any]:
        """Подарок с владельцем и заявками"""
        wish = self.repo.find_by_id(wish_id, RELATIONS_FULL)
        if not wish:
            raise WishNotFoundError()
        return wish_to_json(wish, RELATIONS_FULL)

    def find_latest(self) -> List[Dict[str, Any]]:
        """Последние добавленные подарки"""
        wishes = self.repo.find(
            order_by="created_at",
            limit=self.settings.LATEST_WISHES_LIMIT,
            relations=RELATIONS_FULL,
        )
        return [wish_to_json(wish, RELATIONS_FULL) for wish in wishes]

    def find_top(self) -> List[Dict[str, Any]]:
        """Самые копируемые подарки"""
        wishes = self.repo.find(
            order_by="copied",
            limit=self.settings.MOST_COPIED_WISHES_LIMIT,
            relations=RELATIONS_FULL,
        )
        return [wish_to_json(wish, RELATIONS_FULL) for wish in wishes]

    def update(self, wish_id: int, patch: Dict[str, Any], user_id: int) -> Dict[str, Any]:
        """
        Обновить свой подарок

        Args:
            wish_id: ID подарка
            patch: изменяемые поля (только переданные, partial update)
            user_id: ID пользователя, выполняющего запрос

        Returns:
            Проекция обновлённого подарка

        Raises:
            WishNotFoundError: подарка нет
            WishNotOwnerError: подарок чужой
            WishPriceLockedError: меняется цена, а на подарок уже скидываются
            WishValidationError: в patch нередактируемые поля или некорректная цена
        """
        wish = self._get_own_wish(wish_id, user_id)

        unknown = set(patch) - set(WISH_EDITABLE_FIELDS)
        if unknown:
            raise WishValidationError(
                f"Недопустимые поля для изменения: {', '.join(sorted(unknown))}"
            )

        changes = dict(patch)
        if changes.get("price") is not None:
            changes["price"] = self._amount(changes["price"])

        if "price" in changes and is_price_locked(wish, changes["price"]):
            logger.info("Price change rejected for wish %s: raised=%s", wish_id, wish.raised)
            raise WishPriceLockedError()

        self.repo.update(wish_id, **changes)

        updated = self.repo.find_by_id(wish_id)
        if not updated:
            raise WishNotFoundError()
        return wish_to_json(updated)

    def remove(self, wish_id: int, user_id: int) -> Dict[str, Any]:
        """Удалить свой подарок, вернуть его последнее состояние"""
        wish = self._get_own_wish(wish_id, user_id)

        # Снимок до удаления: после delete запись недоступна
        snapshot = wish_to_json(wish, RELATIONS_OWNER)
        self.repo.delete(wish_id)
        return snapshot

    def copy(self, wish_id: int, user: User) -> Dict[str, Any]:
        """
        Скопировать подарок в свой вишлист

        Счётчик copied исходного подарка и создание копии выполняются
        в одной транзакции: при любой ошибке откатываются оба изменения.
        """
        original = self.repo.find_by_id(wish_id, RELATIONS_OWNER)
        if not original:
            raise WishNotFoundError()

        with self.repo.transaction():
            source = self.repo.find_by_id(wish_id)
            if not source:
                raise WishNotFoundError()

            data = copyable_fields(source)
            # Инкремент на стороне БД: параллельные копии не теряют приращения
            self.repo.update(wish_id, copied=WishModel.copied + 1)

            new_wish = self._create(data, user)

            saved = self.repo.find_by_id(new_wish.id, RELATIONS_FULL)
            if not saved:
                raise WishNotFoundError()
            result = wish_to_json(saved, RELATIONS_FULL)

        logger.info("Wish %s copied by user %s as wish %s", wish_id, user.id, result["id"])
        return result

    def get_many_by_ids(self, wish_ids: Sequence[int]) -> List[Dict[str, Any]]:
        """Подарки по списку ID (без владельца и заявок)"""
        if not wish_ids:
            return []

        wishes = self.repo.find_by_ids(wish_ids)
        return [wish_to_json(wish) for wish in wishes]

    def update_raised(self, wish_id: int, raised_amount) -> Dict[str, Any]:
        """
        Установить собранную сумму (абсолютное значение, не приращение)

        Вызывается только подсистемой заявок, которая сама считает
        итоговую сумму. Проверки владельца нет: наружу не публикуется.
        """
        amount = self._amount(raised_amount)
        if amount < 0:
            raise WishValidationError("Собранная сумма не может быть отрицательной")

        self.repo.update(wish_id, raised=amount)
        updated = self.repo.find_by_id(wish_id)
        if not updated:
            raise WishNotFoundError()
        return wish_to_json(updated)

    def _create(self, data: Dict[str, Any], owner: User) -> WishModel:
        missing = [field for field in WISH_EDITABLE_FIELDS if data.get(field) is None]
        if missing:
            raise WishValidationError(f"Не заполнены поля: {', '.join(missing)}")

        fields = {field: data[field] for field in WISH_EDITABLE_FIELDS}
        fields["price"] = self._amount(fields["price"])
        return self.repo.add(**fields, owner=owner, raised=to_amount(0), copied=0)

    def _amount(self, value) -> Decimal:
        try:
            return to_amount(value)
        except ValueError as exc:
            raise WishValidationError(str(exc)) from exc

    def _get_own_wish(self, wish_id: int, user_id: int) -> WishModel:
        wish = self.repo.find_by_id(wish_id, RELATIONS_OWNER)
        if not wish:
            raise WishNotFoundError()

        if not is_owner(wish, user_id):
            logger.info("User %s is not the owner of wish %s", user_id, wish_id)
            raise WishNotOwnerError()

        return wish
