"""
Wish Repository - доступ к хранилищу подарков

Интерфейс хранилища отделён от реализации: сервис работает с WishRepository,
в продакшене за ним SQLAlchemy (PostgreSQL), в тестах - SQLite in-memory.
"""
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, List, Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from wishshare.infrastructure.db.models import WishModel, OfferModel

logger = logging.getLogger(__name__)


class WishRepository(ABC):
    """
    Keyed-record store for wishes

    Все методы записи фиксируются сразу, кроме вызовов внутри transaction():
    там изменения применяются атомарно при выходе из блока.
    """

    @abstractmethod
    def find_by_id(self, wish_id: int, relations: Iterable[str] = ()) -> Optional[WishModel]:
        """Найти подарок по ID (с подгрузкой связей) или None"""

    @abstractmethod
    def find(
        self,
        order_by: str,
        limit: int,
        relations: Iterable[str] = (),
    ) -> List[WishModel]:
        """Найти подарки, отсортированные по полю по убыванию, не больше limit"""

    @abstractmethod
    def find_by_ids(self, wish_ids: Sequence[int]) -> List[WishModel]:
        """Найти все подарки из списка ID (без связей)"""

    @abstractmethod
    def add(self, **fields: Any) -> WishModel:
        """Создать подарок"""

    @abstractmethod
    def update(self, wish_id: int, **fields: Any) -> None:
        """Частичное обновление по ID"""

    @abstractmethod
    def delete(self, wish_id: int) -> None:
        """Удалить подарок по ID"""

    @abstractmethod
    def transaction(self):
        """Context manager: атомарный блок (commit / rollback)"""


class SqlAlchemyWishRepository(WishRepository):
    """WishRepository поверх SQLAlchemy session"""

    def __init__(self, db: Session):
        self.db = db
        self._in_transaction = False

    def _load_options(self, relations: Iterable[str]):
        relations = set(relations)
        options = []
        if "owner" in relations:
            options.append(selectinload(WishModel.owner))
        if "offers" in relations:
            options.append(
                selectinload(WishModel.offers).selectinload(OfferModel.user)
            )
        return options

    def _save(self) -> None:
        # Внутри транзакции только flush - commit делает transaction()
        if self._in_transaction:
            self.db.flush()
        else:
            self.db.commit()

    def find_by_id(self, wish_id: int, relations: Iterable[str] = ()) -> Optional[WishModel]:
        stmt = (
            select(WishModel)
            .where(WishModel.id == wish_id)
            .options(*self._load_options(relations))
        )
        return self.db.execute(stmt).scalars().first()

    def find(
        self,
        order_by: str,
        limit: int,
        relations: Iterable[str] = (),
    ) -> List[WishModel]:
        column = getattr(WishModel, order_by)
        stmt = (
            select(WishModel)
            .order_by(column.desc(), WishModel.id.desc())
            .limit(limit)
            .options(*self._load_options(relations))
        )
        return list(self.db.execute(stmt).scalars().all())

    def find_by_ids(self, wish_ids: Sequence[int]) -> List[WishModel]:
        stmt = select(WishModel).where(WishModel.id.in_(list(wish_ids)))
        return list(self.db.execute(stmt).scalars().all())

    def add(self, **fields: Any) -> WishModel:
        wish = WishModel(**fields)
        self.db.add(wish)
        self.db.flush()  # Получить ID
        self._save()
        return wish

    def update(self, wish_id: int, **fields: Any) -> None:
        if not fields:
            return
        self.db.execute(
            update(WishModel).where(WishModel.id == wish_id).values(**fields)
        )
        self._save()

    def delete(self, wish_id: int) -> None:
        wish = self.db.get(WishModel, wish_id)
        if wish is None:
            return
        self.db.delete(wish)
        self._save()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Атомарный блок записи

        Commit при нормальном выходе, rollback и повторный raise при любой
        ошибке. Флаг транзакции снимается на любом пути выхода.

        Usage:
            with repo.transaction():
                repo.update(wish_id, copied=wish.copied + 1)
                repo.add(**fields)
        """
        if self._in_transaction:
            raise RuntimeError("Nested wish transactions are not supported")

        self._in_transaction = True
        try:
            yield
            self.db.commit()
        except Exception:
            logger.warning("Wish transaction rolled back", exc_info=True)
            self.db.rollback()
            raise
        finally:
            self._in_transaction = False
