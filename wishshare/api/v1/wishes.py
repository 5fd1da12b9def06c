"""
Wish API endpoints

update_raised и get_many_by_ids сюда намеренно не выведены:
их вызывают только внутренние подсистемы.
"""
from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, HttpUrl, field_validator
from sqlalchemy.orm import Session

from wishshare.api.deps import get_db, get_current_user
from wishshare.application.wishes import WishesService
from wishshare.infrastructure.db.models import User


router = APIRouter(prefix="/api/v1/wishes", tags=["wishes"])


# === Request models ===

class CreateWishRequest(BaseModel):
    title: str = Field(min_length=1, max_length=250)
    description: str = Field(min_length=1, max_length=1024)
    link: HttpUrl
    image: HttpUrl
    price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)


class UpdateWishRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=250)
    description: str | None = Field(default=None, min_length=1, max_length=1024)
    link: HttpUrl | None = None
    image: HttpUrl | None = None
    price: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)

    @field_validator("title", "description", "link", "image", "price")
    @classmethod
    def not_null(cls, v):
        """Явный null недопустим: поле либо не передано, либо заполнено"""
        if v is None:
            raise ValueError("Поле не может быть пустым")
        return v


def _dump(req: BaseModel) -> dict:
    # URL-поля храним строками
    data = req.model_dump(exclude_unset=True)
    for key in ("link", "image"):
        if key in data:
            data[key] = str(data[key])
    return data


# === Endpoints ===

@router.post("/")
def create_wish(
    req: CreateWishRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Создать подарок"""
    return WishesService(db).create(_dump(req), user)


@router.get("/last")
def latest_wishes(db: Session = Depends(get_db)):
    """Последние подарки"""
    return WishesService(db).find_latest()


@router.get("/top")
def top_wishes(db: Session = Depends(get_db)):
    """Популярные подарки"""
    return WishesService(db).find_top()


@router.get("/{wish_id}")
def get_wish(
    wish_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Подарок по ID"""
    return WishesService(db).find_by_id(wish_id)


@router.patch("/{wish_id}")
def update_wish(
    wish_id: int,
    req: UpdateWishRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Обновить свой подарок"""
    return WishesService(db).update(wish_id, _dump(req), user.id)


@router.delete("/{wish_id}")
def delete_wish(
    wish_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Удалить свой подарок"""
    return WishesService(db).remove(wish_id, user.id)


@router.post("/{wish_id}/copy")
def copy_wish(
    wish_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Скопировать подарок к себе"""
    return WishesService(db).copy(wish_id, user)
