# tienda/repos/brand_repo.py
from typing import List

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from tienda.data.models.brand import BrandModel


class BrandRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_brand(self, brand_id: int) -> BrandModel | None:
        return self.db.get(BrandModel, brand_id)

    def get_by_name(self, name: str) -> BrandModel | None:
        stmt = select(BrandModel).where(func.lower(BrandModel.name) == name.strip().lower())
        return self.db.execute(stmt).scalars().first()

    def get_by_slug(self, slug: str) -> BrandModel | None:
        return self.db.execute(select(BrandModel).where(BrandModel.slug == slug)).scalars().first()

    def list_where(self, *criteria) -> List[BrandModel]:
        stmt = select(BrandModel).where(*criteria).order_by(BrandModel.sort_order, BrandModel.name)
        return list(self.db.execute(stmt).scalars())

    def search(self, term: str) -> List[BrandModel]:
        pattern = f"%{term.strip().lower()}%"
        return self.list_where(
            or_(func.lower(BrandModel.name).like(pattern), func.lower(BrandModel.description).like(pattern))
        )

    def count(self, *criteria) -> int:
        return self.db.execute(select(func.count(BrandModel.id)).where(*criteria)).scalar_one()

    def add_brand(self, brand: BrandModel) -> BrandModel:
        self.db.add(brand)
        self.db.flush()
        return brand

    def delete_brand(self, brand: BrandModel) -> None:
        self.db.delete(brand)

    def commit(self) -> None:
        self.db.commit()
