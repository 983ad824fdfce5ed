# tienda/repos/category_repo.py
from typing import List

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from tienda.data.models.category import CategoryModel


class CategoryRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_category(self, category_id: int) -> CategoryModel | None:
        return self.db.get(CategoryModel, category_id)

    def get_by_name(self, name: str) -> CategoryModel | None:
        stmt = select(CategoryModel).where(func.lower(CategoryModel.name) == name.strip().lower())
        return self.db.execute(stmt).scalars().first()

    def get_by_slug(self, slug: str) -> CategoryModel | None:
        return self.db.execute(select(CategoryModel).where(CategoryModel.slug == slug)).scalars().first()

    def list_where(self, *criteria) -> List[CategoryModel]:
        stmt = select(CategoryModel).where(*criteria).order_by(CategoryModel.sort_order, CategoryModel.name)
        return list(self.db.execute(stmt).scalars())

    def search(self, term: str) -> List[CategoryModel]:
        pattern = f"%{term.strip().lower()}%"
        return self.list_where(
            or_(func.lower(CategoryModel.name).like(pattern), func.lower(CategoryModel.description).like(pattern))
        )

    def count(self, *criteria) -> int:
        return self.db.execute(select(func.count(CategoryModel.id)).where(*criteria)).scalar_one()

    def add_category(self, category: CategoryModel) -> CategoryModel:
        self.db.add(category)
        self.db.flush()
        return category

    def delete_category(self, category: CategoryModel) -> None:
        self.db.delete(category)

    def commit(self) -> None:
        self.db.commit()
