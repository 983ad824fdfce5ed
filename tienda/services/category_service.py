# tienda/services/category_service.py
from typing import List

from sqlalchemy.orm import Session

from tienda.data.models.category import CategoryModel
from tienda.domain.errors import BusinessError, NotFoundError
from tienda.domain.schemas.catalog import CategoryIn, CategoryOut
from tienda.repos.category_repo import CategoryRepo
from tienda.utils.logging import get_logger
from tienda.utils.text import slugify

logger = get_logger(__name__)


class CategoryService:
    def __init__(self, db: Session):
        self.repo = CategoryRepo(db)

    def create_category(self, payload: CategoryIn) -> CategoryOut:
        logger.info(f"Creando categoria {payload.name}")
        if self.repo.get_by_name(payload.name):
            raise BusinessError(f"Ya existe una categoría con el nombre {payload.name}", status_code=409)

        category = CategoryModel()
        self._apply(category, payload)
        self.repo.add_category(category)
        self.repo.commit()
        return CategoryOut.model_validate(category)

    def update_category(self, category_id: int, payload: CategoryIn) -> CategoryOut:
        category = self._by_id(category_id)
        existing = self.repo.get_by_name(payload.name)
        if existing is not None and existing.id != category.id:
            raise BusinessError(f"Ya existe una categoría con el nombre {payload.name}", status_code=409)
        if payload.parent_id is not None and self._is_self_or_descendant(category, payload.parent_id):
            raise BusinessError("Una categoría no puede ser su propia ancestra")

        self._apply(category, payload)
        self.repo.commit()
        logger.info(f"Categoria actualizada: {category_id}")
        return CategoryOut.model_validate(category)

    def delete_category(self, category_id: int) -> None:
        category = self._by_id(category_id)
        if not category.can_be_deleted:
            raise BusinessError("No se puede eliminar una categoría con subcategorías o productos")
        self.repo.delete_category(category)
        self.repo.commit()
        logger.info(f"Categoria eliminada: {category_id}")

    def set_flag(self, category_id: int, flag: str, value: bool) -> CategoryOut:
        category = self._by_id(category_id)
        setattr(category, flag, value)
        self.repo.commit()
        return CategoryOut.model_validate(category)

    def get_category(self, category_id: int) -> CategoryOut:
        return CategoryOut.model_validate(self._by_id(category_id))

    def get_by_slug(self, slug: str) -> CategoryOut:
        category = self.repo.get_by_slug(slug)
        if category is None:
            raise NotFoundError("Categoría no encontrada")
        return CategoryOut.model_validate(category)

    def list_categories(self, *criteria) -> List[CategoryOut]:
        return [CategoryOut.model_validate(c) for c in self.repo.list_where(*criteria)]

    def list_active(self) -> List[CategoryOut]:
        return self.list_categories(CategoryModel.active.is_(True))

    def list_roots(self, only_active: bool = False) -> List[CategoryOut]:
        criteria = [CategoryModel.parent_id.is_(None)]
        if only_active:
            criteria.append(CategoryModel.active.is_(True))
        return self.list_categories(*criteria)

    def list_subcategories(self, parent_id: int, only_active: bool = False) -> List[CategoryOut]:
        self._by_id(parent_id)
        criteria = [CategoryModel.parent_id == parent_id]
        if only_active:
            criteria.append(CategoryModel.active.is_(True))
        return self.list_categories(*criteria)

    def search(self, term: str) -> List[CategoryOut]:
        return [CategoryOut.model_validate(c) for c in self.repo.search(term)]

    def count(self, *criteria) -> int:
        return self.repo.count(*criteria)

    # helpers

    def _apply(self, category: CategoryModel, payload: CategoryIn) -> None:
        if payload.parent_id is not None:
            category.parent = self._by_id(payload.parent_id)
        else:
            category.parent = None
        for field, value in payload.model_dump(exclude={"parent_id"}).items():
            setattr(category, field, value)
        category.slug = payload.slug or slugify(payload.name)

    def _is_self_or_descendant(self, category: CategoryModel, candidate_parent_id: int) -> bool:
        node = self.repo.get_category(candidate_parent_id)
        while node is not None:
            if node.id == category.id:
                return True
            node = node.parent
        return False

    def _by_id(self, category_id: int) -> CategoryModel:
        category = self.repo.get_category(category_id)
        if category is None:
            raise NotFoundError(f"Categoría {category_id} no encontrada")
        return category
