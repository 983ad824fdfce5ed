# tienda/services/brand_service.py
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from tienda.data.models.brand import BrandModel
from tienda.domain.errors import BusinessError, NotFoundError
from tienda.domain.schemas.catalog import BrandIn, BrandOut
from tienda.repos.brand_repo import BrandRepo
from tienda.utils.logging import get_logger
from tienda.utils.text import slugify

logger = get_logger(__name__)


class BrandService:
    def __init__(self, db: Session):
        self.repo = BrandRepo(db)

    def create_brand(self, payload: BrandIn) -> BrandOut:
        logger.info(f"Creando marca {payload.name}")
        if self.repo.get_by_name(payload.name):
            raise BusinessError(f"Ya existe una marca con el nombre {payload.name}", status_code=409)

        brand = BrandModel()
        self._apply(brand, payload)
        self.repo.add_brand(brand)
        self.repo.commit()
        return BrandOut.model_validate(brand)

    def update_brand(self, brand_id: int, payload: BrandIn) -> BrandOut:
        brand = self._by_id(brand_id)
        existing = self.repo.get_by_name(payload.name)
        if existing is not None and existing.id != brand.id:
            raise BusinessError(f"Ya existe una marca con el nombre {payload.name}", status_code=409)

        self._apply(brand, payload)
        self.repo.commit()
        logger.info(f"Marca actualizada: {brand_id}")
        return BrandOut.model_validate(brand)

    def delete_brand(self, brand_id: int) -> None:
        brand = self._by_id(brand_id)
        if not brand.can_be_deleted:
            raise BusinessError("No se puede eliminar una marca con productos asociados")
        self.repo.delete_brand(brand)
        self.repo.commit()
        logger.info(f"Marca eliminada: {brand_id}")

    def set_flag(self, brand_id: int, flag: str, value: bool) -> BrandOut:
        brand = self._by_id(brand_id)
        setattr(brand, flag, value)
        self.repo.commit()
        return BrandOut.model_validate(brand)

    def get_brand(self, brand_id: int) -> BrandOut:
        return BrandOut.model_validate(self._by_id(brand_id))

    def get_by_slug(self, slug: str) -> BrandOut:
        brand = self.repo.get_by_slug(slug)
        if brand is None:
            raise NotFoundError("Marca no encontrada")
        return BrandOut.model_validate(brand)

    def list_brands(self, *criteria) -> List[BrandOut]:
        return [BrandOut.model_validate(b) for b in self.repo.list_where(*criteria)]

    def list_active(self) -> List[BrandOut]:
        return self.list_brands(BrandModel.active.is_(True))

    def by_country(self, country: str) -> List[BrandOut]:
        return self.list_brands(func.lower(BrandModel.country) == country.strip().lower())

    def search(self, term: str) -> List[BrandOut]:
        return [BrandOut.model_validate(b) for b in self.repo.search(term)]

    def count(self, *criteria) -> int:
        return self.repo.count(*criteria)

    def _apply(self, brand: BrandModel, payload: BrandIn) -> None:
        for field, value in payload.model_dump().items():
            setattr(brand, field, value)
        brand.slug = payload.slug or slugify(payload.name)

    def _by_id(self, brand_id: int) -> BrandModel:
        brand = self.repo.get_brand(brand_id)
        if brand is None:
            raise NotFoundError(f"Marca {brand_id} no encontrada")
        return brand
