# app/modules/products/repository.py
from typing import List, Optional
from sqlalchemy.orm import Session, joinedload

from app.shared.database.models import Product, Category, SpecialStorage, PackageDetail

class ProductRepository:

    def __init__(self, db: Session):
        self.db = db

    def list_query(self, name: Optional[str] = None, category: Optional[str] = None):
        query = self.db.query(Product).options(
            joinedload(Product.category),
            joinedload(Product.special_storage)
        )
        if name:
            query = query.filter(Product.name.ilike(f"%{name}%"))
        if category:
            query = query.join(Category, Product.category_id == Category.id)\
                .filter(Category.name == category)
        return query.order_by(Product.name)

    def get_all(self) -> List[Product]:
        return self.list_query().all()

    def get_by_id(self, product_id: int) -> Optional[Product]:
        return self.db.query(Product).options(
            joinedload(Product.category),
            joinedload(Product.special_storage)
        ).filter(Product.id == product_id).first()

    def category_exists(self, category_id: int) -> bool:
        return self.db.query(Category.id).filter(Category.id == category_id).first() is not None

    def special_storage_exists(self, special_storage_id: int) -> bool:
        return self.db.query(SpecialStorage.id)\
            .filter(SpecialStorage.id == special_storage_id).first() is not None

    def get_category_names(self) -> List[str]:
        return [name for (name,) in self.db.query(Category.name).order_by(Category.name).all()]

    def has_details(self, product_id: int) -> bool:
        return self.db.query(PackageDetail.id)\
            .filter(PackageDetail.product_id == product_id).first() is not None

    def create(self, product_data: dict) -> Product:
        product = Product(quantity_on_hand=0, **product_data)
        self.db.add(product)
        self.db.flush()
        return product

    def delete(self, product: Product) -> None:
        self.db.delete(product)
        self.db.flush()
