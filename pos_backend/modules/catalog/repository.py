from sqlalchemy.orm import Session
from sqlalchemy import or_, func, select
from typing import List, Optional, Tuple

from pos_backend.shared.database.models import Product


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class CatalogRepository:
    def __init__(self, db: Session):
        self.db = db

    def barcode_taken(self, barcode: Optional[str], exclude_id: Optional[int] = None) -> bool:
        """True when another product already carries this barcode"""
        if not barcode:
            return False
        query = self.db.query(Product.id).filter(Product.barcode == barcode)
        if exclude_id is not None:
            query = query.filter(Product.id != exclude_id)
        return query.first() is not None

    def add(self, data: dict) -> int:
        product = Product(
            name=data['name'],
            price=data['price'],
            stock=data.get('stock', 1),
            detail=data.get('detail') or "",
            barcode=data.get('barcode'),
        )
        self.db.add(product)
        self.db.flush()  # assigns product.id
        return product.id

    def update(self, data: dict) -> int:
        """Overwrite every editable column; returns affected row count"""
        return self.db.query(Product).filter(Product.id == data['id']).update(
            {
                Product.name: data['name'],
                Product.price: data['price'],
                Product.stock: data['stock'],
                Product.detail: data.get('detail') or "",
                Product.barcode: data.get('barcode'),
            },
            synchronize_session=False,
        )

    def delete(self, product_id: int) -> int:
        return self.db.query(Product).filter(Product.id == product_id).delete(
            synchronize_session=False
        )

    def get_by_id(self, product_id: int) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def get_all(self) -> List[Product]:
        """Every product, newest id first"""
        return self.db.query(Product).order_by(Product.id.desc()).all()

    def search(self, term: str, offset: int, limit: int) -> Tuple[List[Product], int]:
        """
        Case-insensitive substring match on name OR barcode.

        Returns the requested window (newest id first) and the total number
        of matching rows.
        """
        criteria = []
        term = (term or "").strip()
        if term:
            pattern = _like_pattern(term)
            criteria.append(
                or_(
                    Product.name.ilike(pattern, escape="\\"),
                    Product.barcode.ilike(pattern, escape="\\"),
                )
            )

        total = self.db.execute(
            select(func.count(Product.id)).where(*criteria)
        ).scalar_one()

        items = self.db.execute(
            select(Product)
            .where(*criteria)
            .order_by(Product.id.desc())
            .limit(limit)
            .offset(offset)
        ).scalars().all()

        return list(items), total
