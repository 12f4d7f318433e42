# app/modules/movements/repository.py
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.shared.database.models import Movement, Package, User

class MovementRepository:

    def __init__(self, db: Session):
        self.db = db

    def list_query(self, username: Optional[str] = None, package: Optional[str] = None,
                   origin: Optional[str] = None, destination: Optional[str] = None):
        query = self.db.query(Movement)\
            .join(User, Movement.user_id == User.id)\
            .join(Package, Movement.package_id == Package.id)\
            .options(joinedload(Movement.user), joinedload(Movement.package))
        if username:
            query = query.filter(User.username.ilike(f"%{username}%"))
        if package:
            query = query.filter(Package.description.ilike(f"%{package}%"))
        # Ubicaciones: coincidencia exacta sin distinguir mayúsculas
        if origin:
            query = query.filter(func.lower(Movement.origin_location) == origin.lower())
        if destination:
            query = query.filter(func.lower(Movement.destination_location) == destination.lower())
        return query.order_by(Movement.date.desc(), Movement.id.desc())

    def get_all(self) -> List[Movement]:
        return self.list_query().all()

    def get_by_id(self, movement_id: int) -> Optional[Movement]:
        return self.db.query(Movement).options(
            joinedload(Movement.user),
            joinedload(Movement.package)
        ).filter(Movement.id == movement_id).first()

    def get_package(self, package_id: int) -> Optional[Package]:
        return self.db.query(Package).filter(Package.id == package_id).first()

    def user_exists(self, user_id: int) -> bool:
        return self.db.query(User.id).filter(User.id == user_id).first() is not None

    def distinct_locations(self, column) -> List[str]:
        rows = self.db.query(column).filter(column.isnot(None), column != "")\
            .distinct().order_by(column).all()
        return [value for (value,) in rows]

    def create(self, movement_data: dict) -> Movement:
        movement = Movement(**movement_data)
        self.db.add(movement)
        self.db.flush()
        return movement

    def delete(self, movement: Movement) -> None:
        self.db.delete(movement)
        self.db.flush()
