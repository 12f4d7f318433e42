# app/modules/users/repository.py
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.shared.database.models import User, Role, Entry, Exit, Movement

class UserRepository:

    def __init__(self, db: Session):
        self.db = db

    # ==================== USUARIOS ====================

    def list_query(self, username: Optional[str] = None, email: Optional[str] = None):
        query = self.db.query(User).options(joinedload(User.role))
        if username:
            query = query.filter(User.username.ilike(f"%{username}%"))
        if email:
            query = query.filter(User.email.ilike(f"%{email}%"))
        return query.order_by(User.username)

    def get_all(self) -> List[User]:
        return self.list_query().all()

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).options(joinedload(User.role)).filter(User.id == user_id).first()

    def username_taken(self, username: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(User.id).filter(func.lower(User.username) == username.lower())
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        return query.first() is not None

    def email_taken(self, email: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(User.id).filter(func.lower(User.email) == email.lower())
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        return query.first() is not None

    def has_activity(self, user_id: int) -> bool:
        """Si el usuario registró alguna entrada, salida o movimiento"""
        return any(
            self.db.query(model.id).filter(model.user_id == user_id).first() is not None
            for model in (Entry, Exit, Movement)
        )

    def create_user(self, user_data: dict) -> User:
        user = User(**user_data)
        self.db.add(user)
        self.db.flush()
        return user

    def delete(self, instance) -> None:
        self.db.delete(instance)
        self.db.flush()

    # ==================== ROLES ====================

    def get_roles_with_counts(self):
        return self.db.query(Role, func.count(User.id))\
            .outerjoin(User, User.role_id == Role.id)\
            .group_by(Role.id)\
            .order_by(Role.name)\
            .all()

    def get_role(self, role_id: int) -> Optional[Role]:
        return self.db.query(Role).filter(Role.id == role_id).first()

    def role_name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(Role.id).filter(func.lower(Role.name) == name.lower())
        if exclude_id is not None:
            query = query.filter(Role.id != exclude_id)
        return query.first() is not None

    def count_users_with_role(self, role_id: int) -> int:
        return self.db.query(func.count(User.id)).filter(User.role_id == role_id).scalar() or 0

    def create_role(self, name: str) -> Role:
        role = Role(name=name)
        self.db.add(role)
        self.db.flush()
        return role
