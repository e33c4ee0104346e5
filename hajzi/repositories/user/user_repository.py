"""User repository."""

from typing import Optional

from sqlalchemy.orm import Session

from hajzi.models.user.user import User
from hajzi.repositories.base.base_repository import BaseRepository


class UserRepository(BaseRepository[User]):

    def __init__(self, db: Session):
        super().__init__(User, db)

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.strip().lower()).first()
