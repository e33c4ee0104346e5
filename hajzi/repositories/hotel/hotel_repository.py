"""Hotel repository."""

from typing import List, Optional

from sqlalchemy.orm import Session

from hajzi.models.hotel.hotel import Hotel
from hajzi.repositories.base.base_repository import BaseRepository


class HotelRepository(BaseRepository[Hotel]):

    def __init__(self, db: Session):
        super().__init__(Hotel, db)

    def find_ids_by_city(self, city_id: str) -> List[str]:
        """Ids of every hotel located in a city."""
        rows = self.db.query(Hotel.id).filter(Hotel.city_id == city_id).all()
        return [row.id for row in rows]

    def find_by_owner_name_city(self, owner_id: str, name: str, city_id: str) -> Optional[Hotel]:
        return (
            self.db.query(Hotel)
            .filter(
                Hotel.owner_id == owner_id,
                Hotel.name == name.strip(),
                Hotel.city_id == city_id,
            )
            .first()
        )
