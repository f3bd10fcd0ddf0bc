"""
Airport reference rows, seeded from the static directory at startup.
"""

from sqlalchemy import Column, String

from onboard.db.base import Base


class Airport(Base):
    __tablename__ = "airports"

    code = Column(String(3), primary_key=True)
    name = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    country = Column(String(100), nullable=False)
    region = Column(String(50), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Airport(code={self.code}, city={self.city})>"
