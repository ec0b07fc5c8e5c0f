"""
Admin model for database operations.
"""

from sqlalchemy import Column, Integer, String
from pricebook.core.database import Base


class Admin(Base):
    """
    Admin users allowed to manage prices.

    Table: admins
    """
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)

    def __repr__(self):
        return f"<Admin(id={self.id}, name='{self.name}', email='{self.email}')>"
