"""
Attribute definition model
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON, Enum as SQLEnum
from sqlalchemy.sql import func
from catalog.database import Base
from enum import Enum


class DataType(str, Enum):
    TEXT = "TEXT"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"
    ENUM = "ENUM"
    DATE = "DATE"
    DATETIME = "DATETIME"


class Attribute(Base):
    """A typed attribute that categories can bind and products can carry values for"""
    __tablename__ = "attributes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False, index=True)
    data_type = Column(SQLEnum(DataType, native_enum=False), nullable=False)

    # Constraints
    allowed_values = Column(JSON, nullable=True)  # ENUM domain, e.g. ["S", "M", "L"]
    validation_regex = Column(String, nullable=True)

    # Status
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
