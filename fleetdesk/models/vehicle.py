from sqlalchemy import Column, Integer, String

from fleetdesk.database import Base, SoftDeleteMixin


class Vehicle(SoftDeleteMixin, Base):
    __tablename__ = "vehicle"

    plate = Column("dominio", String(16), nullable=False)
    make = Column("marca", String(100), nullable=False)
    model = Column("modelo", String(100), nullable=False)
    year = Column("anio", Integer, nullable=False)
    chassis_number = Column("nroChasis", String(100), nullable=False)
