from sqlalchemy import Column, Date, ForeignKey, Integer, String

from fleetdesk.database import Base, SoftDeleteMixin


class InsurancePolicy(SoftDeleteMixin, Base):
    __tablename__ = "segurovehicular"

    insurer = Column("aseguradora", String(100), nullable=False)
    policy_number = Column("nroPoliza", String(50), nullable=False)
    coverage = Column("cobertura", String(30), nullable=False)
    expiry = Column("vencimiento", Date, nullable=False)
    vehicle_id = Column("idVehiculo", Integer, ForeignKey("vehicle.id"), nullable=False)
