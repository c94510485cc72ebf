from fleetdesk.models.vehicle import Vehicle
from fleetdesk.models.policy import InsurancePolicy

__all__ = ["Vehicle", "InsurancePolicy"]
