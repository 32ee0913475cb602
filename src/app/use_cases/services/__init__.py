"""Service use cases"""
from .create_service import CreateService
from .get_service import GetService
from .list_services import ListServices, ListServicesByStatus, ListServicesByCustomer
from .update_service import UpdateService, DeleteService
from .send_to_billing import SendServicesToBilling
from .dtos import (
    CreateServiceCommandDTO,
    UpdateServiceCommandDTO,
    ServiceDTO,
    ServiceFilterDTO,
    PaginatedServicesDTO,
    SendToBillingCommandDTO,
    FailedServiceDTO,
    SendToBillingResultDTO,
)

__all__ = [
    "CreateService",
    "GetService",
    "ListServices",
    "ListServicesByStatus",
    "ListServicesByCustomer",
    "UpdateService",
    "DeleteService",
    "SendServicesToBilling",
    "CreateServiceCommandDTO",
    "UpdateServiceCommandDTO",
    "ServiceDTO",
    "ServiceFilterDTO",
    "PaginatedServicesDTO",
    "SendToBillingCommandDTO",
    "FailedServiceDTO",
    "SendToBillingResultDTO",
]
