from .unit_of_work import UnitOfWork
from .erp_gateway import ErpGateway, ErpDeliveryResult
from .erp_sync_history import ErpSyncHistoryStore

__all__ = [
    "UnitOfWork",
    "ErpGateway",
    "ErpDeliveryResult",
    "ErpSyncHistoryStore",
]
