from .unit_of_work import SqlAlchemyUnitOfWork
from .erp_gateway import (
    SimulatedErpGateway,
    HttpErpGateway,
    create_erp_gateway,
)
from .erp_sync_history import InMemoryErpSyncHistoryStore

__all__ = [
    "SqlAlchemyUnitOfWork",
    "SimulatedErpGateway",
    "HttpErpGateway",
    "create_erp_gateway",
    "InMemoryErpSyncHistoryStore",
]
