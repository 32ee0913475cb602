"""Background workers for the billing service"""
from .billing_batch_worker import BillingBatchWorker

__all__ = ["BillingBatchWorker"]
