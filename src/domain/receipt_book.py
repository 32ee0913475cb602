"""Receipt Book Domain Entity

One row per receipt book. Batch processing locks this row so that
invoice numbers of a book are allocated by one transaction at a time.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import String
from src.domain.base import BaseModel, IdType


class ReceiptBook(BaseModel, table=True):
    __tablename__ = "receipt_books"

    id: int = Field(
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique receipt book identifier (auto-increment)"
    )

    code: str = Field(
        sa_column=Column(String(50), nullable=False, unique=True),
        description="Receipt book code used as invoice number prefix"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Creation timestamp"
    )

    last_used_at: Optional[datetime] = Field(
        default=None,
        description="Last time a batch allocated numbers from this book"
    )
