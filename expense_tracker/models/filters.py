from __future__ import annotations
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class ExpenseFilter(BaseModel):
    """Optional filter criteria; every field left as None imposes no constraint."""

    category_id: Optional[int] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    keyword: Optional[str] = None
