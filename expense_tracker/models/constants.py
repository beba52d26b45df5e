"""Domain constants shared by validation rules and the store.

Kept as plain module constants; the limits mirror the field constraints the
boundary advertises in its request models.
"""

from decimal import Decimal
from typing import FrozenSet

DEFAULT_CATEGORY_COLOR = "#808080"
CATEGORY_NAME_MIN = 2
CATEGORY_NAME_MAX = 50
CATEGORY_DESCRIPTION_MAX = 300
HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"

MAX_EXPENSE_AMOUNT = Decimal("1000000")
EXPENSE_DESCRIPTION_MIN = 3
EXPENSE_DESCRIPTION_MAX = 200
# Characters rejected in expense descriptions
FORBIDDEN_DESCRIPTION_CHARS: FrozenSet[str] = frozenset("<>{}")

MAX_BUDGET_LIMIT = Decimal("1000000000")
# Longest window for the daily trend report (ten years)
MAX_TREND_DAYS = 3650
