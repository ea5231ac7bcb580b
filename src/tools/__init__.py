"""Built-in views; importing this package registers them."""

from tools.analytics import summary  # noqa: F401
from tools.budget import overview, progress  # noqa: F401
from tools.ledger import balance_trend, category_breakdown, monthly_series, totals, transactions  # noqa: F401
