"""
Core constants and limits.

Defines system-wide defaults and resource limits.
"""

# Order Limits
MIN_ORDER_QUANTITY = 1  # Whole shares only
MAX_ORDER_QUANTITY = 1_000_000  # Maximum shares in a single order

# Account Limits
ACCOUNT_NAME_MAX_CHARS = 32
ACCOUNT_DESCRIPTION_MAX_CHARS = 256

# Polling
DEFAULT_POLL_INTERVAL_SECONDS = 60  # Open-market poll cadence
DEFAULT_QUOTE_TIMEOUT_SECONDS = 10.0  # Bound on a single quote retrieval
MIN_WAKEUP_DELAY_SECONDS = 1.0  # Never arm a timer in the past

# Snapshots
DEFAULT_SNAPSHOT_GRANULARITY_SECONDS = 60  # Snapshot timestamps truncate to this boundary
DEFAULT_SNAPSHOT_RETENTION_DAYS = 365
DEFAULT_DAILY_SNAPSHOT_DAYS = 1

# Market Session
DEFAULT_MARKET_CALENDAR = "XNYS"  # exchange_calendars code
MARKET_CALENDAR_START = "2000-01-01"
MARKET_CALENDAR_YEARS_AHEAD = 5
POLL_PADDING_MINUTES = 15  # Quotes keep polling this long after the close

# Strategies
DOGS_OF_THE_DOW_COUNT = 10
DOW_SYMBOLS = (
    "AAPL", "AMGN", "AMZN", "AXP", "BA", "CAT", "CRM", "CSCO", "CVX", "DIS",
    "GS", "HD", "HON", "IBM", "JNJ", "JPM", "KO", "MCD", "MMM", "MRK",
    "MSFT", "NKE", "NVDA", "PG", "SHW", "TRV", "UNH", "V", "VZ", "WMT",
)
TRIPLE_MOMENTUM_SYMBOLS = ("SPY", "QQQ", "IWM")
