"""Internal constants shared across the library."""

# ------------------------------------------------------------------
# Car year validation
# ------------------------------------------------------------------

# Benz Patent-Motorwagen.
FIRST_CAR_YEAR = 1886
# Next year's models are sold before the calendar catches up.
FUTURE_YEAR_ALLOWANCE = 1

# ------------------------------------------------------------------
# HTTP API
# ------------------------------------------------------------------

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080
BASE_URL = "http://localhost:8080"
API_VERSION = "v1"
USER_AGENT = "carfuel-cli/1.0"

CARS_PATH = "/api/cars"
FUEL_STATS_QUERY_PATH = "/servlet/fuel-stats"
