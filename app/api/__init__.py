# =============================================================================
# API Package — FastAPI Route Handlers
# =============================================================================
#   - users.py: list, search, export, bulk delete and CRUD for person records
#   - deps.py: per-request store / query engine / exporter dependencies
#   - errors.py: domain error → JSON envelope handlers
#   - logging_middleware.py: one log line per request
# =============================================================================
