# =============================================================================
# Person Records Service
# =============================================================================
# Stores person records and serves paginated, filterable, sortable queries,
# bulk delete, and CSV export over an HTTP API.
#
# Package structure:
#   app/
#   ├── api/          → FastAPI routers, dependencies, error handlers,
#   │                    request logging middleware
#   ├── db/           → Database engine, session, and ORM models
#   ├── models/       → Pydantic V2 request/response schemas
#   ├── services/     → Query engine, filter builder, pager, bulk delete,
#   │                    CSV export, record CRUD, presets, store adapter
#   ├── client.py     → httpx client for the HTTP API
#   └── main.py       → FastAPI application factory
# =============================================================================
