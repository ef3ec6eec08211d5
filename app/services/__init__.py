# =============================================================================
# Services Package — Business Logic
# =============================================================================
# Contains the core business logic, separated from API handlers:
#   - sorting.py: Closed set of sortable fields + direction parsing
#   - filters.py: Search term / status / gender → one SQL predicate
#   - pager.py: Page window and metadata from a total count
#   - record_store.py: RecordStore protocol + SQLAlchemy implementation
#   - query_engine.py: Filter + sort + page in one retrieval
#   - bulk_delete.py: Delete by id set, counting only real deletions
#   - csv_export.py: Streams a filtered, sorted result as CSV
#   - records.py: Single-record CRUD with email uniqueness
#   - presets.py: Named, client-side saved queries
# =============================================================================
