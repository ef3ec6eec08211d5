# =============================================================================
# Models Package — Pydantic V2 Schemas
# =============================================================================
# Request/response schemas for the API, kept SEPARATE from the database
# models (app/db/models.py) so the public contract and the table layout can
# evolve independently.
# =============================================================================
