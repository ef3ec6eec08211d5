# =============================================================================
# Bulk Delete Executor
# =============================================================================
#
# Deletes a set of records in one statement and reports how many actually
# went away.
#
# - Input must be a non-empty collection of ids. Anything else raises
#   EmptyInputError before the store is touched.
# - Ids that match nothing are ignored, including ones that are not valid
#   ids at all. Partial success is the normal case, not a failure.
# - Duplicates collapse; [1, 1, "1"] deletes record 1 once.
# - One DELETE ... WHERE id IN (...) statement. There is no ordering across
#   ids, so abandoning the request mid-way leaves the store consistent.
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from app.errors import EmptyInputError
from app.services.record_store import RecordStore, parse_record_id

logger = logging.getLogger(__name__)

_COLLECTION_TYPES = (set, frozenset, list, tuple)


async def delete_many(store: RecordStore, ids: Any) -> int:
    if not isinstance(ids, _COLLECTION_TYPES) or isinstance(ids, Mapping):
        raise EmptyInputError()
    if len(ids) == 0:
        raise EmptyInputError()

    wanted = normalize_ids(ids)
    if not wanted:
        # Non-empty input, but nothing in it could name a record
        logger.info("Bulk delete: %d id(s) given, none well-formed", len(ids))
        return 0

    deleted = await store.delete_many(wanted)
    logger.info(
        "Bulk delete: %d id(s) requested, %d record(s) deleted",
        len(wanted), deleted,
    )
    return deleted


def normalize_ids(ids: Any) -> set[int]:
    """Keep ids that can name a stored record; drop everything else."""
    result: set[int] = set()
    for raw in ids:
        record_id = parse_record_id(raw)
        if record_id is not None:
            result.add(record_id)
    return result
