"""
Load canonical video records with upsert logic (idempotency)
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.dialects import postgresql, sqlite
from models.base import ConflictPolicy, WriteGranularity
from models.video import TrendingVideo
from schemas.video import CanonicalVideoRecord
from core.exceptions import PersistenceError
import logging

logger = logging.getLogger(__name__)

INSERT_CONSTRUCTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


@dataclass
class LoadResult:
    """Outcome of one loader call"""
    inserted: int = 0
    failed: List[Tuple[str, PersistenceError]] = field(default_factory=list)


class VideoLoader:
    """
    Upsert canonical records into trending_videos keyed on external_id.

    Conflict policy:
    - INSERT_IF_ABSENT: ON CONFLICT DO NOTHING, the first-seen row wins
    - UPSERT_OVERWRITE: ON CONFLICT DO UPDATE of the mutable fields

    Granularity:
    - PER_ITEM: one statement and commit per record; a failed record is
      rolled back and reported, the rest continue
    - BULK: one statement for the whole call; a failure rolls the call back
      and raises PersistenceError

    A record the datastore accepts counts as inserted, including a
    conflict that the policy resolves as a no-op.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        conflict_policy: ConflictPolicy = ConflictPolicy.INSERT_IF_ABSENT,
        granularity: WriteGranularity = WriteGranularity.PER_ITEM,
        dialect: Optional[str] = None
    ):
        self.db = db_session
        self.conflict_policy = conflict_policy
        self.granularity = granularity
        self.dialect = dialect or db_session.get_bind().dialect.name

        if self.dialect not in INSERT_CONSTRUCTS:
            raise ValueError(f"Upserts are not supported for dialect {self.dialect!r}")

    async def load(self, records: List[CanonicalVideoRecord]) -> LoadResult:
        """
        Load records with the configured policy and granularity.

        Raises:
            PersistenceError: BULK granularity only, when the statement fails
        """
        if not records:
            return LoadResult()

        if self.granularity == WriteGranularity.BULK:
            return await self._load_bulk(records)
        return await self._load_per_item(records)

    async def _load_per_item(self, records: List[CanonicalVideoRecord]) -> LoadResult:
        result = LoadResult()

        for record in records:
            try:
                await self.db.execute(self._upsert_statement([self._to_row(record)]))
                await self.db.commit()
                result.inserted += 1
            except Exception as e:
                await self.db.rollback()
                error = PersistenceError(
                    f"Failed to upsert video {record.external_id}",
                    context={
                        "operation": "UPSERT",
                        "table_name": TrendingVideo.__tablename__,
                        "external_id": record.external_id
                    },
                    original_exception=e
                )
                logger.error(f"Error upserting video {record.external_id}: {str(e)}")
                result.failed.append((record.external_id, error))

        logger.info(
            f"Upserted {result.inserted} videos individually "
            f"({len(result.failed)} failed, policy={self.conflict_policy.value})"
        )
        return result

    async def _load_bulk(self, records: List[CanonicalVideoRecord]) -> LoadResult:
        # A single ON CONFLICT statement cannot touch the same key twice
        rows_by_id: Dict[str, Dict[str, Any]] = {}
        for record in records:
            rows_by_id[record.external_id] = self._to_row(record)
        rows = list(rows_by_id.values())

        try:
            await self.db.execute(self._upsert_statement(rows))
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            raise PersistenceError(
                "Bulk upsert failed",
                context={
                    "operation": "UPSERT",
                    "table_name": TrendingVideo.__tablename__,
                    "records": len(rows)
                },
                original_exception=e
            )

        logger.info(f"Bulk upserted {len(records)} videos (policy={self.conflict_policy.value})")
        return LoadResult(inserted=len(records))

    def _upsert_statement(self, rows: List[Dict[str, Any]]):
        insert = INSERT_CONSTRUCTS[self.dialect]
        stmt = insert(TrendingVideo).values(rows)

        if self.conflict_policy == ConflictPolicy.UPSERT_OVERWRITE:
            return stmt.on_conflict_do_update(
                index_elements=["external_id"],
                set_={name: stmt.excluded[name] for name in TrendingVideo.MUTABLE_FIELDS}
            )
        return stmt.on_conflict_do_nothing(index_elements=["external_id"])

    @staticmethod
    def _to_row(record: CanonicalVideoRecord) -> Dict[str, Any]:
        return record.model_dump()
