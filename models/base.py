from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()


# ============================================================================
# ENUMS
# ============================================================================

class FetchStrategy(str, enum.Enum):
    """How trending candidates are acquired"""
    BULK_EXPORT = "bulk_export"
    DIRECT_QUERY = "direct_query"
    CLIENT_LIBRARY = "client_library"


class ConflictPolicy(str, enum.Enum):
    """What an upsert does when the external_id already exists"""
    INSERT_IF_ABSENT = "insert_if_absent"
    UPSERT_OVERWRITE = "upsert_overwrite"


class WriteGranularity(str, enum.Enum):
    """How records are written to the datastore"""
    PER_ITEM = "per_item"
    BULK = "bulk"


class RunStatus(str, enum.Enum):
    """Ingestion run status"""
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"
