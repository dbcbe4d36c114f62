"""
Deduplicate candidate video IDs and split them into lookup-sized batches
"""

from typing import Iterable, List, Optional


def deduplicate_ids(ids: Iterable[Optional[str]]) -> List[str]:
    """
    Collapse repeated video IDs.

    Blank and missing IDs are dropped. First-seen order is kept, although
    callers may only rely on uniqueness.
    """
    seen = set()
    unique_ids = []
    for video_id in ids:
        if not video_id:
            continue
        video_id = str(video_id).strip()
        if not video_id or video_id in seen:
            continue
        seen.add(video_id)
        unique_ids.append(video_id)
    return unique_ids


def partition(ids: List[str], batch_size: int) -> List[List[str]]:
    """
    Split IDs into ordered batches of at most batch_size.

    Yields ceil(len(ids) / batch_size) batches; only the last may be short.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")
    return [ids[i:i + batch_size] for i in range(0, len(ids), batch_size)]
