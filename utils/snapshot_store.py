from typing import Dict, Optional
import logging

from models.job import JobSnapshot


class SnapshotStore:
    """
    Latest job snapshot per browser tab

    A newer snapshot replaces the old one outright. Entries only go away
    through evict(), which the caller invokes when the tab closes.
    """

    def __init__(self):
        self._snapshots: Dict[int, JobSnapshot] = {}

    def put(self, tab_id: int, job: JobSnapshot) -> None:
        self._snapshots[tab_id] = job
        logging.debug(f"Stored snapshot for tab {tab_id}: {job.url}")

    def get(self, tab_id: int) -> Optional[JobSnapshot]:
        return self._snapshots.get(tab_id)

    def evict(self, tab_id: int) -> bool:
        """Forget the tab; returns whether anything was stored for it"""
        removed = self._snapshots.pop(tab_id, None) is not None
        if removed:
            logging.debug(f"Evicted snapshot for tab {tab_id}")
        return removed

    def clear(self) -> None:
        self._snapshots.clear()

    def __len__(self) -> int:
        return len(self._snapshots)
