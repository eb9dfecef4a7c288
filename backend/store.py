import threading
import uuid
from typing import Dict, List, Optional, Tuple

from schemas import Dataset


class DatasetStore:
    """In-memory registry of uploaded datasets, owned by one application.

    Datasets are immutable, so readers share them without copying. Nothing
    is written to disk; restarting the process forgets every upload.
    """

    def __init__(self):
        self._datasets: Dict[str, Dataset] = {}
        self._lock = threading.Lock()

    def add(self, dataset: Dataset) -> str:
        dataset_id = uuid.uuid4().hex
        with self._lock:
            self._datasets[dataset_id] = dataset
        return dataset_id

    def get(self, dataset_id: str) -> Optional[Dataset]:
        with self._lock:
            return self._datasets.get(dataset_id)

    def remove(self, dataset_id: str) -> bool:
        with self._lock:
            return self._datasets.pop(dataset_id, None) is not None

    def items(self) -> List[Tuple[str, Dataset]]:
        with self._lock:
            return list(self._datasets.items())

    def __len__(self) -> int:
        with self._lock:
            return len(self._datasets)
