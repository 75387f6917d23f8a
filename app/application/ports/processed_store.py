from abc import ABC, abstractmethod


class ProcessedMessageStorePort(ABC):
    @abstractmethod
    def add_if_absent(self, key: str, seen_at: float) -> bool:
        """
        Record key as processed.
        Returns False if the key was already recorded (and has not expired).
        Check and insert are one atomic step.
        """
        raise NotImplementedError

    @abstractmethod
    def contains(self, key: str, now_ts: float) -> bool:
        raise NotImplementedError

    @abstractmethod
    def purge_expired(self, now_ts: float) -> int:
        """Drop expired records. Returns count removed."""
        raise NotImplementedError
