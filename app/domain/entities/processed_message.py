from dataclasses import dataclass


@dataclass(frozen=True)
class ProcessedMessageRecord:
    key: str
    seen_at: float
