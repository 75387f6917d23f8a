from abc import ABC, abstractmethod


class MessagePlatformPort(ABC):
    @abstractmethod
    def send_text(self, correspondent_id: str, text: str) -> None:
        """Deliver one text message. Raises UpstreamUnavailable on failure."""
        raise NotImplementedError
