from abc import ABC, abstractmethod

from app.domain.entities.session import Session


class SessionStorePort(ABC):
    @abstractmethod
    def get(self, correspondent_id: str) -> Session | None:
        raise NotImplementedError

    @abstractmethod
    def put(self, correspondent_id: str, session: Session) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, correspondent_id: str) -> None:
        raise NotImplementedError
