from abc import ABC, abstractmethod


class TextGeneratorPort(ABC):
    @abstractmethod
    def write_slot_proposal(
        self,
        business_name: str,
        slots_text: str,
        proposed: str,
        history: list[dict[str, str]],
    ) -> str:
        """
        Phrase the message that offers one appointment slot.

        Args:
            business_name: Name used in the greeting
            slots_text: Day-grouped rendering of all free slots
            proposed: Human-readable label of the slot to offer
            history: Conversation so far, oldest first, ``{"role", "content"}`` dicts

        Returns:
            Non-empty reply text.

        Raises:
            LLMUpstreamError: provider failure or timeout
            LLMContractError: provider returned nothing usable
        """
        raise NotImplementedError
