from __future__ import annotations

from app.application.ports.llm import TextGeneratorPort


class MockLLM(TextGeneratorPort):
    def write_slot_proposal(
        self,
        business_name: str,
        slots_text: str,
        proposed: str,
        history: list[dict[str, str]],
    ) -> str:
        greeting = f"Hello from {business_name}!" if business_name else "Hello!"
        return f"{greeting} How about {proposed}? Reply to confirm."
