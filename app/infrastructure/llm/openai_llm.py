from __future__ import annotations

from openai import OpenAI

from app.application.exceptions import LLMContractError, LLMUpstreamError
from app.application.ports.llm import TextGeneratorPort
from app.core.config import settings
from app.infrastructure.llm.prompts import build_proposal_prompt


class OpenAILLM(TextGeneratorPort):
    """
    OpenAI-backed adapter implementing TextGeneratorPort.

    Contract guarantees:
    - write_slot_proposal returns non-empty text
    - Raises:
        LLMUpstreamError: networking/provider failures and timeouts
        LLMContractError: empty completion
    """

    def __init__(self, client: OpenAI | None = None) -> None:
        self.client = client or OpenAI(
            api_key=settings.OPENAI_API_KEY,
            timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
            max_retries=0,
        )

    def write_slot_proposal(
        self,
        business_name: str,
        slots_text: str,
        proposed: str,
        history: list[dict[str, str]],
    ) -> str:
        system_prompt = build_proposal_prompt(business_name=business_name, slots_text=slots_text, proposed=proposed)
        messages = [{"role": "system", "content": system_prompt}]
        messages += [{"role": m["role"], "content": m["content"]} for m in history]
        return self._call_text(
            model=settings.OPENAI_MODEL_REPLY,
            messages=messages,
            temperature=settings.OPENAI_TEMPERATURE_REPLY,
        )

    def _call_text(self, model: str, messages: list[dict[str, str]], temperature: float) -> str:
        try:
            resp = self.client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
                max_tokens=300,
            )
        except Exception as e:
            raise LLMUpstreamError(f"OpenAI API error: {e}") from e

        content = (resp.choices[0].message.content or "").strip() if resp.choices else ""
        if not content:
            raise LLMContractError("LLM returned empty response text.")

        return content
