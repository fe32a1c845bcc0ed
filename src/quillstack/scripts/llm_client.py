"""Shared LLM client for the single configured remote classification provider."""

from __future__ import annotations

import json
import logging
import re
import time
from typing import TYPE_CHECKING, Any

from anthropic import Anthropic
from openai import OpenAI
from openai.types.chat import ChatCompletionMessageParam

from quillstack.config import Settings, get_settings

if TYPE_CHECKING:
    from quillstack.stores.cost import CostLedger

logger = logging.getLogger(__name__)

_CODE_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


class LLMClient:
    """LLM client issuing exactly one request per call to Anthropic or OpenAI.

    There is no retry and no provider fallback: a failed call raises and the
    caller degrades to its own default.
    """

    def __init__(
        self, cost_ledger: CostLedger | None = None, settings: Settings | None = None
    ) -> None:
        self._anthropic_client: Anthropic | None = None
        self._openai_client: OpenAI | None = None
        self._settings = settings or get_settings()
        self._cost_ledger = cost_ledger
        self.provider: str = self._settings.llm_provider
        self.model_name: str = (
            self._settings.openai_model
            if self.provider == "openai"
            else self._settings.classifier_model
        )

    @property
    def anthropic_client(self) -> Anthropic | None:
        """Lazy-load Anthropic client (None if no API key)."""
        if self._anthropic_client is None and self._settings.anthropic_api_key:
            self._anthropic_client = Anthropic(
                api_key=self._settings.anthropic_api_key,
                timeout=self._settings.llm_timeout_seconds,
                max_retries=0,
            )
        return self._anthropic_client

    @property
    def openai_client(self) -> OpenAI | None:
        """Lazy-load OpenAI client (None if no API key)."""
        if self._openai_client is None and self._settings.openai_api_key:
            self._openai_client = OpenAI(
                api_key=self._settings.openai_api_key,
                timeout=self._settings.llm_timeout_seconds,
                max_retries=0,
            )
        return self._openai_client

    def has_credential(self) -> bool:
        return self._settings.credential_configured

    def chat(self, system_prompt: str, user_prompt: str, max_tokens: int = 10) -> str:
        """Send one chat completion to the configured provider.

        Returns the assistant's response text. Raises RuntimeError on any failure.
        """
        start = time.perf_counter()
        if self.provider == "openai":
            client = self.openai_client
            if client is None:
                raise RuntimeError("OpenAI API key not configured")
            messages: list[ChatCompletionMessageParam] = [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ]
            try:
                oai_response = client.chat.completions.create(
                    model=self.model_name,
                    messages=messages,
                    temperature=0.0,
                    max_tokens=max_tokens,
                )
                content = oai_response.choices[0].message.content or ""
                input_tok = oai_response.usage.prompt_tokens if oai_response.usage else 0
                output_tok = oai_response.usage.completion_tokens if oai_response.usage else 0
            except Exception as e:
                logger.warning("OpenAI request failed", exc_info=True)
                raise RuntimeError(f"OpenAI request failed: {e}") from e
        else:
            anthropic = self.anthropic_client
            if anthropic is None:
                raise RuntimeError("Anthropic API key not configured")
            try:
                response = anthropic.messages.create(
                    model=self.model_name,
                    max_tokens=max_tokens,
                    temperature=0.0,
                    system=system_prompt,
                    messages=[{"role": "user", "content": user_prompt}],
                )
                content = response.content[0].text  # type: ignore[union-attr]
                input_tok = response.usage.input_tokens
                output_tok = response.usage.output_tokens
            except Exception as e:
                logger.warning("Anthropic request failed", exc_info=True)
                raise RuntimeError(f"Anthropic request failed: {e}") from e

        logger.info(
            "%s (%s) responded in %.0fms",
            self.provider,
            self.model_name,
            (time.perf_counter() - start) * 1000,
        )
        if self._cost_ledger is not None:
            self._cost_ledger.record(input_tok, output_tok)
        return content

    def chat_json(
        self, system_prompt: str, user_prompt: str, max_tokens: int = 1000
    ) -> dict[str, Any]:
        """Send a chat completion and parse the response as JSON.

        The system prompt should instruct the model to return valid JSON.
        """
        raw = self.chat(system_prompt, user_prompt, max_tokens=max_tokens)

        result: dict[str, Any] = json.loads(strip_code_fences(raw))
        return result


def strip_code_fences(raw: str) -> str:
    """Return the body of the first markdown code fence in the reply.

    Models sometimes add a sentence before or after the fenced block, so the
    fence is searched for anywhere. Without a fence the trimmed reply is
    returned as-is.
    """
    match = _CODE_FENCE_RE.search(raw)
    if match:
        return match.group(1).strip()
    return raw.strip()
