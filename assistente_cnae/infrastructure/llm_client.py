# assistente_cnae/infrastructure/llm_client.py
#
# Completion client for the chat pipeline.
#
# Design decisions:
#   - Groq exposes an OpenAI-compatible API, so the official openai SDK is used
#     with base_url pointing at Groq. Swapping providers is a config change.
#   - Every failure mode (HTTP error, timeout, empty choice) surfaces as ErroLLM;
#     callers decide the fallback. The client never returns untrusted content
#     as an error message.
#   - The output is untrusted text: schema validation and pattern scanning
#     happen in the application layer.
from __future__ import annotations

from typing import Protocol

import openai
from openai import AsyncOpenAI

from assistente_cnae.domain.erros import ErroLLM

Mensagem = dict[str, str]


class CompletionClient(Protocol):
    async def completar(
        self,
        mensagens: list[Mensagem],
        *,
        temperature: float,
        max_tokens: int,
        json_mode: bool = False,
    ) -> str: ...


class GroqCompletionClient:
    def __init__(self, client: AsyncOpenAI, model: str) -> None:
        self._client = client
        self._model = model

    @classmethod
    def criar(
        cls, api_key: str, base_url: str, model: str, timeout: float = 30.0
    ) -> GroqCompletionClient:
        client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=1)
        return cls(client, model)

    async def completar(
        self,
        mensagens: list[Mensagem],
        *,
        temperature: float,
        max_tokens: int,
        json_mode: bool = False,
    ) -> str:
        extra: dict[str, object] = {}
        if json_mode:
            extra["response_format"] = {"type": "json_object"}
        try:
            completion = await self._client.chat.completions.create(
                model=self._model,
                messages=mensagens,  # type: ignore[arg-type]
                temperature=temperature,
                max_tokens=max_tokens,
                **extra,  # type: ignore[arg-type]
            )
        except openai.OpenAIError as err:
            raise ErroLLM(f"Falha na chamada ao LLM: {err.__class__.__name__}") from err

        if not completion.choices:
            raise ErroLLM("LLM retornou resposta sem choices")
        conteudo = completion.choices[0].message.content
        if not conteudo or not conteudo.strip():
            raise ErroLLM("LLM retornou conteudo vazio")
        return conteudo.strip()

    async def fechar(self) -> None:
        await self._client.close()
