# assistente_cnae/application/dtos/chat_dto.py
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

TAMANHO_MAXIMO_PERGUNTA = 500
TAMANHO_MAXIMO_HISTORICO = 6


class MensagemHistoricoDTO(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    role: Literal["user", "assistant"]
    content: str = Field(min_length=1, max_length=TAMANHO_MAXIMO_PERGUNTA)


class ChatRequestDTO(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    question: str = Field(min_length=1, max_length=TAMANHO_MAXIMO_PERGUNTA)
    history: list[MensagemHistoricoDTO] = Field(
        default_factory=list, max_length=TAMANHO_MAXIMO_HISTORICO
    )


class ChatResponseDTO(BaseModel):
    """Corpo de sucesso. Campos ausentes nao sao serializados."""

    model_config = ConfigDict(populate_by_name=True)

    response: str
    is_direct: bool | None = Field(default=None, alias="isDirect")
    query_id: str | None = Field(default=None, alias="queryId")
    params: dict[str, Any] | None = None
    success: bool | None = None
    cached: bool | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class DetalheErroDTO(BaseModel):
    field: str
    message: str


class ErroDTO(BaseModel):
    error: str
    code: Literal[
        "VALIDATION_ERROR",
        "RATE_LIMITED",
        "PAYLOAD_TOO_LARGE",
        "CONFIG_ERROR",
        "INTERNAL_ERROR",
    ]
    details: list[DetalheErroDTO] | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
