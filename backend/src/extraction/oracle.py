"""Async client for the Gemini vision model that reads packaging photos."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from db.config import OracleSettings, get_oracle_settings
from inspections.errors import ExtractionError

from .models import ExtractedAttributes

logger = logging.getLogger(__name__)


_DATA_URL_PREFIX = re.compile(r"^data:(image/[a-zA-Z0-9\-\+\.]+);base64,")
_CODE_FENCE = re.compile(r"```json\n?|```")

SYSTEM_INSTRUCTION = (
    "Retorne estritamente um JSON. Padronize moldagem para INJETADO/TERMOFORMADO e "
    "formato para REDONDO/QUADRADO/RETANGULAR/OVAL. Nunca use 'CILÍNDRICO'. "
    "Use 'N/I' para dados ausentes."
)

EXTRACTION_PROMPT = """VOCÊ É UM ANALISTA TÉCNICO DE EMBALAGENS PLÁSTICAS.
Extraia dados precisos destas fotos. Se só uma imagem for legível, use o que encontrar
e preencha "N/I" (Não Identificado) nos campos impossíveis de determinar.

MOLDAGEM: examine o fundo da embalagem.
- INJETADO: há um ponto central de injeção (pequena marca circular ou cicatriz).
- TERMOFORMADO: fundo liso, sem marca central, podendo ter marcas de vácuo nas bordas.

DADOS: razão social do fabricante do produto, todos os CNPJs, marca, descrição,
conteúdo (peso/volume), endereço, CEP, telefone, site, fabricante da embalagem,
moldagem (INJETADO ou TERMOFORMADO), formato (REDONDO/QUADRADO/RETANGULAR/OVAL),
tipo e modelo da embalagem."""

_STRING = {"type": "STRING"}

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "razaoSocial": _STRING,
        "cnpj": {"type": "ARRAY", "items": _STRING},
        "marca": _STRING,
        "descricaoProduto": _STRING,
        "conteudo": _STRING,
        "endereco": _STRING,
        "cep": _STRING,
        "telefone": _STRING,
        "site": _STRING,
        "fabricanteEmbalagem": _STRING,
        "moldagem": {
            "type": "STRING",
            "description": "INJETADO se houver ponto central, TERMOFORMADO se liso",
        },
        "formatoEmbalagem": _STRING,
        "tipoEmbalagem": _STRING,
        "modeloEmbalagem": _STRING,
    },
}


def prepare_image_part(photo: str) -> dict[str, Any]:
    """Turn a data URL (or bare base64 string) into an inline image part."""
    match = _DATA_URL_PREFIX.match(photo)
    mime_type = match.group(1) if match else "image/jpeg"
    data = photo.split(",", 1)[1] if "," in photo else photo
    return {"inline_data": {"mime_type": mime_type, "data": data}}


def parse_attributes(text: Optional[str]) -> ExtractedAttributes:
    """Validate the model's JSON text into a sanitized attribute bundle."""
    if not text or not text.strip():
        raise ExtractionError("the oracle returned no data")
    cleaned = _CODE_FENCE.sub("", text).strip()
    try:
        raw = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ExtractionError(f"the oracle returned malformed JSON ({exc.msg})") from exc
    if not isinstance(raw, dict):
        raise ExtractionError("the oracle returned an unexpected payload shape")
    try:
        attributes = ExtractedAttributes.model_validate(raw)
    except PydanticValidationError as exc:
        raise ExtractionError(f"the oracle returned invalid fields ({exc.error_count()} errors)") from exc
    if not attributes.has_usable_data():
        raise ExtractionError("no usable data could be read from the photos")
    return attributes


class ExtractionOracle:
    """Sends photos to the vision model and returns sanitized attributes.

    Any failure is raised as ``ExtractionError`` with a human-readable reason.
    Callers persist nothing in that case.
    """

    def __init__(
        self,
        settings: Optional[OracleSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings or get_oracle_settings()
        self._transport = transport
        self.endpoint = (
            f"{self.settings.base_url.rstrip('/')}/models/{self.settings.model}:generateContent"
        )

    def usable_photos(self, photos: list[str]) -> list[str]:
        return [p for p in photos if p and len(p) > self.settings.min_photo_length]

    def build_request(self, photos: list[str]) -> dict[str, Any]:
        parts = [prepare_image_part(p) for p in photos]
        parts.append({"text": EXTRACTION_PROMPT})
        return {
            "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

    async def extract(self, photos: list[str]) -> ExtractedAttributes:
        valid_photos = self.usable_photos(photos)
        if not valid_photos:
            raise ExtractionError("no usable photos were provided")
        if not self.settings.api_key:
            raise ExtractionError("the extraction service API key is not configured")

        payload = self.build_request(valid_photos)
        headers = {"x-goog-api-key": self.settings.api_key, "Content-Type": "application/json"}

        logger.info("Requesting extraction for %d photos from %s", len(valid_photos), self.settings.model)
        try:
            async with httpx.AsyncClient(
                timeout=self.settings.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(self.endpoint, json=payload, headers=headers)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.warning("Extraction timed out: %s", exc)
            raise ExtractionError(
                f"the extraction service timed out after {self.settings.timeout_seconds:g}s"
            ) from exc
        except httpx.HTTPStatusError as exc:
            logger.warning("Extraction service returned HTTP %s", exc.response.status_code)
            raise ExtractionError(
                f"the extraction service returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Extraction service unreachable: %s", exc)
            raise ExtractionError(f"the extraction service is unreachable ({exc})") from exc

        return parse_attributes(self._response_text(response))

    @staticmethod
    def _response_text(response: httpx.Response) -> Optional[str]:
        try:
            data = response.json()
        except ValueError as exc:
            raise ExtractionError("the extraction service returned a non-JSON response") from exc
        if not isinstance(data, dict):
            return None
        candidates = data.get("candidates") or []
        if not candidates:
            return None
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts) or None
