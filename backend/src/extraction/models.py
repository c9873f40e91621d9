"""Attribute bundle returned by the extraction oracle.

Raw oracle output is untyped JSON. Every field passes through a ``before``
validator here, so nothing downstream ever sees an unsanitized value:

- ``None``, blank strings and ``N/I`` collapse to the ``N/I`` sentinel
- text is uppercased, except the website which is lowercased
- tax identifiers are always a list; a scalar is wrapped (or dropped when it
  is the sentinel), a list keeps its positions so the first entry stays canonical
- molding is coerced to ``INJETADO``/``TERMOFORMADO`` (or ``N/I``)
- shape is coerced to one of the four allowed shapes; cylindrical becomes ``REDONDO``
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


NOT_IDENTIFIED = "N/I"
DEFAULT_PACKAGE_TYPE = "POTE"


class MoldingTechnique(str, enum.Enum):
    INJETADO = "INJETADO"
    TERMOFORMADO = "TERMOFORMADO"


class PackageShape(str, enum.Enum):
    REDONDO = "REDONDO"
    QUADRADO = "QUADRADO"
    RETANGULAR = "RETANGULAR"
    OVAL = "OVAL"


_CYLINDRICAL_TOKENS = ("CILIN", "CILÍN")


def sanitize_text(value: Any) -> str:
    """Collapse missing values to the sentinel, otherwise return stripped text."""
    if value is None:
        return NOT_IDENTIFIED
    text = str(value).strip()
    if not text or text.upper() == NOT_IDENTIFIED:
        return NOT_IDENTIFIED
    return text


def coerce_molding(value: Any) -> str:
    text = sanitize_text(value).upper()
    if text == NOT_IDENTIFIED:
        return NOT_IDENTIFIED
    if "INJET" in text:
        return MoldingTechnique.INJETADO.value
    if "TERMO" in text:
        return MoldingTechnique.TERMOFORMADO.value
    # Thermoformed is by far the most common technique for retail tubs
    return MoldingTechnique.TERMOFORMADO.value


def coerce_shape(value: Any) -> str:
    text = sanitize_text(value).upper()
    if text == NOT_IDENTIFIED:
        return NOT_IDENTIFIED
    if any(token in text for token in _CYLINDRICAL_TOKENS):
        return PackageShape.REDONDO.value
    for shape in PackageShape:
        if shape.value in text:
            return shape.value
    return NOT_IDENTIFIED


class ExtractedAttributes(BaseModel):
    """Structured attributes read from product packaging photos.

    Accepts both the oracle's camelCase keys and the snake_case field names.
    """

    model_config = ConfigDict(populate_by_name=True)

    legal_name: str = Field(NOT_IDENTIFIED, alias="razaoSocial")
    tax_ids: list[str] = Field(default_factory=list, alias="cnpj")
    brand: str = Field(NOT_IDENTIFIED, alias="marca")
    product_description: str = Field(NOT_IDENTIFIED, alias="descricaoProduto")
    net_content: str = Field(NOT_IDENTIFIED, alias="conteudo")
    address: str = Field(NOT_IDENTIFIED, alias="endereco")
    postal_code: str = Field(NOT_IDENTIFIED, alias="cep")
    phone: str = Field(NOT_IDENTIFIED, alias="telefone")
    website: str = Field(NOT_IDENTIFIED, alias="site")
    packaging_manufacturer: str = Field(NOT_IDENTIFIED, alias="fabricanteEmbalagem")
    molding: str = Field(NOT_IDENTIFIED, alias="moldagem")
    shape: str = Field(NOT_IDENTIFIED, alias="formatoEmbalagem")
    package_type: str = Field(DEFAULT_PACKAGE_TYPE, alias="tipoEmbalagem")
    package_model: str = Field(NOT_IDENTIFIED, alias="modeloEmbalagem")

    @field_validator(
        "legal_name",
        "brand",
        "product_description",
        "net_content",
        "address",
        "postal_code",
        "phone",
        "packaging_manufacturer",
        "package_model",
        mode="before",
    )
    @classmethod
    def _upper_text(cls, v: Any) -> str:
        return sanitize_text(v).upper()

    @field_validator("website", mode="before")
    @classmethod
    def _lower_website(cls, v: Any) -> str:
        text = sanitize_text(v)
        return text if text == NOT_IDENTIFIED else text.lower()

    @field_validator("package_type", mode="before")
    @classmethod
    def _package_type(cls, v: Any) -> str:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_PACKAGE_TYPE
        return sanitize_text(v).upper()

    @field_validator("tax_ids", mode="before")
    @classmethod
    def _tax_ids(cls, v: Any) -> list[str]:
        if isinstance(v, (list, tuple)):
            # Positions are kept; the first entry is the canonical identifier
            return [sanitize_text(item) for item in v]
        text = sanitize_text(v)
        return [] if text == NOT_IDENTIFIED else [text]

    @field_validator("molding", mode="before")
    @classmethod
    def _molding(cls, v: Any) -> str:
        return coerce_molding(v)

    @field_validator("shape", mode="before")
    @classmethod
    def _shape(cls, v: Any) -> str:
        return coerce_shape(v)

    @property
    def primary_tax_id(self) -> str:
        return self.tax_ids[0] if self.tax_ids else NOT_IDENTIFIED

    def has_usable_data(self) -> bool:
        """True when at least one field carries something other than the sentinel."""
        if any(tax_id != NOT_IDENTIFIED for tax_id in self.tax_ids):
            return True
        values = self.model_dump(exclude={"tax_ids", "package_type"})
        return any(value != NOT_IDENTIFIED for value in values.values())
