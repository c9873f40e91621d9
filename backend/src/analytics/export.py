"""Master database export: one flat row per record.

Column order and names are a compatibility surface for the spreadsheets the
intelligence team already consumes; do not reorder.
"""

from __future__ import annotations

import io
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, Optional, Sequence

import polars as pl
from openpyxl import Workbook

from extraction.models import NOT_IDENTIFIED
from inspections.models import InspectionListDTO, RecordDTO


EXPORT_COLUMNS = (
    "DATA_LEITURA",
    "INSPETOR",
    "PDV",
    "CIDADE",
    "ESTADO_UF",
    "RAZAO_SOCIAL",
    "MARCA",
    "DESCRICAO",
    "CONTEUDO",
    "CNPJ",
    "STATUS_BASE",
    "FABRICANTE_EMBALAGEM",
    "MOLDAGEM",
    "FORMATO",
    "TIPO_EMBALAGEM",
    "MODELO_EMBALAGEM",
    "ENDERECO",
    "CEP",
    "TELEFONE",
    "SITE",
    "STATUS_IC",
    "OBSERVACAO_IC",
)

SHEET_TITLE = "Master"


def export_filename(extension: str, today: Optional[date] = None) -> str:
    stamp = (today or date.today()).isoformat()
    return f"PackScan_Master_Database_{stamp}.{extension}"


def state_from_city(city: str) -> str:
    """'CAMPINAS / SP' -> 'SP'."""
    state = city.split("/")[-1].strip() if city else ""
    return state or NOT_IDENTIFIED


def _format_timestamp(value: datetime) -> str:
    return value.strftime("%d/%m/%Y %H:%M:%S")


def build_row(inspection_list: InspectionListDTO, record: RecordDTO) -> dict[str, str]:
    attributes = record.attributes
    return {
        "DATA_LEITURA": _format_timestamp(record.created_at),
        "INSPETOR": inspection_list.inspector_name,
        "PDV": inspection_list.establishment,
        "CIDADE": inspection_list.city,
        "ESTADO_UF": state_from_city(inspection_list.city),
        "RAZAO_SOCIAL": attributes.legal_name,
        "MARCA": attributes.brand,
        "DESCRICAO": attributes.product_description,
        "CONTEUDO": attributes.net_content,
        "CNPJ": attributes.primary_tax_id,
        "STATUS_BASE": "Novo Prospect" if record.is_new_prospect else "Já Cadastrado",
        "FABRICANTE_EMBALAGEM": attributes.packaging_manufacturer,
        "MOLDAGEM": attributes.molding,
        "FORMATO": attributes.shape,
        "TIPO_EMBALAGEM": attributes.package_type,
        "MODELO_EMBALAGEM": attributes.package_model,
        "ENDERECO": attributes.address,
        "CEP": attributes.postal_code,
        "TELEFONE": attributes.phone,
        "SITE": attributes.website,
        "STATUS_IC": record.review_status.value,
        "OBSERVACAO_IC": record.reviewer_comment or "",
    }


def build_rows(lists: Iterable[InspectionListDTO]) -> list[dict[str, str]]:
    return [
        build_row(inspection_list, record)
        for inspection_list in lists
        for record in inspection_list.records
    ]


def build_dataframe(lists: Sequence[InspectionListDTO]) -> pl.DataFrame:
    rows = build_rows(lists)
    schema = {column: pl.Utf8 for column in EXPORT_COLUMNS}
    if not rows:
        return pl.DataFrame(schema=schema)
    return pl.DataFrame(rows, schema=schema)


def export_csv(df: pl.DataFrame, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    df.write_csv(path)
    return path


def workbook_bytes(df: pl.DataFrame) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE
    ws.append(list(df.columns))
    for row in df.iter_rows():
        ws.append(list(row))
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def export_excel(df: pl.DataFrame, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(workbook_bytes(df))
    return path
