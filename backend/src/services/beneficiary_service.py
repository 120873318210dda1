from __future__ import annotations

from datetime import date
import logging
import sqlite3
from typing import Any

from ..database import store
from ..domain import DocumentKind, NormalizedResult
from ..errors import ConflictError, NotFoundError, UpstreamError, ValidationError
from ..formatting import coerce_date, coerce_int, format_currency_brl, format_date_br, normalize_status
from ..integrations.hadesweb import HadeswebClient
from ..utils import from_json, row_to_dict, to_json, utc_now_iso
from ..validation import strip_non_digits, validate

logger = logging.getLogger(__name__)

PERSON_TYPES = {DocumentKind.INDIVIDUAL.value, DocumentKind.ORGANIZATION.value}

DATE_FIELDS = ("dt_nascimento", "dt_falecimento", "dt_exumacao", "rg_dt_emissao")
TEXT_FIELDS = (
    "nome_social",
    "hr_falecimento",
    "cemiterio_falecimento",
    "jazigo_falecimento",
    "tipo_obito",
    "sexo",
    "estado_civil",
    "naturalidade",
    "natural_uf",
    "nacionalidade",
    "cpf_cnpj",
    "rg",
    "rg_org_emissor",
    "rg_uf",
    "pai",
    "mae",
    "telefone_res",
    "telefone_com",
    "telefone_cel1",
    "telefone_cel2",
    "email1",
    "email2",
    "religiao",
    "profissao",
    "observacao",
    "sn_possui_jazigo",
    "uso",
    "cemiterio_jazigo",
    "posicao_spc",
    "sn_consumidor_geral",
    "codigo",
    "modulo",
)

NOT_FOUND = "Beneficiário não encontrado"
MISSING_HADESWEB_ID = "Cliente não possui hadesweb_id salvo"


def search(client: HadeswebClient, cpf_cnpj: str | None, person_type: str | None = None) -> list[dict[str, Any]]:
    if not (cpf_cnpj or "").strip():
        raise ValidationError("CPF ou CNPJ é obrigatório")

    result = validate(cpf_cnpj)
    if not result.is_valid:
        label = {DocumentKind.INDIVIDUAL: "CPF", DocumentKind.ORGANIZATION: "CNPJ"}.get(result.kind, "Documento")
        raise ValidationError(f"{label} inválido")

    person_type = person_type or result.kind.value
    if person_type not in PERSON_TYPES:
        raise ValidationError("Tipo de pessoa deve ser F (física) ou J (jurídica)")
    if person_type != result.kind.value:
        raise ValidationError("Tipo de pessoa não corresponde ao documento informado")

    return _unwrap(client.search_beneficiary(strip_non_digits(cpf_cnpj), person_type))


def _unwrap(result: NormalizedResult) -> list[dict[str, Any]]:
    if result.success:
        return result.data
    raise UpstreamError(result.error or "Erro na API Hadesweb")


def _build_record(payload: dict[str, Any]) -> dict[str, Any]:
    if not payload.get("id") or not payload.get("cpf_cnpj"):
        raise ValidationError("ID e CPF/CNPJ são obrigatórios")

    record_id = coerce_int(payload.get("id"))
    ce_licenca = coerce_int(payload.get("ce_licenca"))
    fis_jur = payload.get("fis_jur")
    if not record_id or not ce_licenca or not fis_jur:
        raise ValidationError("Campos obrigatórios ausentes: id, ce_licenca, fis_jur.")

    record: dict[str, Any] = {
        "id": record_id,
        "hadesweb_id": record_id,
        "ce_licenca": ce_licenca,
        "fis_jur": str(fis_jur),
        "nome": payload.get("nome"),
        "num_gaveta_falecimento": coerce_int(payload.get("num_gaveta_falecimento")),
    }
    for name in TEXT_FIELDS:
        record[name] = payload.get(name) or None
    for name in DATE_FIELDS:
        record[name] = coerce_date(payload.get(name))

    endereco = payload.get("endereco")
    if endereco and not isinstance(endereco, str):
        endereco = to_json(endereco)
    record["endereco"] = endereco or None
    return record


def _decode_record(row: Any) -> dict[str, Any]:
    record = row_to_dict(row)
    if isinstance(record.get("endereco"), str):
        record["endereco"] = from_json(record["endereco"], None)
    return record


def save(user_id: str, payload: dict[str, Any]) -> dict[str, Any]:
    record = _build_record(payload)
    now = utc_now_iso()
    record.update(created_by_user=user_id, created_at=now, updated_at=now)

    columns = ", ".join(record)
    placeholders = ", ".join("?" for _ in record)
    try:
        store.execute(f"INSERT INTO beneficiaries ({columns}) VALUES ({placeholders})", tuple(record.values()))
    except sqlite3.IntegrityError as exc:
        logger.info("Beneficiary %s already saved: %s", record["id"], exc)
        raise ConflictError("Beneficiário já está salvo no sistema") from exc

    return get_saved(user_id, record["id"])


def list_saved(user_id: str) -> list[dict[str, Any]]:
    rows = store.fetchall(
        "SELECT * FROM beneficiaries WHERE created_by_user = ? ORDER BY created_at DESC, rowid DESC",
        (user_id,),
    )
    return [_decode_record(row) for row in rows]


def get_saved(user_id: str, beneficiary_id: int) -> dict[str, Any]:
    row = store.fetchone(
        "SELECT * FROM beneficiaries WHERE id = ? AND created_by_user = ?",
        (beneficiary_id, user_id),
    )
    if row is None:
        raise NotFoundError(NOT_FOUND)
    return _decode_record(row)


def delete_saved(user_id: str, beneficiary_id: int) -> None:
    deleted = store.execute(
        "DELETE FROM beneficiaries WHERE id = ? AND created_by_user = ?",
        (beneficiary_id, user_id),
    )
    if not deleted:
        raise NotFoundError(NOT_FOUND)


def check_saved(user_id: str, hadesweb_id: int) -> dict[str, Any]:
    row = store.fetchone(
        """
        SELECT id, nome, cpf_cnpj, created_at
        FROM beneficiaries
        WHERE hadesweb_id = ? AND created_by_user = ?
        """,
        (hadesweb_id, user_id),
    )
    return {"exists": row is not None, "client": row_to_dict(row)}


def _hadesweb_id(user_id: str, beneficiary_id: int) -> int:
    row = store.fetchone(
        "SELECT hadesweb_id FROM beneficiaries WHERE id = ? AND created_by_user = ?",
        (beneficiary_id, user_id),
    )
    if row is None or not row["hadesweb_id"]:
        raise NotFoundError(MISSING_HADESWEB_ID)
    return int(row["hadesweb_id"])


def list_plans(client: HadeswebClient, user_id: str, beneficiary_id: int) -> list[dict[str, Any]]:
    return _unwrap(client.list_plans(_hadesweb_id(user_id, beneficiary_id)))


def get_plan(client: HadeswebClient, user_id: str, beneficiary_id: int, plan_id: str) -> dict[str, Any]:
    plans = list_plans(client, user_id, beneficiary_id)
    found = next((plan for plan in plans if str(plan.get("id")) == str(plan_id)), None)
    if found is None:
        raise NotFoundError("Plano não encontrado para este cliente")
    return found


def _is_paid(invoice: dict[str, Any]) -> bool:
    amount = invoice.get("valor_pago")
    try:
        return bool(amount) and float(amount) > 0
    except (TypeError, ValueError):
        return False


def filter_invoices(
    invoices: list[dict[str, Any]],
    status: str | None = None,
    paid: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[dict[str, Any]]:
    """Keep invoices matching every given filter; issue dates bound inclusively."""
    selected = []
    for invoice in invoices:
        if status and status.lower() not in str(invoice.get("status") or "").lower():
            continue
        if paid == "pago" and not _is_paid(invoice):
            continue
        if paid == "nao_pago" and _is_paid(invoice):
            continue

        issued = coerce_date(invoice.get("dt_emissao"))
        if issued:
            if date_from and issued < date_from.isoformat():
                continue
            if date_to and issued > date_to.isoformat():
                continue
        selected.append(invoice)
    return selected


def with_display(invoice: dict[str, Any]) -> dict[str, Any]:
    return {
        **invoice,
        "display": {
            "valor": format_currency_brl(invoice.get("valor")),
            "valor_pago": format_currency_brl(invoice.get("valor_pago")),
            "dt_emissao": format_date_br(invoice.get("dt_emissao")),
            "dt_vencimento": format_date_br(invoice.get("dt_vencimento")),
            "status_kind": normalize_status(invoice.get("status")),
        },
    }


def list_invoices(
    client: HadeswebClient,
    user_id: str,
    beneficiary_id: int,
    plan_id: int,
    status: str | None = None,
    paid: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[dict[str, Any]]:
    invoices = _unwrap(client.list_invoices(_hadesweb_id(user_id, beneficiary_id), plan_id))
    return [with_display(invoice) for invoice in filter_invoices(invoices, status, paid, date_from, date_to)]


def get_invoice(
    client: HadeswebClient,
    user_id: str,
    beneficiary_id: int,
    plan_id: int,
    invoice_id: int,
) -> list[dict[str, Any]]:
    invoices = _unwrap(client.get_invoice(_hadesweb_id(user_id, beneficiary_id), plan_id, invoice_id))
    return [with_display(invoice) for invoice in invoices]
