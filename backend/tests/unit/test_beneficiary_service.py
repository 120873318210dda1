from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from src.errors import ConflictError, NotFoundError, UpstreamError, ValidationError
from src.integrations.hadesweb import HadeswebClient
from src.services import auth_service, beneficiary_service

from conftest import FakeSession

INVOICES = [
    {"id": 1, "status": "Pago", "valor": 89.9, "valor_pago": 89.9, "dt_emissao": "2025-01-05"},
    {"id": 2, "status": "Em aberto", "valor": 89.9, "valor_pago": 0, "dt_emissao": "2025-02-05"},
    {"id": 3, "status": "Vencido", "valor": 89.9, "valor_pago": None, "dt_emissao": "2025-03-05"},
]


@pytest.fixture
def user_id() -> str:
    return auth_service.sign_up("bia@example.com", "segredo123").id


def test_search_rejects_checksum_failure_before_calling_upstream(hadesweb: HadeswebClient, fake_session: FakeSession) -> None:
    with pytest.raises(ValidationError, match="CPF inválido"):
        beneficiary_service.search(hadesweb, "111.444.777-36")
    with pytest.raises(ValidationError, match="Documento inválido"):
        beneficiary_service.search(hadesweb, "1234")
    with pytest.raises(ValidationError, match="obrigatório"):
        beneficiary_service.search(hadesweb, "  ")
    assert fake_session.calls == []


def test_search_sends_clean_digits_and_validated_kind(hadesweb: HadeswebClient, fake_session: FakeSession) -> None:
    fake_session.reply(200, {"data": {"id": 55, "nome": "EMPRESA"}})

    records = beneficiary_service.search(hadesweb, "11.222.333/0001-81")

    assert records == [{"id": 55, "nome": "EMPRESA"}]
    assert fake_session.calls[0]["params"] == {"cpf_cnpj": "11222333000181", "fis_jur": "J"}


def test_search_surfaces_upstream_failure(hadesweb: HadeswebClient, fake_session: FakeSession) -> None:
    fake_session.reply(500, {"message": "timeout"})
    with pytest.raises(UpstreamError) as excinfo:
        beneficiary_service.search(hadesweb, "11144477735", "F")
    assert excinfo.value.status_code == 502
    assert "Detalhes: timeout" in excinfo.value.message


def test_save_coerces_fields(user_id: str, sample_beneficiary: dict[str, Any]) -> None:
    saved = beneficiary_service.save(user_id, sample_beneficiary)

    assert saved["id"] == 321
    assert saved["hadesweb_id"] == 321
    assert saved["dt_nascimento"] == "1950-03-14"
    assert saved["dt_falecimento"] is None
    assert saved["num_gaveta_falecimento"] is None
    assert saved["endereco"] == {"logradouro": "Rua A", "numero": "10", "cidade": "Belém"}
    assert saved["created_by_user"] == user_id


def test_save_requires_identifiers(user_id: str, sample_beneficiary: dict[str, Any]) -> None:
    with pytest.raises(ValidationError, match="ID e CPF/CNPJ"):
        beneficiary_service.save(user_id, {**sample_beneficiary, "cpf_cnpj": ""})
    with pytest.raises(ValidationError, match="ce_licenca"):
        beneficiary_service.save(user_id, {**sample_beneficiary, "ce_licenca": "x"})


def test_save_twice_is_conflict(user_id: str, sample_beneficiary: dict[str, Any]) -> None:
    beneficiary_service.save(user_id, sample_beneficiary)
    with pytest.raises(ConflictError):
        beneficiary_service.save(user_id, sample_beneficiary)


def test_records_are_scoped_to_their_owner(user_id: str, sample_beneficiary: dict[str, Any]) -> None:
    beneficiary_service.save(user_id, sample_beneficiary)
    other = auth_service.sign_up("caio@example.com", "segredo123").id

    assert beneficiary_service.list_saved(other) == []
    assert beneficiary_service.check_saved(other, 321) == {"exists": False, "client": None}
    with pytest.raises(NotFoundError):
        beneficiary_service.get_saved(other, 321)
    with pytest.raises(NotFoundError):
        beneficiary_service.delete_saved(other, 321)

    assert beneficiary_service.check_saved(user_id, 321)["exists"] is True
    beneficiary_service.delete_saved(user_id, 321)
    assert beneficiary_service.list_saved(user_id) == []


def test_invalid_stored_address_decodes_to_none(user_id: str, sample_beneficiary: dict[str, Any]) -> None:
    saved = beneficiary_service.save(user_id, {**sample_beneficiary, "endereco": "{not json"})
    assert saved["endereco"] is None


def test_get_plan_filters_listing(hadesweb: HadeswebClient, fake_session: FakeSession, user_id: str, sample_beneficiary: dict[str, Any]) -> None:
    beneficiary_service.save(user_id, sample_beneficiary)
    fake_session.reply(200, {"data": [{"id": 1, "plano": "Básico"}, {"id": 2, "plano": "Família"}]})
    fake_session.reply(200, {"data": [{"id": 1, "plano": "Básico"}]})

    assert beneficiary_service.get_plan(hadesweb, user_id, 321, "2") == {"id": 2, "plano": "Família"}
    with pytest.raises(NotFoundError, match="Plano não encontrado"):
        beneficiary_service.get_plan(hadesweb, user_id, 321, "9")
    assert fake_session.calls[0]["url"].endswith("/plano_funerario/clientes/321/vendas")


def test_plans_need_a_saved_record(hadesweb: HadeswebClient, user_id: str) -> None:
    with pytest.raises(NotFoundError, match="hadesweb_id"):
        beneficiary_service.list_plans(hadesweb, user_id, 999)


def test_filter_invoices() -> None:
    assert [i["id"] for i in beneficiary_service.filter_invoices(INVOICES, status="aberto")] == [2]
    assert [i["id"] for i in beneficiary_service.filter_invoices(INVOICES, paid="pago")] == [1]
    assert [i["id"] for i in beneficiary_service.filter_invoices(INVOICES, paid="nao_pago")] == [2, 3]
    assert [
        i["id"]
        for i in beneficiary_service.filter_invoices(INVOICES, date_from=date(2025, 2, 1), date_to=date(2025, 3, 5))
    ] == [2, 3]
    assert len(beneficiary_service.filter_invoices(INVOICES)) == 3


def test_invoice_display_block() -> None:
    display = beneficiary_service.with_display(INVOICES[0])["display"]
    assert display == {
        "valor": "R$ 89,90",
        "valor_pago": "R$ 89,90",
        "dt_emissao": "05/01/2025",
        "dt_vencimento": "—",
        "status_kind": "pago",
    }


def test_two_users_can_save_the_same_lookup(user_id: str, sample_beneficiary: dict[str, Any]) -> None:
    beneficiary_service.save(user_id, sample_beneficiary)
    other = auth_service.sign_up("davi@example.com", "segredo123").id

    assert beneficiary_service.check_saved(other, 321)["exists"] is False
    saved = beneficiary_service.save(other, sample_beneficiary)
    assert saved["created_by_user"] == other

    beneficiary_service.delete_saved(other, 321)
    assert beneficiary_service.get_saved(user_id, 321)["nome"] == "MARIA DA SILVA"


def test_search_rejects_person_type_that_contradicts_document(hadesweb: HadeswebClient, fake_session: FakeSession) -> None:
    with pytest.raises(ValidationError, match="não corresponde"):
        beneficiary_service.search(hadesweb, "11.222.333/0001-81", "F")
    with pytest.raises(ValidationError, match="não corresponde"):
        beneficiary_service.search(hadesweb, "111.444.777-35", "J")
    assert fake_session.calls == []
