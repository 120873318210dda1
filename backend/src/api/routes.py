from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import APIRouter, Body, Depends, Query

from ..domain import User
from ..errors import ValidationError
from ..integrations.hadesweb import HadeswebClient
from ..services import auth_service, beneficiary_service, profile_service
from ..validation import parse_document
from .dependencies import get_bearer_token, get_hadesweb_client, require_user
from .models import (
    BeneficiaryCheckRequest,
    BeneficiarySearchRequest,
    DocumentInspectRequest,
    InvoicePaidFilter,
    ProfileUpdateRequest,
    SignInRequest,
    SignUpRequest,
)


router = APIRouter()


@router.get("/health")
def health_check() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/api/auth/signup")
def sign_up(request: SignUpRequest) -> dict[str, Any]:
    user = auth_service.sign_up(
        email=request.email,
        password=request.password,
        first_name=request.first_name,
        last_name=request.last_name,
        state=request.state,
    )
    return {"success": True, "data": {"id": user.id, "email": user.email}}


@router.post("/api/auth/login")
def sign_in(request: SignInRequest) -> dict[str, Any]:
    user, token = auth_service.sign_in(request.email, request.password)
    return {
        "success": True,
        "data": {"access_token": token, "token_type": "bearer", "user": {"id": user.id, "email": user.email}},
    }


@router.post("/api/auth/logout")
def sign_out(token: str = Depends(get_bearer_token)) -> dict[str, Any]:
    auth_service.sign_out(token)
    return {"success": True}


@router.post("/api/documents/inspect")
def inspect_document(request: DocumentInspectRequest) -> dict[str, Any]:
    return {"success": True, "data": parse_document(request.value).to_dict()}


@router.post("/api/beneficiary/search")
def search_beneficiary(
    request: BeneficiarySearchRequest,
    user: User = Depends(require_user),
    client: HadeswebClient = Depends(get_hadesweb_client),
) -> dict[str, Any]:
    data = beneficiary_service.search(client, request.cpf_cnpj, request.person_type)
    return {"success": True, "data": data}


@router.post("/api/beneficiary/save")
def save_beneficiary(payload: dict[str, Any] = Body(...), user: User = Depends(require_user)) -> dict[str, Any]:
    saved = beneficiary_service.save(user.id, payload)
    return {"success": True, "message": "Beneficiário salvo com sucesso!", "data": saved}


@router.post("/api/beneficiary/check")
def check_beneficiary(request: BeneficiaryCheckRequest, user: User = Depends(require_user)) -> dict[str, Any]:
    return {"success": True, **beneficiary_service.check_saved(user.id, request.hadesweb_id)}


@router.get("/api/beneficiary/list")
def list_beneficiaries(user: User = Depends(require_user)) -> dict[str, Any]:
    records = beneficiary_service.list_saved(user.id)
    return {"success": True, "data": records, "count": len(records)}


@router.get("/api/beneficiary/{beneficiary_id}")
def get_beneficiary(beneficiary_id: int, user: User = Depends(require_user)) -> dict[str, Any]:
    return {"success": True, "data": beneficiary_service.get_saved(user.id, beneficiary_id)}


@router.delete("/api/beneficiary/{beneficiary_id}")
def delete_beneficiary(beneficiary_id: int, user: User = Depends(require_user)) -> dict[str, Any]:
    beneficiary_service.delete_saved(user.id, beneficiary_id)
    return {"success": True, "message": "Beneficiário excluído com sucesso."}


@router.get("/api/beneficiary/{beneficiary_id}/plans")
def list_plans(
    beneficiary_id: int,
    user: User = Depends(require_user),
    client: HadeswebClient = Depends(get_hadesweb_client),
) -> dict[str, Any]:
    return {"success": True, "data": beneficiary_service.list_plans(client, user.id, beneficiary_id)}


@router.get("/api/beneficiary/{beneficiary_id}/plans/{plan_id}")
def get_plan(
    beneficiary_id: int,
    plan_id: str,
    user: User = Depends(require_user),
    client: HadeswebClient = Depends(get_hadesweb_client),
) -> dict[str, Any]:
    return {"success": True, "data": beneficiary_service.get_plan(client, user.id, beneficiary_id, plan_id)}


@router.get("/api/beneficiary/{beneficiary_id}/faturas")
def list_invoices(
    beneficiary_id: int,
    plan_id: int | None = Query(default=None, alias="planId"),
    status: str | None = None,
    paid: InvoicePaidFilter | None = None,
    date_from: date | None = Query(default=None, alias="from"),
    date_to: date | None = Query(default=None, alias="to"),
    user: User = Depends(require_user),
    client: HadeswebClient = Depends(get_hadesweb_client),
) -> dict[str, Any]:
    if not plan_id:
        raise ValidationError("planId é obrigatório para consultar faturas deste beneficiário")

    invoices = beneficiary_service.list_invoices(
        client,
        user.id,
        beneficiary_id,
        plan_id,
        status=status,
        paid=paid,
        date_from=date_from,
        date_to=date_to,
    )
    return {"success": True, "data": invoices}


@router.get("/api/beneficiary/{beneficiary_id}/faturas/{invoice_id}")
def get_invoice(
    beneficiary_id: int,
    invoice_id: int,
    plan_id: int | None = Query(default=None, alias="planId"),
    user: User = Depends(require_user),
    client: HadeswebClient = Depends(get_hadesweb_client),
) -> dict[str, Any]:
    if not plan_id:
        raise ValidationError("planId é obrigatório para detalhes da duplicata")

    data = beneficiary_service.get_invoice(client, user.id, beneficiary_id, plan_id, invoice_id)
    return {"success": True, "data": data}


@router.get("/api/profile")
def get_profile(user: User = Depends(require_user)) -> dict[str, Any]:
    return {"success": True, "data": profile_service.get_profile(user)}


@router.patch("/api/profile")
def update_profile(request: ProfileUpdateRequest, user: User = Depends(require_user)) -> dict[str, Any]:
    updated = profile_service.update_profile(user, request.model_dump(exclude_unset=True))
    return {"success": True, "data": updated}
