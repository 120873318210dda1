from __future__ import annotations

import logging
from typing import Any

import requests

from ..domain import NormalizedResult
from ..settings import HADESWEB_API_BASE_URL, HADESWEB_API_TOKEN, PLACEHOLDER_TOKEN, REQUEST_TIMEOUT
from .normalizer import CONNECTION_ERROR_MESSAGE, normalize_http_response

logger = logging.getLogger(__name__)

TOKEN_MISSING_MESSAGE = "Token da API Hadesweb não configurado no servidor."
BENEFICIARY_NOT_FOUND = "Beneficiário não encontrado ou endpoint da API incorreto."
PLANS_NOT_FOUND = "Planos não encontrados para este cliente ou endpoint incorreto."
INVOICES_NOT_FOUND = "Faturas não encontradas para este plano ou endpoint incorreto."
INVOICE_NOT_FOUND = "Fatura não encontrada ou endpoint incorreto."


class HadeswebClient:
    """Back-office API client. Every call returns a ``NormalizedResult``."""

    def __init__(
        self,
        base_url: str = HADESWEB_API_BASE_URL,
        token: str = HADESWEB_API_TOKEN,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    def close(self) -> None:
        self.session.close()

    @property
    def is_configured(self) -> bool:
        return bool(self.token) and self.token != PLACEHOLDER_TOKEN

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _get(self, path: str, params: dict[str, Any] | None = None, not_found_message: str | None = None) -> NormalizedResult:
        if not self.is_configured:
            logger.error("Hadesweb token is not configured")
            return NormalizedResult.fail(TOKEN_MISSING_MESSAGE)

        query = {key: value for key, value in (params or {}).items() if value is not None}
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=query, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Hadesweb request to %s failed: %s", url, exc)
            return NormalizedResult.fail(CONNECTION_ERROR_MESSAGE)

        return normalize_http_response(response, not_found_message)

    def search_beneficiary(self, cpf_cnpj: str, person_type: str) -> NormalizedResult:
        return self._get(
            "/plano_funerario/clientes",
            {"cpf_cnpj": cpf_cnpj, "fis_jur": person_type},
            BENEFICIARY_NOT_FOUND,
        )

    def list_plans(self, client_id: int, page: int | None = None, per_page: int | None = None) -> NormalizedResult:
        return self._get(
            f"/plano_funerario/clientes/{client_id}/vendas",
            {"page": page, "per_page": per_page},
            PLANS_NOT_FOUND,
        )

    def list_invoices(
        self,
        client_id: int,
        plan_id: int | None = None,
        page: int | None = None,
        per_page: int | None = None,
    ) -> NormalizedResult:
        path = f"/plano_funerario/clientes/{client_id}/vendas"
        if plan_id:
            path += f"/{plan_id}"
        return self._get(f"{path}/duplicatas_receber", {"page": page, "per_page": per_page}, INVOICES_NOT_FOUND)

    def get_invoice(self, client_id: int, plan_id: int, invoice_id: int) -> NormalizedResult:
        return self._get(
            f"/plano_funerario/clientes/{client_id}/vendas/{plan_id}/duplicatas_receber/{invoice_id}",
            not_found_message=INVOICE_NOT_FOUND,
        )
