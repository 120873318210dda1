"""Uniform ``{success, data, error}`` results for back-office API calls.

Every Hadesweb call goes through ``normalize_http_response`` so callers never
see how the upstream happened to shape its payload.
"""
from __future__ import annotations

import logging
from typing import Any

import requests

from ..domain import NormalizedResult

logger = logging.getLogger(__name__)

PAYLOAD_KEY = "data"

AUTH_ERROR_MESSAGE = "Token de autenticação inválido ou expirado. Verifique o token da API Hadesweb."
NOT_FOUND_MESSAGE = "Registro não encontrado ou endpoint da API incorreto."
SERVER_ERROR_MESSAGE = "Erro interno do servidor da API Hadesweb."
INTERNAL_ERROR_MESSAGE = "Erro interno ao processar a resposta da API Hadesweb."
CONNECTION_ERROR_MESSAGE = "Erro de conexão com a API Hadesweb. Tente novamente."


def http_error_message(status_code: int, body: Any = None, not_found_message: str | None = None) -> str:
    if status_code == 401:
        message = AUTH_ERROR_MESSAGE
    elif status_code == 404:
        message = not_found_message or NOT_FOUND_MESSAGE
    elif status_code == 500:
        message = SERVER_ERROR_MESSAGE
    else:
        message = f"Erro HTTP na API Hadesweb (status {status_code})."

    if isinstance(body, dict) and body.get("message"):
        message += f" Detalhes: {body['message']}"
    return message


def _is_record(item: Any) -> bool:
    return isinstance(item, dict) and len(item) > 0


def unwrap_payload(body: Any) -> list[dict[str, Any]]:
    # An empty object counts as "no data" rather than as one sparse record.
    payload = body.get(PAYLOAD_KEY) if isinstance(body, dict) and PAYLOAD_KEY in body else body

    if not payload:
        return []

    items = payload if isinstance(payload, list) else [payload]
    return [item for item in items if _is_record(item)]


def normalize_response(status_code: int, body: Any, not_found_message: str | None = None) -> NormalizedResult:
    if not 200 <= status_code < 300:
        return NormalizedResult.fail(http_error_message(status_code, body, not_found_message))
    return NormalizedResult.ok(unwrap_payload(body))


def _read_json(response: requests.Response) -> Any:
    if not response.content:
        return None
    return response.json()


def normalize_http_response(response: requests.Response, not_found_message: str | None = None) -> NormalizedResult:
    if not 200 <= response.status_code < 300:
        try:
            body = _read_json(response)
        except ValueError:
            body = None
        logger.warning("Hadesweb responded %s for %s", response.status_code, response.url)
        return normalize_response(response.status_code, body, not_found_message)

    try:
        body = _read_json(response)
    except ValueError:
        logger.exception("Hadesweb returned a non-JSON body for %s", response.url)
        return NormalizedResult.fail(INTERNAL_ERROR_MESSAGE)

    return normalize_response(response.status_code, body, not_found_message)
