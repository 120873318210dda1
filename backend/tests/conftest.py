from __future__ import annotations

import json
import os
from pathlib import Path
import sys
import tempfile
from typing import Any

import pytest
import requests

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

os.environ.setdefault("PORTAL_DB_PATH", str(Path(tempfile.mkdtemp(prefix="portal-tests-")) / "portal.db"))

from fastapi.testclient import TestClient  # noqa: E402

from app import app  # noqa: E402
from src.api.dependencies import get_hadesweb_client  # noqa: E402
from src.database import store  # noqa: E402
from src.integrations.hadesweb import HadeswebClient  # noqa: E402

BASE_URL = "https://hadesweb.test/api/v1"


def make_response(status_code: int, body: Any = None, raw: bytes | None = None, url: str = BASE_URL) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    if raw is not None:
        response._content = raw
    elif body is not None:
        response._content = json.dumps(body).encode("utf-8")
    else:
        response._content = b""
    return response


class FakeSession:
    """Stands in for ``requests.Session``; replies from a queue and records calls."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.replies: list[requests.Response | Exception] = []

    def reply(self, status_code: int, body: Any = None, raw: bytes | None = None) -> None:
        self.replies.append(make_response(status_code, body, raw))

    def fail(self, exc: Exception) -> None:
        self.replies.append(exc)

    def get(self, url: str, params: Any = None, headers: Any = None, timeout: Any = None) -> requests.Response:
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        if not self.replies:
            raise AssertionError(f"unexpected upstream call to {url}")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture(autouse=True)
def clean_store() -> None:
    for table in ("sessions", "beneficiaries", "profiles", "users"):
        store.execute(f"DELETE FROM {table}")


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def hadesweb(fake_session: FakeSession) -> HadeswebClient:
    return HadeswebClient(base_url=BASE_URL, token="test-token", session=fake_session, timeout=5)


@pytest.fixture
def client(hadesweb: HadeswebClient):
    app.dependency_overrides[get_hadesweb_client] = lambda: hadesweb
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def sign_up_and_login(client: TestClient, email: str = "ana@example.com", password: str = "segredo123") -> dict[str, str]:
    signup = client.post(
        "/api/auth/signup",
        json={"email": email, "password": password, "first_name": "Ana", "last_name": "Souza", "state": "PA"},
    )
    assert signup.status_code == 200
    login = client.post("/api/auth/login", json={"email": email, "password": password})
    assert login.status_code == 200
    return {"Authorization": f"Bearer {login.json()['data']['access_token']}"}


@pytest.fixture
def auth_headers(client: TestClient) -> dict[str, str]:
    return sign_up_and_login(client)


SAMPLE_BENEFICIARY = {
    "id": 321,
    "ce_licenca": 7,
    "fis_jur": "F",
    "nome": "MARIA DA SILVA",
    "cpf_cnpj": "111.444.777-35",
    "dt_nascimento": "1950-03-14",
    "dt_falecimento": "0000-00-00",
    "num_gaveta_falecimento": "",
    "telefone_cel1": "(91) 99999-0000",
    "endereco": {"logradouro": "Rua A", "numero": "10", "cidade": "Belém"},
}


@pytest.fixture
def sample_beneficiary() -> dict[str, Any]:
    return dict(SAMPLE_BENEFICIARY)
