from __future__ import annotations

from pathlib import Path
import sys
import uuid

from fastapi.testclient import TestClient

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app import app  # noqa: E402


def fail(message: str) -> None:
    print(f"SMOKE_FAIL: {message}")
    raise SystemExit(1)


def main() -> None:
    client = TestClient(app)

    if client.get("/health").status_code != 200:
        fail("health check failed")

    inspect_response = client.post("/api/documents/inspect", json={"value": "11144477735"})
    document = inspect_response.json().get("data", {})
    if document.get("formatted") != "111.444.777-35" or not document.get("is_valid"):
        fail(f"document inspection returned {document}")

    email = f"smoke-{uuid.uuid4().hex[:8]}@example.com"
    signup_response = client.post("/api/auth/signup", json={"email": email, "password": "smoke-pass", "first_name": "Smoke"})
    if signup_response.status_code != 200:
        fail(f"signup failed ({signup_response.status_code})")

    login_response = client.post("/api/auth/login", json={"email": email, "password": "smoke-pass"})
    if login_response.status_code != 200:
        fail(f"login failed ({login_response.status_code})")
    headers = {"Authorization": f"Bearer {login_response.json()['data']['access_token']}"}

    listing = client.get("/api/beneficiary/list", headers=headers)
    if listing.status_code != 200 or listing.json().get("count") != 0:
        fail(f"unexpected saved list: {listing.json()}")

    profile = client.get("/api/profile", headers=headers).json()
    if profile.get("data", {}).get("first_name") != "Smoke":
        fail(f"unexpected profile: {profile}")

    unauthenticated = client.get("/api/profile")
    if unauthenticated.status_code != 401:
        fail("profile was readable without a token")

    client.post("/api/auth/logout", headers=headers)
    print("SMOKE_OK")


if __name__ == "__main__":
    main()
