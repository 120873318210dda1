from __future__ import annotations

from typing import Literal
from pydantic import BaseModel, ConfigDict, Field


class SignUpRequest(BaseModel):
    email: str
    password: str
    first_name: str | None = None
    last_name: str | None = None
    state: str | None = None


class SignInRequest(BaseModel):
    email: str
    password: str


class DocumentInspectRequest(BaseModel):
    value: str = ""


class BeneficiarySearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cpf_cnpj: str | None = Field(default=None, alias="cpfCnpj")
    person_type: Literal["F", "J"] | None = Field(default=None, alias="personType")


class BeneficiaryCheckRequest(BaseModel):
    hadesweb_id: int


class ProfileUpdateRequest(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    state: str | None = None
    avatar_url: str | None = None
    email: str | None = None


InvoicePaidFilter = Literal["pago", "nao_pago", ""]
