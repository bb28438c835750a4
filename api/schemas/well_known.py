from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DID_CONTEXT = "https://www.w3.org/ns/did/v1"


class KnownService(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: str
    service_endpoint: str = Field(..., serialization_alias="serviceEndpoint")


class DidDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    context: list[str] = Field(default_factory=lambda: [DID_CONTEXT], serialization_alias="@context")
    id: str
    service: list[KnownService]
