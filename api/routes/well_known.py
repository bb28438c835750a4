from __future__ import annotations

from fastapi import APIRouter, Depends

from api.deps import get_config
from api.errors import ApiError
from api.schemas.well_known import DidDocument, KnownService
from skyfeed.core.config import Config

router = APIRouter()


@router.get("/.well-known/did.json", response_model=DidDocument)
def well_known(config: Config = Depends(get_config)) -> DidDocument:
    did = config.service.did
    hostname = config.service.hostname
    # The document only makes sense for a did:web living on this host.
    if not did or not hostname or not did.endswith(hostname):
        raise ApiError.not_found()

    return DidDocument(
        id=did,
        service=[
            KnownService(
                id="#bsky_fg",
                type="BskyFeedGenerator",
                service_endpoint=f"https://{hostname}",
            )
        ],
    )
