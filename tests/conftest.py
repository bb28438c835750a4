from __future__ import annotations

import shutil
import sys
from pathlib import Path

import pytest

# uv/pytest may run without installing the project; ensure repo root is importable.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from cryptography.hazmat.primitives.asymmetric import ec  # noqa: E402

from skyfeed.core.config import Config  # noqa: E402
from tests.unit._tokens import ISSUER_DID, SERVICE_DID, SERVICE_HOSTNAME, public_pem  # noqa: E402

SERVICE_KEY = "secret"


@pytest.fixture()
def temp_dir(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture(scope="session")
def signing_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture()
def test_config(temp_dir: Path, signing_key: ec.EllipticCurvePrivateKey) -> Config:
    """Config fixture pointing both stores at a temp sqlite file."""

    cfg_src = REPO_ROOT / "config" / "default.yaml"
    cfg_dst_dir = temp_dir / "config"
    cfg_dst_dir.mkdir(parents=True, exist_ok=True)
    shutil.copy2(cfg_src, cfg_dst_dir / "default.yaml")

    c = Config.from_yaml(cfg_dst_dir / "default.yaml")
    return c.model_copy(
        update={
            "service": c.service.model_copy(update={"did": SERVICE_DID, "hostname": SERVICE_HOSTNAME}),
            "api": c.api.model_copy(update={"service_key": SERVICE_KEY}),
            "database": c.database.model_copy(update={"write_path": temp_dir / "data" / "feedgen.db"}),
            "auth": c.auth.model_copy(update={"signing_keys": {ISSUER_DID: public_pem(signing_key)}}),
        }
    )
