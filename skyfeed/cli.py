"""skyfeed.cli

`skyfeed api | status | init-db`.

Subcommands import their own dependencies so `--help` never pulls in the
web stack.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CliContext:
    repo_root: Path

    def config(self):
        from skyfeed.core.config import Config

        return Config.from_repo_defaults(self.repo_root)


def _fail(message: object, code: int) -> int:
    print(f"error: {message}", file=sys.stderr)
    return code


def _cmd_api(ctx: CliContext, args: argparse.Namespace) -> int:
    from skyfeed.core.exceptions import ConfigError

    try:
        config = ctx.config()
        config.require_serving()
    except ConfigError as e:
        return _fail(e, 2)

    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=args.host or config.api.host,
        port=args.port or config.api.port,
        reload=False,
    )
    return 0


def _cmd_status(ctx: CliContext, args: argparse.Namespace) -> int:
    from skyfeed.core.exceptions import ConfigError
    from skyfeed.feed import AlgorithmRegistry

    try:
        config = ctx.config()
    except ConfigError as e:
        return _fail(e, 2)

    db = config.database
    rows = [
        ("service did", config.service.did or "(unset)"),
        ("hostname", config.service.hostname or "(unset)"),
        ("write store", f"{db.write_path} ({'present' if db.write_path.exists() else 'missing'})"),
        ("read store", f"{db.replica_path} ({'present' if db.replica_path.exists() else 'missing'})"),
        ("service key", "configured" if config.api.service_key else "missing"),
        ("signing keys", str(len(config.auth.signing_keys))),
        ("mail relay", config.mail.host or "(unset)"),
    ]
    rows += [("feed", uri) for uri in AlgorithmRegistry(config.service.publisher_did).uris()]

    print("skyfeed status")
    for label, value in rows:
        print(f"- {label}: {value}")

    try:
        config.require_serving()
    except ConfigError as e:
        print(f"- ready: no ({e})")
        return 1
    print("- ready: yes")
    return 0


def _cmd_init_db(ctx: CliContext, args: argparse.Namespace) -> int:
    from skyfeed.core.database import open_stores
    from skyfeed.core.exceptions import SkyfeedError

    try:
        db = ctx.config().database
        stores = open_stores(db.write_path, db.replica_path, timeout_seconds=db.timeout_seconds)
    except SkyfeedError as e:
        return _fail(e, 1)

    for label, store in zip(("write", "read"), stores):
        print(f"{label} store ready: {store.db_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skyfeed",
        description="Feed generator and account-action gateway.",
    )
    parser.add_argument("--version", action="store_true", help="Print version and exit.")

    commands = parser.add_subparsers(dest="command")

    api = commands.add_parser("api", help="Serve the HTTP API with uvicorn")
    api.add_argument("--host", default=None, help="Override api.host")
    api.add_argument("--port", type=int, default=None, help="Override api.port")
    api.set_defaults(handler=_cmd_api)

    status = commands.add_parser("status", help="Print configuration readiness (no secrets)")
    status.set_defaults(handler=_cmd_status)

    init_db = commands.add_parser("init-db", help="Create the schema in the write store and the replica")
    init_db.set_defaults(handler=_cmd_init_db)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        from skyfeed import __version__

        print(f"skyfeed v{__version__}")
        return 0

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 2

    return int(handler(CliContext(repo_root=Path.cwd()), args))


if __name__ == "__main__":
    raise SystemExit(main())
