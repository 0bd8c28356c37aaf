"""``mux-sync init``: write app-level wrapper modules around mux_sync."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
import re
import sys
from typing import Callable, List, Optional, Sequence


COMPONENT_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
DEFAULT_COMPONENT_NAME = "mux"
DEFAULT_TARGET_DIR = "app"


def config_template(name: str) -> str:
    return f'''"""Settings for the {name} Mux integration."""

from muxsync.core.config import Settings, get_settings


def get_{name}_settings() -> Settings:
    return get_settings()
'''


def http_template(name: str) -> str:
    return f'''"""HTTP routes mounting the {name} Mux webhook."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from muxsync.storage.db import get_session

from .mux_webhook import ingest_{name}_webhook

router = APIRouter(prefix="/{name}", tags=["{name}"])


@router.post("/webhook")
async def {name}_webhook(request: Request, session: Session = Depends(get_session)) -> dict:
    raw_body = await request.body()
    return ingest_{name}_webhook(session, raw_body=raw_body, headers=dict(request.headers))
'''


def migration_template(name: str) -> str:
    return f'''"""Backfill entry point for the {name} Mux integration."""

from dataclasses import asdict
from typing import Optional

from muxsync.integrations.mux.mux_client import get_mux_client
from muxsync.storage.db import load_models, session_scope
from muxsync.sync.backfill import backfill_assets


def backfill_{name}(
    max_assets: Optional[int] = None,
    default_user_id: Optional[str] = None,
    include_video_metadata: bool = True,
) -> dict:
    load_models()
    with session_scope() as session:
        result = backfill_assets(
            session,
            get_mux_client(),
            max_assets=max_assets,
            default_user_id=default_user_id,
            include_video_metadata=include_video_metadata,
        )
    return asdict(result)
'''


def webhook_template(name: str) -> str:
    return f'''"""Webhook ingestion wrapper for the {name} Mux integration."""

from typing import Mapping

from sqlalchemy.orm import Session

from muxsync.core.config import get_settings
from muxsync.integrations.mux.mux_client import get_mux_client
from muxsync.webhooks.service import ingest_webhook


def ingest_{name}_webhook(session: Session, *, raw_body: bytes, headers: Mapping[str, str]) -> dict:
    settings = get_settings()
    if not settings.mux_webhook_secret:
        raise RuntimeError("Missing env var: MUX_WEBHOOK_SECRET")
    outcome = ingest_webhook(
        session,
        raw_body=raw_body,
        headers=headers,
        webhook_secret=settings.mux_webhook_secret,
        tolerance_seconds=settings.mux_signature_tolerance_seconds,
        mux_client=get_mux_client(),
    )
    return {{"skipped": outcome.skipped, "reason": outcome.reason}}
'''


@dataclass(frozen=True)
class ScaffoldFile:
    relative_path: str
    render: Callable[[str], str]
    skip_flag: str


SCAFFOLD_FILES = (
    ScaffoldFile("mux_config.py", config_template, "skip_config"),
    ScaffoldFile("mux_http.py", http_template, "skip_http"),
    ScaffoldFile("mux_migrations.py", migration_template, "skip_migration"),
    ScaffoldFile("mux_webhook.py", webhook_template, "skip_webhook"),
)


@dataclass(frozen=True)
class ScaffoldResult:
    written: List[str]
    skipped_existing: List[str]


def write_scaffold(
    target_dir: Path,
    *,
    component_name: str = DEFAULT_COMPONENT_NAME,
    force: bool = False,
    skip_config: bool = False,
    skip_http: bool = False,
    skip_migration: bool = False,
    skip_webhook: bool = False,
) -> ScaffoldResult:
    if not COMPONENT_NAME_PATTERN.match(component_name):
        raise ValueError(
            f'Invalid --component-name "{component_name}". '
            "Use letters, numbers, and underscores, starting with a letter."
        )
    if not target_dir.is_dir():
        raise FileNotFoundError(f"Could not find {target_dir} directory. Run this in your app root.")

    skips = {
        "skip_config": skip_config,
        "skip_http": skip_http,
        "skip_migration": skip_migration,
        "skip_webhook": skip_webhook,
    }
    written: List[str] = []
    skipped_existing: List[str] = []
    for scaffold_file in SCAFFOLD_FILES:
        if skips[scaffold_file.skip_flag]:
            continue
        path = target_dir / scaffold_file.relative_path
        if path.exists() and not force:
            skipped_existing.append(str(path))
            continue
        path.write_text(scaffold_file.render(component_name), encoding="utf-8")
        written.append(str(path))

    return ScaffoldResult(written=written, skipped_existing=skipped_existing)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mux-sync", description="Scaffold app-level wrappers for mux_sync.")
    subcommands = parser.add_subparsers(dest="command", required=True)

    init = subcommands.add_parser("init", help="Write Mux wrapper modules into your app package.")
    init.add_argument(
        "--component-name",
        default=DEFAULT_COMPONENT_NAME,
        help="Name used for generated routes and functions (default: mux).",
    )
    init.add_argument("--target-dir", default=DEFAULT_TARGET_DIR, help="App package directory (default: ./app).")
    init.add_argument("--force", action="store_true", help="Overwrite existing files.")
    init.add_argument("--skip-config", action="store_true", help="Do not create mux_config.py.")
    init.add_argument("--skip-http", action="store_true", help="Do not create mux_http.py.")
    init.add_argument("--skip-migration", action="store_true", help="Do not create mux_migrations.py.")
    init.add_argument("--skip-webhook", action="store_true", help="Do not create mux_webhook.py.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        result = write_scaffold(
            Path.cwd() / args.target_dir,
            component_name=args.component_name,
            force=args.force,
            skip_config=args.skip_config,
            skip_http=args.skip_http,
            skip_migration=args.skip_migration,
            skip_webhook=args.skip_webhook,
        )
    except (ValueError, FileNotFoundError) as exc:
        print(str(exc), file=sys.stderr)
        return 1

    for path in result.written:
        print(f"wrote {path}")
    for path in result.skipped_existing:
        print(f"skipped {path} (exists, use --force to overwrite)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
