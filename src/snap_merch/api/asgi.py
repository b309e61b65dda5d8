"""ASGI entrypoint for the SnapMerch API."""

from snap_merch.api.app import create_app
from snap_merch.containers import build_container

app = create_app(build_container())
