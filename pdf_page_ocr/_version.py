"""パッケージバージョンの一元管理。"""

from __future__ import annotations

import importlib.metadata

_DISTRIBUTION_NAME = "pdf-page-ocr"


def _get_version() -> str:
    """インストール済みメタデータからバージョンを取得する。未インストール時は"dev"。"""
    try:
        return importlib.metadata.version(_DISTRIBUTION_NAME)
    except importlib.metadata.PackageNotFoundError:  # pragma: no cover
        return "dev"


__version__ = _get_version()
