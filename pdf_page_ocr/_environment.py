"""Tesseract実行ファイルの検出を担うモジュール。"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterator
from pathlib import Path
from shutil import which

import pytesseract

logger = logging.getLogger(__name__)

_TESSERACT_ENV_NAMES = ("TESSERACT_CMD", "TESSERACT_PATH", "PIL_TESSERACT_CMD")
_WINDOWS_DEFAULT_PATHS = (
    Path(r"C:\Program Files\Tesseract-OCR\tesseract.exe"),
    Path(r"C:\Program Files (x86)\Tesseract-OCR\tesseract.exe"),
)


def _tesseract_version(cmd: Path) -> str | None:
    """``cmd``を`tesseract_cmd`に設定し、起動できればバージョン文字列を返す。"""

    pytesseract.pytesseract.tesseract_cmd = str(cmd)
    try:
        return str(pytesseract.get_tesseract_version())
    except pytesseract.TesseractNotFoundError:
        return None


def _bundled_candidates() -> list[Path]:
    """同梱配布時に`tesseract`が置かれうるパスの一覧を返す。"""

    candidate_roots: list[Path] = []

    if getattr(sys, "frozen", False):  # PyInstaller実行ファイル
        candidate_roots.append(Path(sys.executable).resolve().parent)
        meipass = getattr(sys, "_MEIPASS", None)
        if meipass:
            candidate_roots.append(Path(meipass))
    module_dir = Path(__file__).resolve().parent
    candidate_roots.append(module_dir)
    candidate_roots.append(module_dir.parent)

    exe_name = "tesseract.exe" if os.name == "nt" else "tesseract"
    bundle_dirs = ("", "Tesseract-OCR", "tesseract", "tesseract-ocr", "bin")

    return [root / sub_dir / exe_name for root in candidate_roots for sub_dir in bundle_dirs]


def _candidate_commands() -> Iterator[tuple[str, Path]]:
    """(探索元, パス) の組を優先順に返す。"""

    for env_name in _TESSERACT_ENV_NAMES:
        env_value = os.environ.get(env_name)
        if env_value:
            yield f"環境変数 {env_name}", Path(env_value)

    configured = pytesseract.pytesseract.tesseract_cmd
    if configured:
        yield "設定済みのtesseract_cmd", Path(configured)

    cmd_from_path = which("tesseract")
    if cmd_from_path:
        yield "PATH", Path(cmd_from_path)

    if os.name == "nt":
        for default_path in _WINDOWS_DEFAULT_PATHS:
            yield "既定のインストール先", default_path

    for bundled in _bundled_candidates():
        yield "同梱バイナリ", bundled


def find_and_set_tesseract_path() -> Path | None:
    """環境に応じてTesseractの実行ファイルを検出して設定する。

    環境変数、設定済みの値、PATH、Windowsの既定インストール先、同梱バイナリの
    順に探索し、起動を確認できた最初の候補を
    ``pytesseract.pytesseract.tesseract_cmd``に設定する。

    Returns:
        利用するTesseractのパス。見つからない場合はNone（設定は元に戻す）。
    """

    original_cmd = pytesseract.pytesseract.tesseract_cmd
    tried: set[Path] = set()

    for source, candidate in _candidate_commands():
        if candidate in tried:
            continue
        tried.add(candidate)

        # "tesseract" のようなコマンド名だけの指定は、起動時のPATH解決に任せる
        if candidate.parent != Path(".") and not candidate.exists():
            logger.debug("%s の候補が存在しません: %s", source, candidate)
            continue

        version = _tesseract_version(candidate)
        if version is not None:
            logger.debug("%s からTesseract %s を検出しました: %s", source, version, candidate)
            return candidate

    pytesseract.pytesseract.tesseract_cmd = original_cmd
    return None
