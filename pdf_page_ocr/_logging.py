"""パッケージロガーの設定。"""

from __future__ import annotations

import logging
import os
import sys

PACKAGE_LOGGER_NAME = "pdf_page_ocr"
_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DEFAULT_LEVEL = logging.INFO


def _level_from_env() -> int:
    """環境変数 PDF_PAGE_OCR_LOG_LEVEL からログレベルを取得する。"""

    value = os.environ.get("PDF_PAGE_OCR_LOG_LEVEL", "").strip()
    if not value:
        return _DEFAULT_LEVEL
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    return level if isinstance(level, int) else _DEFAULT_LEVEL


def configure_logging(level: int | None = None) -> logging.Logger:
    """パッケージロガーに標準エラー出力向けのハンドラを1つだけ設定する。

    標準出力は抽出テキストの出力先になりうるため、ログは常に標準エラーへ書く。
    """

    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    logger.setLevel(_level_from_env() if level is None else level)

    # 繰り返し呼ばれた場合に出力が重複しないよう既存ハンドラを外す
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(handler)
    return logger
