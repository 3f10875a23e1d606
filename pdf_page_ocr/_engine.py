"""Tesseractの設定・実行を担うモジュール。"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import pytesseract

from ._exceptions import (
    EngineInitFailure,
    InvalidImagePath,
    RecognitionFailure,
    VariableRejected,
)

logger = logging.getLogger(__name__)

DEFAULT_LANG = "eng"
DEFAULT_DPI = 300
DEFAULT_PSM = 1
DEFAULT_OEM = 3
PSM_RANGE = range(0, 14)
OEM_RANGE = range(0, 4)

_PSM_VARIABLE = "tessedit_pageseg_mode"
_OEM_VARIABLE = "tessedit_ocr_engine_mode"
_DPI_VARIABLE = "user_defined_dpi"

# 言語データの読み込みに失敗した際にTesseractが出力するメッセージ
_ENGINE_INIT_MARKERS = (
    "Failed loading language",
    "Error opening data file",
    "Could not initialize tesseract",
)


@dataclass(frozen=True)
class RecognitionConfig:
    """全ページで共有するOCR設定。

    Attributes:
        lang: Tesseractの言語指定（例: ``eng``、``jpn+eng``）。
        dpi: レンダリングに使ったDPI。Tesseractにもヒントとして渡す。
        psm: ページセグメンテーションモード (0-13)。
        oem: OCRエンジンモード (0-3)。
        tessdata_path: 言語データディレクトリの上書き先。
    """

    lang: str = DEFAULT_LANG
    dpi: int = DEFAULT_DPI
    psm: int = DEFAULT_PSM
    oem: int = DEFAULT_OEM
    tessdata_path: Path | None = None


def _build_tesseract_config(config: RecognitionConfig) -> str:
    """RecognitionConfigからTesseractのコマンドライン設定文字列を組み立てる。"""

    if config.psm not in PSM_RANGE:
        raise VariableRejected(_PSM_VARIABLE, config.psm)
    if config.oem not in OEM_RANGE:
        raise VariableRejected(_OEM_VARIABLE, config.oem)
    if config.dpi <= 0:
        raise VariableRejected(_DPI_VARIABLE, config.dpi)

    options = [
        f"--psm {config.psm}",
        f"--oem {config.oem}",
        f"--dpi {config.dpi}",
    ]

    if config.tessdata_path is not None:
        tessdata = Path(config.tessdata_path)
        if not tessdata.is_dir():
            raise EngineInitFailure(f"tessdataディレクトリが見つかりません: {tessdata}")
        options.append(f'--tessdata-dir "{tessdata}"')

    return " ".join(options)


def _encode_image_path(image_path: Path) -> str:
    """画像パスをTesseractに渡せるUTF-8文字列へ変換する。"""

    path_str = os.fspath(image_path)
    try:
        path_str.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidImagePath(image_path) from exc
    return path_str


def _is_engine_init_error(exc: pytesseract.TesseractError) -> bool:
    message = str(getattr(exc, "message", "")) or str(exc)
    return any(marker in message for marker in _ENGINE_INIT_MARKERS)


def recognize_image(image_path: str | os.PathLike, config: RecognitionConfig) -> str:
    """1枚の画像ファイルをOCRしてテキストを返す。

    呼び出しごとにTesseractプロセスを新規に起動するため、ページ間で
    エンジンの状態が共有されることはない。

    Args:
        image_path: OCR対象の画像ファイル。
        config: 言語・DPI・PSM・OEM・tessdataの設定。

    Returns:
        認識されたテキスト（UTF-8）。

    Raises:
        EngineInitFailure: Tesseractまたは言語データが利用できない場合。
        VariableRejected: 設定値が受け付けられない場合。
        InvalidImagePath: 画像パスをエンジンに渡せない場合。
        RecognitionFailure: テキスト抽出そのものに失敗した場合。
    """

    image_path = Path(image_path)
    path_str = _encode_image_path(image_path)
    tesseract_config = _build_tesseract_config(config)

    logger.debug(
        "OCR実行: image=%s lang=%s config=%s", image_path, config.lang, tesseract_config
    )

    try:
        text = pytesseract.image_to_string(
            path_str,
            lang=config.lang,
            config=tesseract_config,
        )
    except pytesseract.TesseractNotFoundError as exc:
        raise EngineInitFailure(str(exc)) from exc
    except pytesseract.TesseractError as exc:
        if _is_engine_init_error(exc):
            raise EngineInitFailure(str(exc.message)) from exc
        raise RecognitionFailure(image_path, str(exc.message)) from exc
    except (OSError, RuntimeError) as exc:
        raise RecognitionFailure(image_path, str(exc)) from exc

    return text
