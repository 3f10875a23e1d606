"""レンダリング・前処理・OCRをページ順に実行し、結果を集約するモジュール。"""

from __future__ import annotations

import logging
import os
import sys
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from ._engine import RecognitionConfig, recognize_image
from ._environment import find_and_set_tesseract_path
from ._exceptions import OutputWriteFailure, PageRecognitionError
from ._image import normalize_image
from ._pdf import render_pdf_pages
from ._utils import _build_progress_message, _prepare_output_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageResult:
    """1ページ分のOCR結果。``text`` が None の場合は失敗を表す。"""

    page_number: int
    text: str | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.text is None

    def render(self) -> str:
        if self.failed:
            return f"--- ページ {self.page_number} (OCR失敗) ---\n"
        return f"--- ページ {self.page_number} ---\n{self.text.strip()}\n"


@dataclass
class DocumentResult:
    """ドキュメント全体のOCR結果。ページはページ番号順に並ぶ。"""

    source: Path
    pages: list[PageResult] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def failed_pages(self) -> list[int]:
        return [page.page_number for page in self.pages if page.failed]

    def to_text(self) -> str:
        """ページ区切り付きの1つのテキストに結合する。"""

        if not self.pages:
            return "\n"
        return "\n".join(page.render() for page in self.pages).strip() + "\n"


def run_ocr_pipeline(
    input_path: str | os.PathLike,
    config: RecognitionConfig,
    *,
    preprocess: bool = False,
    progress_callback: Callable[[str], None] | None = None,
) -> DocumentResult:
    """画像ベースのPDFを1ページずつOCRし、結果をページ順に集約する。

    レンダリングと前処理の失敗は処理全体を中断するが、OCRの失敗は
    そのページを失敗として記録したうえで次のページへ進む。

    Args:
        input_path: 入力PDF。
        config: 全ページ共通のOCR設定。``config.dpi`` はレンダリングにも使う。
        preprocess: Trueの場合、OCR前に適応的二値化を行う。
        progress_callback: 進捗メッセージの通知先。省略時はログに出力する。

    Raises:
        DocumentOpenFailure: PDFを開けない場合。
        PageRenderFailure: ページのレンダリングに失敗した場合。
        ImageSaveFailure: レンダリング結果を保存できない場合。
        NormalizationFailure: 前処理に失敗した場合。
    """

    input_path = Path(input_path)

    def _dispatch_progress(message: str) -> None:
        if progress_callback:
            progress_callback(message)
        else:
            logger.info(message)

    tesseract_cmd = find_and_set_tesseract_path()
    if tesseract_cmd is None:
        logger.warning(
            "Tesseract-OCRが見つかりません。インストールとPATH設定を確認してください。"
        )
    else:
        logger.info("Tesseract: %s", tesseract_cmd)

    result = DocumentResult(source=input_path)
    workspace, images = render_pdf_pages(input_path, config.dpi)

    with workspace:
        total_pages = len(images)
        if total_pages == 0:
            _dispatch_progress("ページが存在しないPDFです。処理を終了します。")
            return result

        start_time = time.perf_counter()

        for image in images:
            page_number = image.page_number
            logger.info("ページ %d/%d を処理しています", page_number, total_pages)

            if preprocess:
                normalize_image(image.path)

            try:
                text = recognize_image(image.path, config)
            except PageRecognitionError as exc:
                logger.warning("ページ %d のOCRに失敗しました: %s。スキップします。", page_number, exc)
                result.pages.append(PageResult(page_number=page_number, error=str(exc)))
            else:
                result.pages.append(PageResult(page_number=page_number, text=text))

            _dispatch_progress(_build_progress_message(page_number, total_pages, start_time))

    if result.failed_pages:
        logger.warning(
            "%d/%d ページのOCRに失敗しました: %s",
            len(result.failed_pages),
            result.page_count,
            ", ".join(str(number) for number in result.failed_pages),
        )

    return result


def write_text_output(text: str, output_path: str | os.PathLike | None = None) -> None:
    """テキストをファイル、または省略時は標準出力へ書き出す。"""

    if output_path is None:
        logger.info("結果を標準出力へ出力します")
        try:
            sys.stdout.write(text)
            sys.stdout.flush()
        except (OSError, UnicodeError) as exc:
            # 文字コードが対応しない端末や、閉じられたパイプへの出力
            raise OutputWriteFailure(f"標準出力へ書き込めませんでした: {exc}") from exc
        return

    output_path = Path(output_path)
    _prepare_output_path(output_path)
    logger.info("結果をファイルへ書き込みます: %s", output_path)

    try:
        output_path.write_text(text, encoding="utf-8")
    except PermissionError as exc:
        raise OutputWriteFailure(
            f"テキストを書き込めませんでした。権限を確認してください: {exc}"
        ) from exc
    except OSError as exc:
        raise OutputWriteFailure(f"テキストファイルを保存できませんでした: {exc}") from exc


def extract_text_from_image_pdf(
    input_path: str | os.PathLike,
    config: RecognitionConfig | None = None,
    *,
    preprocess: bool = False,
    progress_callback: Callable[[str], None] | None = None,
) -> str:
    """画像ベースのPDFからOCRでテキストを抽出して返す。"""

    result = run_ocr_pipeline(
        input_path,
        config or RecognitionConfig(),
        preprocess=preprocess,
        progress_callback=progress_callback,
    )
    return result.to_text()


def extract_text_to_file(
    input_path: str | os.PathLike,
    output_path: str | os.PathLike,
    config: RecognitionConfig | None = None,
    *,
    preprocess: bool = False,
    progress_callback: Callable[[str], None] | None = None,
) -> DocumentResult:
    """画像PDFから抽出したテキストをファイルに保存する。"""

    result = run_ocr_pipeline(
        input_path,
        config or RecognitionConfig(),
        preprocess=preprocess,
        progress_callback=progress_callback,
    )
    write_text_output(result.to_text(), output_path)
    return result
