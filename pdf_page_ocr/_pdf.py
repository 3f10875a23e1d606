"""PDFページを画像ファイルへレンダリングするモジュール。"""

from __future__ import annotations

import io
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

import fitz  # type: ignore
from PIL import Image

from ._exceptions import DocumentOpenFailure, ImageSaveFailure, PageRenderFailure

logger = logging.getLogger(__name__)

# Decompression Bomb 対策: 200メガピクセルまで許可（デフォルト約178MP）
Image.MAX_IMAGE_PIXELS = 200_000_000

_POINTS_PER_INCH = 72.0
_WORKSPACE_PREFIX = "pdf_page_ocr_"
_IMAGE_NAME_TEMPLATE = "page_{index:04d}.tiff"
# PDFヘッダはファイル先頭1024バイト以内にあればよい
_PDF_MAGIC = b"%PDF-"
_PDF_HEADER_SEARCH_BYTES = 1024


@dataclass(frozen=True)
class RenderedImage:
    """一時ディレクトリに保存された1ページ分の画像。"""

    path: Path
    width: int
    height: int
    page_index: int

    @property
    def page_number(self) -> int:
        return self.page_index + 1


def _target_pixel_size(width_pt: float, height_pt: float, dpi: int) -> tuple[int, int]:
    """ポイント単位のページサイズから、指定DPIでのピクセルサイズを求める。"""

    scale = dpi / _POINTS_PER_INCH
    return int(width_pt * scale + 0.5), int(height_pt * scale + 0.5)


def _open_document(pdf_path: Path) -> fitz.Document:
    if not pdf_path.is_file():
        raise DocumentOpenFailure(pdf_path, "ファイルが見つかりません")

    try:
        with pdf_path.open("rb") as handle:
            header = handle.read(_PDF_HEADER_SEARCH_BYTES)
    except OSError as exc:
        raise DocumentOpenFailure(pdf_path, str(exc)) from exc
    if _PDF_MAGIC not in header:
        raise DocumentOpenFailure(pdf_path, "PDF形式のファイルではありません")

    try:
        document = fitz.open(str(pdf_path), filetype="pdf")
    except Exception as exc:  # PyMuPDFは破損ファイルに対して様々な例外を送出する
        raise DocumentOpenFailure(pdf_path, str(exc)) from exc

    if document.needs_pass:
        document.close()
        raise DocumentOpenFailure(pdf_path, "パスワードで保護されています")

    return document


def _render_page(page: fitz.Page, dpi: int, pdf_path: Path) -> Image.Image:
    """1ページを指定DPI相当のピクセルサイズでレンダリングする。"""

    page_number = page.number + 1
    width_pt = page.rect.width
    height_pt = page.rect.height
    target_width, target_height = _target_pixel_size(width_pt, height_pt, dpi)

    if target_width <= 0 or target_height <= 0:
        raise PageRenderFailure(page_number, pdf_path, "ページサイズが不正です")

    # 縦横それぞれを目標ピクセル数に合わせる
    matrix = fitz.Matrix(target_width / width_pt, target_height / height_pt)

    try:
        pix = page.get_pixmap(matrix=matrix, alpha=False)
        with io.BytesIO(pix.tobytes("ppm")) as image_bytes:
            pil_image = Image.open(image_bytes)
            image = pil_image.copy()
            pil_image.close()
    except Exception as exc:
        raise PageRenderFailure(page_number, pdf_path, str(exc)) from exc

    logger.debug(
        "ページ %d: %.1fx%.1fpt -> %dx%dpx (目標 %dx%dpx)",
        page_number,
        width_pt,
        height_pt,
        image.width,
        image.height,
        target_width,
        target_height,
    )
    return image


def render_pdf_pages(
    pdf_path: str | os.PathLike,
    dpi: int,
) -> tuple[tempfile.TemporaryDirectory, list[RenderedImage]]:
    """PDFの全ページを一時ディレクトリ内のTIFF画像へレンダリングする。

    返される一時ディレクトリの寿命は呼び出し側が管理する。画像を使い終える
    まで保持し、``with`` 文または ``cleanup()`` で必ず解放すること。

    Args:
        pdf_path: 入力PDFのパス。
        dpi: レンダリング解像度。

    Returns:
        (一時ディレクトリ, ページ順に並んだRenderedImageのリスト)

    Raises:
        DocumentOpenFailure: PDFを開けない場合。
        PageRenderFailure: いずれかのページのレンダリングに失敗した場合。
        ImageSaveFailure: レンダリング結果を保存できない場合。
    """

    if dpi <= 0:
        raise ValueError(f"DPIは正の整数で指定してください: {dpi}")

    pdf_path = Path(pdf_path)
    logger.info("PDFを読み込みます: %s", pdf_path)

    with _open_document(pdf_path) as document:
        page_count = document.page_count
        logger.info("%d ページを %d DPI でレンダリングします", page_count, dpi)

        workspace = tempfile.TemporaryDirectory(prefix=_WORKSPACE_PREFIX)
        workspace_dir = Path(workspace.name)
        logger.debug("一時ディレクトリを作成しました: %s", workspace_dir)

        rendered: list[RenderedImage] = []
        try:
            for page_index in range(page_count):
                image = _render_page(document[page_index], dpi, pdf_path)
                image_path = workspace_dir / _IMAGE_NAME_TEMPLATE.format(index=page_index)
                width, height = image.size
                try:
                    image.save(image_path, format="TIFF")
                except (OSError, ValueError) as exc:
                    raise ImageSaveFailure(image_path) from exc
                finally:
                    image.close()
                rendered.append(
                    RenderedImage(
                        path=image_path,
                        width=width,
                        height=height,
                        page_index=page_index,
                    )
                )
        except BaseException:
            workspace.cleanup()
            raise

    return workspace, rendered
