"""テスト共通の設定とフィクスチャ。"""

from __future__ import annotations

import io
import logging
import shutil
import tempfile

import fitz
import pytest
from PIL import Image, ImageDraw, ImageFont


def _has_tesseract() -> bool:
    return shutil.which("tesseract") is not None


requires_tesseract = pytest.mark.skipif(
    not _has_tesseract(),
    reason="Tesseractがインストールされていません",
)


def _load_font(size: int) -> ImageFont.ImageFont:
    try:
        return ImageFont.truetype("DejaVuSans.ttf", size)
    except OSError:
        return ImageFont.load_default()


def _text_png_bytes(text: str, size: tuple[int, int] = (400, 200)) -> bytes:
    img = Image.new("RGB", size, "white")
    draw = ImageDraw.Draw(img)
    draw.text((50, 50), text, fill="black", font=_load_font(36))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def isolated_tempdir(tmp_path, monkeypatch):
    """一時ディレクトリの作成先をテスト専用ディレクトリに切り替える。"""
    temp_root = tmp_path / "tmp_root"
    temp_root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(temp_root))
    return temp_root


@pytest.fixture()
def sample_image_with_text(tmp_path):
    """PILで 'Hello World 12345' を描画したPNG画像を生成する。"""
    img = Image.new("RGB", (800, 200), "white")
    draw = ImageDraw.Draw(img)
    draw.text((50, 50), "Hello World 12345", fill="black", font=_load_font(48))
    path = tmp_path / "sample_text.png"
    img.save(str(path))
    return path


@pytest.fixture()
def sample_image_pdf(tmp_path, sample_image_with_text):
    """テキスト画像を埋め込んだ1ページPDFを生成する。"""
    pdf_path = tmp_path / "sample.pdf"
    doc = fitz.open()
    page = doc.new_page(width=612, height=792)
    page.insert_image(page.rect, filename=str(sample_image_with_text))
    doc.save(str(pdf_path))
    doc.close()
    return pdf_path


@pytest.fixture()
def sample_multi_page_pdf(tmp_path):
    """3ページの画像PDFを生成する。"""
    pdf_path = tmp_path / "multi_page.pdf"
    doc = fitz.open()
    for i in range(3):
        page = doc.new_page(width=400, height=200)
        page.insert_image(page.rect, stream=_text_png_bytes(f"Page {i + 1}"))
    doc.save(str(pdf_path))
    doc.close()
    return pdf_path


@pytest.fixture()
def odd_size_pdf(tmp_path):
    """ページごとにサイズが異なる2ページPDFを生成する。"""
    pdf_path = tmp_path / "odd_size.pdf"
    doc = fitz.open()
    doc.new_page(width=123, height=77)
    doc.new_page(width=250.5, height=100.25)
    doc.save(str(pdf_path))
    doc.close()
    return pdf_path


@pytest.fixture()
def not_a_pdf(tmp_path):
    """PDFではないファイルを生成する。"""
    path = tmp_path / "broken.pdf"
    path.write_text("this is not a pdf", encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """CLIテストで設定したハンドラやレベルを後続のテストに持ち越さない。"""
    logger = logging.getLogger("pdf_page_ocr")
    yield
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
