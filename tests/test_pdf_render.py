"""render_pdf_pages（ページのレンダリング）のテスト。"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import fitz
import pytest
from PIL import Image

from pdf_page_ocr._exceptions import DocumentOpenFailure, PageRenderFailure
from pdf_page_ocr._pdf import RenderedImage, _target_pixel_size, render_pdf_pages


def _expected_size(width_pt: float, height_pt: float, dpi: int) -> tuple[int, int]:
    return round(width_pt * dpi / 72), round(height_pt * dpi / 72)


class TestTargetPixelSize:
    def test_letter_at_300_dpi(self) -> None:
        assert _target_pixel_size(612, 792, 300) == (2550, 3300)

    def test_native_resolution(self) -> None:
        assert _target_pixel_size(400, 200, 72) == (400, 200)

    def test_rounds_to_nearest(self) -> None:
        # 123 * 150 / 72 = 256.25, 77 * 150 / 72 = 160.41...
        assert _target_pixel_size(123, 77, 150) == (256, 160)
        # 100.5 * 72 / 72 = 100.5 は切り上げ
        assert _target_pixel_size(100.5, 10, 72) == (101, 10)


class TestRenderPdfPages:
    def test_one_image_per_page_in_order(self, sample_multi_page_pdf, isolated_tempdir) -> None:
        workspace, images = render_pdf_pages(sample_multi_page_pdf, 72)
        with workspace:
            assert [image.page_index for image in images] == [0, 1, 2]
            assert [image.page_number for image in images] == [1, 2, 3]
            assert all(image.path.exists() for image in images)
            names = [image.path.name for image in images]
            assert names == sorted(names)
            assert len(set(names)) == 3

    @pytest.mark.parametrize("dpi", [72, 150, 300])
    def test_pixel_size_matches_dpi(self, odd_size_pdf, isolated_tempdir, dpi) -> None:
        page_sizes = [(123, 77), (250.5, 100.25)]
        workspace, images = render_pdf_pages(odd_size_pdf, dpi)
        with workspace:
            for image, (width_pt, height_pt) in zip(images, page_sizes, strict=True):
                expected_w, expected_h = _expected_size(width_pt, height_pt, dpi)
                with Image.open(image.path) as rendered:
                    assert abs(rendered.width - expected_w) <= 1
                    assert abs(rendered.height - expected_h) <= 1
                    assert rendered.size == (image.width, image.height)

    def test_images_live_in_workspace(self, sample_image_pdf, isolated_tempdir) -> None:
        workspace, images = render_pdf_pages(sample_image_pdf, 72)
        workspace_dir = Path(workspace.name)
        assert workspace_dir.parent == isolated_tempdir
        assert images[0].path.parent == workspace_dir
        workspace.cleanup()
        assert not workspace_dir.exists()

    def test_missing_file_raises(self, tmp_path, isolated_tempdir) -> None:
        with pytest.raises(DocumentOpenFailure, match="ファイルが見つかりません"):
            render_pdf_pages(tmp_path / "missing.pdf", 300)
        assert list(isolated_tempdir.iterdir()) == []

    def test_non_pdf_raises(self, not_a_pdf, isolated_tempdir) -> None:
        with pytest.raises(DocumentOpenFailure):
            render_pdf_pages(not_a_pdf, 300)
        assert list(isolated_tempdir.iterdir()) == []

    def test_encrypted_pdf_raises(self, tmp_path, isolated_tempdir) -> None:
        pdf_path = tmp_path / "locked.pdf"
        doc = fitz.open()
        doc.new_page()
        doc.save(
            str(pdf_path),
            encryption=fitz.PDF_ENCRYPT_AES_256,
            owner_pw="owner",
            user_pw="secret",
        )
        doc.close()

        with pytest.raises(DocumentOpenFailure, match="パスワード"):
            render_pdf_pages(pdf_path, 300)

    def test_invalid_dpi(self, sample_image_pdf) -> None:
        with pytest.raises(ValueError):
            render_pdf_pages(sample_image_pdf, 0)

    def test_page_render_failure_cleans_workspace(
        self, sample_multi_page_pdf, isolated_tempdir
    ) -> None:
        """2ページ目のレンダリング失敗で全体が中断し、一時ディレクトリも消える。"""
        original_get_pixmap = fitz.Page.get_pixmap

        def _failing_get_pixmap(page, *args, **kwargs):
            if page.number == 1:
                raise RuntimeError("corrupt page")
            return original_get_pixmap(page, *args, **kwargs)

        with (
            patch.object(fitz.Page, "get_pixmap", _failing_get_pixmap),
            pytest.raises(PageRenderFailure) as exc_info,
        ):
            render_pdf_pages(sample_multi_page_pdf, 72)

        assert exc_info.value.page_number == 2
        assert list(isolated_tempdir.iterdir()) == []

    def test_document_is_closed(self, tmp_path, isolated_tempdir) -> None:
        pdf_path = tmp_path / "input.pdf"
        pdf_path.write_bytes(b"%PDF-1.4 dummy")

        mock_doc = MagicMock()
        mock_doc.needs_pass = False
        mock_doc.page_count = 0
        mock_doc.__enter__ = MagicMock(return_value=mock_doc)
        mock_doc.__exit__ = MagicMock(return_value=False)

        with patch("pdf_page_ocr._pdf.fitz.open", return_value=mock_doc):
            workspace, images = render_pdf_pages(pdf_path, 300)

        with workspace:
            assert images == []
        mock_doc.__exit__.assert_called_once()


class TestRenderedImage:
    def test_page_number_is_one_based(self) -> None:
        image = RenderedImage(path=Path("page_0004.tiff"), width=10, height=20, page_index=4)
        assert image.page_number == 5
