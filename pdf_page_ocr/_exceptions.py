"""OCR処理で使用する例外クラス。

``OCRConversionError`` の派生は処理全体を中断する致命的なエラー、
``PageRecognitionError`` の派生は1ページ分だけを失敗扱いにするエラー。
"""

from __future__ import annotations

from pathlib import Path


class OCRConversionError(Exception):
    """OCR変換処理で発生した致命的な例外。"""


class DocumentOpenFailure(OCRConversionError):
    """PDFドキュメントを開けなかったことを示す例外。"""

    def __init__(self, path: str | Path, reason: str = "") -> None:
        self.path = Path(path)
        message = f"PDFファイルを開けませんでした: {self.path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class PageRenderFailure(OCRConversionError):
    """ページのレンダリングに失敗したことを示す例外。"""

    def __init__(self, page_number: int, path: str | Path, reason: str = "") -> None:
        self.page_number = page_number
        self.path = Path(path)
        message = f"{self.path} の {page_number} ページ目をレンダリングできませんでした"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ImageSaveFailure(OCRConversionError):
    """レンダリング結果を一時画像として保存できなかったことを示す例外。"""

    def __init__(self, image_path: str | Path) -> None:
        self.image_path = Path(image_path)
        super().__init__(f"一時画像を保存できませんでした: {self.image_path}")


class NormalizationFailure(OCRConversionError):
    """画像の二値化前処理に失敗したことを示す例外。"""

    def __init__(self, image_path: str | Path) -> None:
        self.image_path = Path(image_path)
        super().__init__(f"画像の前処理に失敗しました: {self.image_path}")


class OutputWriteFailure(OCRConversionError):
    """抽出結果を書き込めなかったことを示す例外。"""


class PageRecognitionError(Exception):
    """1ページ分のOCRに失敗したことを示す例外（処理は継続される）。"""


class EngineInitFailure(PageRecognitionError):
    """Tesseractエンジンを初期化できなかったことを示す例外。"""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Tesseractエンジンを初期化できませんでした: {message}")


class VariableRejected(PageRecognitionError):
    """Tesseractの設定変数が受け付けられなかったことを示す例外。"""

    def __init__(self, key: str, value: object) -> None:
        self.key = key
        self.value = str(value)
        super().__init__(f"Tesseractの変数 '{key}' に '{self.value}' を設定できませんでした")


class RecognitionFailure(PageRecognitionError):
    """画像からのテキスト抽出に失敗したことを示す例外。"""

    def __init__(self, image_path: str | Path, reason: str = "") -> None:
        self.image_path = Path(image_path)
        message = f"画像のOCRに失敗しました: {self.image_path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class InvalidImagePath(PageRecognitionError):
    """画像パスをTesseractに渡せる文字列に変換できないことを示す例外。"""

    def __init__(self, image_path: str | Path) -> None:
        self.image_path = Path(image_path)
        super().__init__(f"画像パスがUTF-8として不正です: {self.image_path!r}")
