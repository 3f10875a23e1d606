"""画像PDFをページ単位でOCRし、テキストを抽出するユーティリティ集。"""

from ._engine import RecognitionConfig, recognize_image
from ._environment import find_and_set_tesseract_path
from ._exceptions import (
    DocumentOpenFailure,
    EngineInitFailure,
    ImageSaveFailure,
    InvalidImagePath,
    NormalizationFailure,
    OCRConversionError,
    OutputWriteFailure,
    PageRecognitionError,
    PageRenderFailure,
    RecognitionFailure,
    VariableRejected,
)
from ._image import normalize_image
from ._pdf import RenderedImage, render_pdf_pages
from ._pipeline import (
    DocumentResult,
    PageResult,
    extract_text_from_image_pdf,
    extract_text_to_file,
    run_ocr_pipeline,
    write_text_output,
)
from ._version import __version__

__all__ = [
    "DocumentOpenFailure",
    "DocumentResult",
    "EngineInitFailure",
    "ImageSaveFailure",
    "InvalidImagePath",
    "NormalizationFailure",
    "OCRConversionError",
    "OutputWriteFailure",
    "PageRecognitionError",
    "PageRenderFailure",
    "PageResult",
    "RecognitionConfig",
    "RecognitionFailure",
    "RenderedImage",
    "VariableRejected",
    "__version__",
    "extract_text_from_image_pdf",
    "extract_text_to_file",
    "find_and_set_tesseract_path",
    "normalize_image",
    "recognize_image",
    "render_pdf_pages",
    "run_ocr_pipeline",
    "write_text_output",
]
