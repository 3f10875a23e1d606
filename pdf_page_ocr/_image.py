"""OCR前の画像二値化（適応的しきい値処理）を担うモジュール。"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from PIL import Image, ImageChops, ImageFilter

from ._exceptions import NormalizationFailure

logger = logging.getLogger(__name__)

_DEFAULT_THRESHOLD_RADIUS = 21

try:
    _THRESHOLD_RADIUS = max(
        1, int(os.environ.get("PDF_PAGE_OCR_THRESHOLD_RADIUS", str(_DEFAULT_THRESHOLD_RADIUS)))
    )
except (ValueError, TypeError):
    _THRESHOLD_RADIUS = _DEFAULT_THRESHOLD_RADIUS


def _adaptive_threshold(grayscale: Image.Image, radius: int) -> Image.Image:
    """近傍平均以上の画素を白(255)、それ以外を黒(0)にした二値画像を返す。

    近傍は各画素を中心とした一辺 ``2 * radius + 1`` の正方形。
    """

    local_mean = grayscale.filter(ImageFilter.BoxBlur(radius))
    # 画素値が近傍平均以上なら差分は0になる
    darker_than_mean = ImageChops.subtract(local_mean, grayscale)
    return darker_than_mean.point(lambda x: 255 if x == 0 else 0, mode="L")


def normalize_image(image_path: str | os.PathLike, radius: int | None = None) -> None:
    """画像をグレースケール化・適応的二値化し、同じパスに上書き保存する。

    Args:
        image_path: 対象の画像ファイル。
        radius: 近傍の半径（ピクセル）。省略時は ``PDF_PAGE_OCR_THRESHOLD_RADIUS``
            または21。

    Raises:
        NormalizationFailure: 画像の読み込みまたは保存に失敗した場合。
    """

    image_path = Path(image_path)
    radius = _THRESHOLD_RADIUS if radius is None else max(1, radius)
    logger.debug("前処理（適応的二値化, radius=%d）: %s", radius, image_path)

    try:
        with Image.open(image_path) as image:
            grayscale = image.convert("L")
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise NormalizationFailure(image_path) from exc

    binary = _adaptive_threshold(grayscale, radius)

    try:
        binary.save(image_path, format="TIFF")
    except (OSError, ValueError) as exc:
        raise NormalizationFailure(image_path) from exc
