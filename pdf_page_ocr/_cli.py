"""画像PDFをOCRしてテキストを出力するCLI。"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from ._engine import (
    DEFAULT_DPI,
    DEFAULT_LANG,
    DEFAULT_OEM,
    DEFAULT_PSM,
    OEM_RANGE,
    PSM_RANGE,
    RecognitionConfig,
)
from ._exceptions import OCRConversionError
from ._logging import configure_logging
from ._pipeline import run_ocr_pipeline, write_text_output
from ._version import _get_version

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"整数を指定してください: {value}") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError(f"正の整数を指定してください: {value}")
    return number


def _create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="画像ベースのPDFをTesseractでOCRし、テキストを出力します。",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "input_path",
        type=Path,
        help="テキストを抽出したいPDF。例: C:/Users/YourUser/Documents/scan.pdf",
    )
    parser.add_argument(
        "-o",
        "--output-path",
        dest="output_path",
        type=Path,
        default=None,
        help="抽出結果を保存するテキストファイル。省略時は標準出力に書き出します。",
    )
    parser.add_argument(
        "-l",
        "--lang",
        default=DEFAULT_LANG,
        help=f"Tesseractの言語指定。例: eng, jpn, jpn+eng（既定: {DEFAULT_LANG}）",
    )
    parser.add_argument(
        "-d",
        "--dpi",
        type=_positive_int,
        default=DEFAULT_DPI,
        help=f"ページをレンダリングする解像度（既定: {DEFAULT_DPI}）。\n"
        "高いほど精度は上がりますがメモリを多く使います。",
    )
    parser.add_argument(
        "--preprocess",
        action="store_true",
        help="OCR前に適応的二値化を行います。照明ムラのあるスキャンに有効です。",
    )
    parser.add_argument(
        "--tessdata-path",
        dest="tessdata_path",
        type=Path,
        default=None,
        metavar="PATH",
        help="Tesseractの言語データ(tessdata)ディレクトリ。tessdata_bestの利用時などに指定します。",
    )
    parser.add_argument(
        "--psm",
        type=int,
        choices=PSM_RANGE,
        default=DEFAULT_PSM,
        metavar="0-13",
        help=f"ページセグメンテーションモード（既定: {DEFAULT_PSM}）。\n"
        "1: レイアウト自動解析、7: 1行のテキスト",
    )
    parser.add_argument(
        "--oem",
        type=int,
        choices=OEM_RANGE,
        default=DEFAULT_OEM,
        metavar="0-3",
        help=f"OCRエンジンモード（既定: {DEFAULT_OEM}）。1: LSTMのみ、3: 既定エンジン",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="デバッグログを表示します。",
    )
    verbosity.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="警告とエラーのみ表示します。",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )
    return parser


def _log_level(args: argparse.Namespace) -> int | None:
    if args.verbose:
        return logging.DEBUG
    if args.quiet:
        return logging.WARNING
    return None


def main() -> None:
    parser = _create_parser()
    args = parser.parse_args()
    configure_logging(_log_level(args))

    output_path: Path | None = args.output_path
    if output_path is not None and output_path.exists() and sys.stdin.isatty():
        answer = input(f"{output_path} は既に存在します。上書きしますか？ [y/N]: ")
        if answer.lower() not in ("y", "yes"):
            print("中止しました。", file=sys.stderr)
            sys.exit(1)

    config = RecognitionConfig(
        lang=args.lang,
        dpi=args.dpi,
        psm=args.psm,
        oem=args.oem,
        tessdata_path=args.tessdata_path,
    )

    start_time = time.perf_counter()
    logger.info("OCR処理を開始します: %s", args.input_path)

    try:
        result = run_ocr_pipeline(args.input_path, config, preprocess=args.preprocess)
        write_text_output(result.to_text(), output_path)
    except OCRConversionError as exc:
        logger.error("処理に失敗しました: %s", exc)
        print(f"\nエラー: {exc}", file=sys.stderr)
        sys.exit(1)

    logger.info("OCR処理が完了しました（%.1f秒）", time.perf_counter() - start_time)
    if output_path is not None:
        print(f"完了: {output_path}", file=sys.stderr)


if __name__ == "__main__":
    main()
