"""画像PDFからテキストを抽出するCLI（インストールせずに実行する場合の入口）。

例:
    python extract_text_from_pdf.py scan.pdf -o scan.txt --lang jpn --preprocess
"""

from __future__ import annotations

from pdf_page_ocr._cli import main

if __name__ == "__main__":
    main()
