"""Static extension -> category table."""

from __future__ import annotations

from fileindex.schemas.files import FileCategory

EXTENSION_CATEGORIES: dict[str, FileCategory] = {}

_TABLE = {
    FileCategory.IMAGE: ("jpg", "jpeg", "png", "gif", "bmp", "webp", "svg", "ico"),
    FileCategory.VIDEO: ("mp4", "avi", "mkv", "mov", "wmv", "flv", "webm"),
    FileCategory.PDF: ("pdf",),
    FileCategory.CAD: ("dwg", "dxf", "dwf"),
    FileCategory.DOCUMENT: ("doc", "docx", "txt", "rtf", "odt"),
    FileCategory.SPREADSHEET: ("xls", "xlsx", "csv", "ods"),
    FileCategory.ARCHIVE: ("zip", "rar", "7z", "tar", "gz"),
}
for _category, _exts in _TABLE.items():
    for _ext in _exts:
        EXTENSION_CATEGORIES[_ext] = _category


def normalize_extension(extension: str) -> str:
    """'JPG', '.jpg' and 'jpg' all become '.jpg'; empty stays empty."""
    ext = extension.strip().lower()
    if not ext:
        return ""
    return ext if ext.startswith(".") else f".{ext}"


def get_file_category(extension: str) -> FileCategory:
    return EXTENSION_CATEGORIES.get(extension.lower().lstrip("."), FileCategory.OTHER)
