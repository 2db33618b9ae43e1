import re
import unicodedata


def safe_filename(filename: str | None, default: str = "file") -> str:
    """
    Normalize an uploaded file name so it is safe to write to local disk
    - strip directories and accents
    - keep letters, digits, dot, dash and underscore
    """
    if not filename:
        return default

    name = filename.replace("\\", "/").split("/")[-1]

    normalized = unicodedata.normalize("NFD", name)
    no_accents = "".join(c for c in normalized if unicodedata.category(c) != "Mn")

    text = re.sub(r"[^A-Za-z0-9._-]+", "-", no_accents)
    text = re.sub(r"-{2,}", "-", text).strip("-.")

    return text or default


def parse_include(include: str | None) -> set[str]:
    """`?include=progress,allUsers` -> {"progress", "allUsers"}"""
    if not include:
        return set()
    return {part.strip() for part in include.split(",") if part.strip()}
