import re
import unicodedata


def slugify(text: str) -> str:
    """Lowercase ASCII slug: accents dropped, words joined by single hyphens."""
    text = unicodedata.normalize("NFD", text.lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = re.sub(r"[^a-z0-9\s-]", "", text).strip()
    text = re.sub(r"\s+", "-", text)
    return re.sub(r"-+", "-", text)
