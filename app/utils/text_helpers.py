import re
import unicodedata


def slugify(value: str) -> str:
    """Convierte un nombre en un slug apto para URL (`Café Negro` -> `cafe-negro`)."""
    normalized = unicodedata.normalize("NFKD", value)
    ascii_value = normalized.encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_value.lower()).strip("-")
    return slug
