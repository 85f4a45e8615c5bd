"""
Recortes Backend - Object Key Builder
======================================

What:  Derives the storage object name of a cut image from its metadata.
Why:   Object names are content-derived so that the bucket stays browsable
       by product (bone-americano_frente-copa_linho_azul.png) instead of
       filling up with opaque UUIDs.
How:   Four metadata fields are sanitized independently and joined with "_"
       in a fixed order; the original file extension is appended.

Consequences of content-derived names:
    - Pure function of the input: no randomness, no timestamps
    - Two uploads with identical metadata target the same object, and the
      upload is an upsert, so the newer image replaces the older one

Examples:
    make_key("Boné Americano", "Frente Copa", "Linho Premium", "Azul Marinho")
        → "bone-americano_frente-copa_linho-premium_azul-marinho"
    make_key("Boné", None, "  ", "Preto")
        → "bone_preto"
"""

import mimetypes
import re
import unicodedata
from pathlib import PurePosixPath
from typing import Mapping, Optional

_WHITESPACE_RUN = re.compile(r"\s+")

# Fixed order of the key parts
KEY_FIELDS = ("product_type", "cut_type", "material", "material_color")

# Extensions for uploads whose filename carries none
_CONTENT_TYPE_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/webp": ".webp",
    "image/gif": ".gif",
}


def sanitize(value: Optional[str]) -> str:
    """
    Normalize one metadata field into a key segment.

    Lower-cases, strips diacritics (NFD + drop combining marks) and turns
    every whitespace run into a single hyphen. Everything else, punctuation
    included, is kept as-is. None, "" and whitespace-only input give "".
    """
    if value is None or not str(value).strip():
        return ""
    decomposed = unicodedata.normalize("NFD", str(value).lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _WHITESPACE_RUN.sub("-", stripped)


def make_key(
    product_type: Optional[str],
    cut_type: Optional[str],
    material: Optional[str],
    material_color: Optional[str],
) -> str:
    """Join the sanitized parts with "_", skipping the empty ones."""
    parts = (sanitize(product_type), sanitize(cut_type), sanitize(material), sanitize(material_color))
    return "_".join(part for part in parts if part)


def file_extension(filename: Optional[str], content_type: Optional[str] = None) -> str:
    """
    Extension of the uploaded file, lower-cased and with its leading dot.

    Falls back to the content type when the filename has no suffix, and to
    "" when neither tells us anything.
    """
    suffix = PurePosixPath(filename or "").suffix.lower()
    if suffix:
        return suffix
    if content_type:
        return _CONTENT_TYPE_EXTENSIONS.get(content_type) or mimetypes.guess_extension(content_type) or ""
    return ""


def build_object_name(
    metadata: Mapping[str, Optional[str]],
    filename: Optional[str],
    content_type: Optional[str] = None,
) -> str:
    """Object name for an image: key from the metadata plus the file extension."""
    key = make_key(*(metadata.get(field) for field in KEY_FIELDS))
    return f"{key}{file_extension(filename, content_type)}"
