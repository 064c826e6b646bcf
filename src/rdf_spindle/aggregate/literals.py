"""
Literal handling for property fusion: language buckets and datatype coercion.
"""

from typing import Optional

from rdf_spindle.errors import InvalidLanguageTag
from rdf_spindle.terms import Term
from rdf_spindle.vocab import XSD_DECIMAL, XSD_INTEGER_TYPES

MIN_LANG_LENGTH = 2
MAX_LANG_LENGTH = 7


def normalize_lang(lang: Optional[str]) -> str:
    """
    Normalize a language tag into a bucket key.

    Tags may only contain letters, '-' and '_', and must be 2 to 7
    characters long. The result is lower-cased with '_' replaced by '-';
    a missing tag yields the empty bucket "".

    Raises:
        InvalidLanguageTag: if the tag cannot be bucketed
    """
    if not lang:
        return ""
    for ch in lang:
        if not (ch.isascii() and ch.isalpha()) and ch not in "-_":
            raise InvalidLanguageTag(f"Invalid character {ch!r} in language tag {lang!r}")
    if not MIN_LANG_LENGTH <= len(lang) <= MAX_LANG_LENGTH:
        raise InvalidLanguageTag(f"Invalid language tag {lang!r}")
    return lang.lower().replace("_", "-")


def is_integer_datatype(datatype: Optional[str]) -> bool:
    return datatype in XSD_INTEGER_TYPES


def coerce_datatype(literal: Term, expected: str) -> Optional[Term]:
    """
    Re-type a literal to the expected datatype, or return None if it doesn't conform.

    A literal conforms if its datatype equals the expected one, if it is an
    XSD integer type and xsd:decimal is expected, or if it has neither a
    datatype nor a language tag.
    """
    if literal.datatype is None:
        if literal.lang:
            return None
        return literal.with_datatype(expected)
    datatype = literal.datatype
    if expected == XSD_DECIMAL and is_integer_datatype(datatype):
        datatype = expected
    if datatype != expected:
        return None
    return literal.with_datatype(expected)
