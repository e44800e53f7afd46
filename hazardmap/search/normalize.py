"""
Text normalization for shelter search.

Japanese text reaches the search box in several encodings of the same
string: half-width or full-width katakana, hiragana, full-width digits and
Latin letters, ideographic spaces. ``normalize`` folds all of them into one
canonical form so fuzzy matching does not depend on how the user typed.
"""

import re
import unicodedata

# Hiragana ぁ..ゖ plus the iteration marks ゝゞ map onto katakana at +0x60
_HIRAGANA_TO_KATAKANA = {cp: cp + 0x60 for cp in range(0x3041, 0x3097)}
_HIRAGANA_TO_KATAKANA.update({0x309D: 0x30FD, 0x309E: 0x30FE})

_ASCII_LOWER = str.maketrans("ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz")

_WHITESPACE_RE = re.compile(r"\s+")


def normalize(text) -> str:
    """
    Canonicalize a search string.

    Steps:
        1. NFKC: half-width katakana to full-width, full-width spaces and
           alphanumerics to half-width
        2. Remove all whitespace
        3. Hiragana to katakana
        4. NFKC again, composing voiced marks that became adjacent in
           steps 2 and 3 (e.g. ワ + U+3099 into ヷ)
        5. Lower-case ASCII letters

    The function is total (None and non-strings normalize to "") and
    idempotent.

    Examples:
        >>> normalize("ｱｲｳ") == normalize("あいう") == "アイウ"
        True
        >>> normalize("ＡＢＣ　１２３")
        'abc123'
    """
    if not isinstance(text, str) or not text:
        return ""

    text = unicodedata.normalize("NFKC", text)
    text = _WHITESPACE_RE.sub("", text)
    text = text.translate(_HIRAGANA_TO_KATAKANA)
    text = unicodedata.normalize("NFKC", text)
    return text.translate(_ASCII_LOWER)
