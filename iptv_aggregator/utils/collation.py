"""
Channel name collation

Orders names the way a Chinese (zh-CN) locale collator does: punctuation,
then digits, then Latin letters case-insensitively, then Han characters by
pinyin. Accents and full-width forms sort with their base character. Case
and accents only decide between names that are otherwise equal.
"""
import re
import unicodedata
from functools import lru_cache

from pypinyin import Style, lazy_pinyin


_HAN_PATTERN = re.compile(r"[\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff]")


def _base_form(char: str) -> str:
    decomposed = unicodedata.normalize("NFKD", char)
    base = "".join(part for part in decomposed if not unicodedata.combining(part))
    return (base or char).casefold()


@lru_cache(maxsize=4096)
def _primary_key(char: str) -> tuple[int, str, str]:
    if _HAN_PATTERN.match(char):
        return (3, lazy_pinyin(char, style=Style.TONE3)[0], char)
    if char.isalpha():
        return (2, _base_form(char), "")
    if char.isdigit():
        return (1, _base_form(char), "")
    return (0, char, "")


def collation_key(name: str) -> tuple:
    """Sort key for a channel name; lower case sorts before upper case on ties"""
    return (tuple(_primary_key(char) for char in name), name.swapcase(), name)
