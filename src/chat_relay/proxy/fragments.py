"""
Scanner tolérant de champs dans des fragments JSON partiels.

Le service distant envoie de nombreuses petites lignes (souvent préfixées
par `data: `) qui ne sont pas toujours du JSON complet. Plutôt que de
parser chaque ligne, on cherche une clé `"nom"` suivie d'un `:`, avec des
espaces quelconques autour, et on capture la chaîne qui suit jusqu'au
prochain guillemet non échappé.
"""
from typing import Optional

_WHITESPACE = " \t\r\n"

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    '"': '"',
    "\\": "\\",
    "/": "/",
}

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def _is_escaped(line: str, index: int) -> bool:
    """Vrai si le caractère à `index` est précédé d'un nombre impair de `\\`."""
    backslashes = 0
    i = index - 1
    while i >= 0 and line[i] == "\\":
        backslashes += 1
        i -= 1
    return backslashes % 2 == 1


def _skip_whitespace(line: str, index: int) -> int:
    while index < len(line) and line[index] in _WHITESPACE:
        index += 1
    return index


def _iter_value_offsets(line: str, name: str):
    """Yield la position de la valeur pour chaque occurrence de la clé `name`."""
    token = f'"{name}"'
    pos = 0
    while True:
        idx = line.find(token, pos)
        if idx == -1:
            return
        pos = idx + 1
        if _is_escaped(line, idx):
            continue
        j = _skip_whitespace(line, idx + len(token))
        if j >= len(line) or line[j] != ":":
            # "name" apparaît comme valeur, pas comme clé
            continue
        yield _skip_whitespace(line, j + 1)


def has_field(line: str, name: str) -> bool:
    """Indique si la ligne contient la clé `name` (quelle que soit sa valeur)."""
    for _ in _iter_value_offsets(line, name):
        return True
    return False


def find_string_field(line: str, name: str) -> Optional[str]:
    """
    Retourne le texte brut (encore échappé) de la première valeur chaîne
    associée à la clé `name`.

    Les occurrences dont la valeur n'est pas une chaîne (`null`, nombre,
    objet) ou dont la chaîne n'est pas terminée sont ignorées.

    Args:
        line: Ligne brute du stream
        name: Nom du champ recherché

    Returns:
        Contenu entre guillemets, ou None si absent
    """
    for start in _iter_value_offsets(line, name):
        if start >= len(line) or line[start] != '"':
            continue
        k = start + 1
        while k < len(line):
            c = line[k]
            if c == "\\":
                k += 2
                continue
            if c == '"':
                return line[start + 1:k]
            k += 1
    return None


def _read_unicode_escape(raw: str, i: int) -> Optional[int]:
    digits = raw[i + 2:i + 6]
    if len(digits) == 4 and all(d in _HEX_DIGITS for d in digits):
        return int(digits, 16)
    return None


def decode_escapes(raw: str) -> str:
    """
    Convertit les séquences d'échappement JSON en caractères réels.

    `\\n`, `\\t`, `\\r`, `\\"`, `\\\\`, `\\/` et `\\uXXXX` sont décodés. Les
    séquences inconnues sont conservées telles quelles.
    """
    if "\\" not in raw:
        return raw

    parts = []
    i = 0
    n = len(raw)
    while i < n:
        c = raw[i]
        if c != "\\" or i + 1 >= n:
            parts.append(c)
            i += 1
            continue

        nxt = raw[i + 1]
        if nxt in _SIMPLE_ESCAPES:
            parts.append(_SIMPLE_ESCAPES[nxt])
            i += 2
        elif nxt == "u" and (code := _read_unicode_escape(raw, i)) is not None:
            i += 6
            if 0xD800 <= code < 0xDC00 and raw.startswith("\\u", i):
                low = _read_unicode_escape(raw, i)
                if low is not None and 0xDC00 <= low < 0xE000:
                    code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
                    i += 6
            if 0xD800 <= code < 0xE000:
                # Surrogate isolé: non encodable en UTF-8
                parts.append("\ufffd")
            else:
                parts.append(chr(code))
        else:
            parts.append(raw[i:i + 2])
            i += 2
    return "".join(parts)
