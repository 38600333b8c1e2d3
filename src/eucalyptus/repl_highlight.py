"""prompt_toolkit lexer for live Eucalyptus syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import Lexer as EucLexer, LexError
from .token_types import TT, Tok

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "function": "bold ansiyellow",
    "operator": "",
    "punctuation": "",
    "comment": "italic ansigray",
    "error": "bold ansired",
}

_TT_GROUP = {
    TT.KEYWORD: "keyword",
    TT.BOOL_LITERAL: "boolean",
    TT.INT_LITERAL: "number",
    TT.FLOAT_LITERAL: "number",
    TT.STRING_LITERAL: "string",
    TT.CHAR_LITERAL: "string",
    TT.IDENTIFIER: "identifier",
    TT.OPERATOR: "operator",
    TT.SYMBOL: "punctuation",
}

_LAYOUT = {TT.EOL, TT.INDENT, TT.EOF}
_QUOTED = {TT.STRING_LITERAL, TT.CHAR_LITERAL}


def _prev_sig_idx(tokens: list[Tok], idx: int) -> int:
    j = idx - 1
    while j >= 0:
        if tokens[j].type not in _LAYOUT:
            return j
        j -= 1
    return -1


def _is_definition_name(tokens: list[Tok], idx: int) -> bool:
    """`let name p ...` defines a function called `name`."""
    prev_idx = _prev_sig_idx(tokens, idx)
    if prev_idx < 0:
        return False

    prev_tok = tokens[prev_idx]
    if prev_tok.type != TT.KEYWORD or prev_tok.value != "let":
        return False

    nxt = tokens[idx + 1] if idx + 1 < len(tokens) else None
    return nxt is not None and nxt.type == TT.IDENTIFIER


def _quoted_end(text: str, start: int) -> int:
    """End offset of the string/char literal opening at `start`."""
    quote = text[start]
    pos = start + 1

    while pos < len(text):
        ch = text[pos]
        if ch == "\\":
            pos += 2
            continue
        pos += 1
        if ch == quote:
            break

    return min(pos, len(text))


def _gap_spans(gap: str) -> StyleAndTextTuples:
    """Whitespace between tokens, or a trailing comment."""
    hash_idx = gap.find("#")
    if hash_idx < 0:
        return [("", gap)]

    spans: StyleAndTextTuples = []
    if hash_idx > 0:
        spans.append(("", gap[:hash_idx]))
    spans.append((GROUP_STYLE["comment"], gap[hash_idx:]))
    return spans


def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    try:
        # Indentation is irrelevant for colouring a single line.
        tokens = EucLexer(text.lstrip(" \t")).tokenize()
    except LexError:
        return [("", text)]

    offset = len(text) - len(text.lstrip(" \t"))
    result: StyleAndTextTuples = []
    pos = 0

    if offset:
        result.append(("", text[:offset]))
        pos = offset

    for i, tok in enumerate(tokens):
        if tok.type in _LAYOUT:
            continue

        start = tok.position + offset
        if tok.type in _QUOTED:
            end = _quoted_end(text, start)
        else:
            end = start + len(str(tok.value))

        if start > pos:
            result.extend(_gap_spans(text[pos:start]))

        group = _TT_GROUP.get(tok.type, "")
        if tok.type == TT.IDENTIFIER and _is_definition_name(tokens, i):
            group = "function"
        result.append((GROUP_STYLE.get(group, ""), text[start:end]))
        pos = end

    # Trailing unstyled text (or comment).
    if pos < len(text):
        result.extend(_gap_spans(text[pos:]))

    return result if result else [("", text)]


class EucalyptusLexer(Lexer):
    """prompt_toolkit Lexer that highlights Eucalyptus source using the RD lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        # Pre-compute highlights for all lines.
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
