"""
Lexer for Eucalyptus

Tokenizes Eucalyptus source code into a flat stream of tokens.

Features:
- Single-pass tokenization
- Indentation-aware (one INDENT per indentation unit at line start)
- Position tracking (offset, line, column)
- Blank and comment-only lines produce no tokens
"""

from typing import List, Optional

from .token_types import TT, Tok
from .types import EucalyptusError
from .utils import indent_width as default_indent_width

# ============================================================================
# Lexer Implementation
# ============================================================================

class LexError(EucalyptusError):
    """Lexical analysis error"""
    pass

class Lexer:
    """
    Eucalyptus lexer.

    Indentation is not a stack: every line carries as many INDENT tokens
    as it has indentation units, and the parser strips one per block
    level it descends into.
    """

    KEYWORDS = {'let', 'fun'}

    BOOLEANS = {'true', 'false'}

    # Longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character
        ('==', TT.OPERATOR),
        ('!=', TT.OPERATOR),
        ('<=', TT.OPERATOR),
        ('>=', TT.OPERATOR),
        ('->', TT.SYMBOL),

        # Single-character
        ('^', TT.OPERATOR),
        ('*', TT.OPERATOR),
        ('/', TT.OPERATOR),
        ('%', TT.OPERATOR),
        ('+', TT.OPERATOR),
        ('-', TT.OPERATOR),
        ('<', TT.OPERATOR),
        ('>', TT.OPERATOR),
        ('=', TT.SYMBOL),
        ('(', TT.SYMBOL),
        (')', TT.SYMBOL),
        ('[', TT.SYMBOL),
        (']', TT.SYMBOL),
        ('{', TT.SYMBOL),
        ('}', TT.SYMBOL),
        (',', TT.SYMBOL),
    ]

    ESCAPES = {
        'n': '\n',
        't': '\t',
        'r': '\r',
        '0': '\0',
        '\\': '\\',
        '"': '"',
        "'": "'",
    }

    def __init__(self, source: str, indent_width: Optional[int] = None):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Tok] = []
        self.indent_width = indent_width if indent_width is not None else default_indent_width()
        self.at_line_start = True

        # Start of the token currently being scanned
        self.start_pos = 0
        self.start_line = 1
        self.start_column = 1

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while self.pos < len(self.source):
            self.scan_token()

        if self.tokens and self.tokens[-1].type != TT.EOL:
            self.mark()
            self.emit(TT.EOL, '\n')

        self.mark()
        self.emit(TT.EOF, None)
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        if self.at_line_start:
            self.handle_indentation()
            return

        if self.skip_whitespace():
            return

        if self.peek() == '#':
            self.skip_comment()
            return

        self.mark()

        if self.peek() in ('\n', '\r'):
            self.scan_newline()
            return

        if self.peek() == '"':
            self.scan_string()
            return

        if self.peek() == "'":
            self.scan_char()
            return

        if self.peek().isdigit():
            self.scan_number()
            return

        if self.peek().isalpha() or self.peek() == '_':
            self.scan_identifier()
            return

        self.scan_operator()

    # ========================================================================
    # Indentation Handling
    # ========================================================================

    def handle_indentation(self):
        """
        Handle indentation at start of line.
        Blank and comment-only lines are consumed whole.
        """
        self.mark()
        units: List[str] = []
        spaces = ''

        while self.peek() in (' ', '\t'):
            ch = self.advance()
            if ch == '\t':
                if spaces:
                    raise LexError(f"Indentation mismatch at line {self.line}", self.line, self.column)
                units.append(ch)
                continue

            spaces += ch
            if len(spaces) == self.indent_width:
                units.append(spaces)
                spaces = ''

        if self.peek() == '#':
            self.skip_comment()

        if self.peek() in ('\n', '\r'):
            self.consume_newline()
            return

        if self.pos >= len(self.source):
            self.at_line_start = False
            return

        if spaces:
            raise LexError(
                f"Indentation mismatch at line {self.line}: "
                f"{len(spaces)} stray space(s) with indent width {self.indent_width}",
                self.line,
                self.column,
            )

        self.at_line_start = False
        offset = self.start_pos
        column = 1

        for unit in units:
            self.tokens.append(Tok(TT.INDENT, unit, offset, self.line, column))
            offset += len(unit)
            column += len(unit)

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_newline(self):
        """Scan newline character"""
        self.consume_newline()
        self.emit(TT.EOL, '\n')

    def consume_newline(self):
        if self.peek() == '\r' and self.peek(1) == '\n':
            self.advance(2)  # consume CRLF
        else:
            self.advance()

        self.line += 1
        self.column = 1
        self.at_line_start = True

    def scan_escape(self) -> str:
        self.advance()  # backslash
        ch = self.peek()
        if ch not in self.ESCAPES:
            raise LexError(f"Unknown escape sequence '\\{ch}'", self.line, self.column)
        self.advance()
        return self.ESCAPES[ch]

    def scan_string(self):
        """Scan string literal: "..." """
        self.advance()  # opening quote
        value = ''

        while self.pos < len(self.source) and self.peek() != '"':
            if self.peek() == '\n':
                break
            if self.peek() == '\\':
                value += self.scan_escape()
            else:
                value += self.advance()

        if self.peek() != '"':
            raise LexError(f"Unterminated string at line {self.start_line}", self.start_line, self.start_column)

        self.advance()  # closing quote
        self.emit(TT.STRING_LITERAL, value)

    def scan_char(self):
        """Scan char literal: 'c'"""
        self.advance()  # opening quote

        if self.peek() == '\\':
            value = self.scan_escape()
        elif self.peek() in ("'", '\n', '\0'):
            raise LexError("Empty char literal", self.start_line, self.start_column)
        else:
            value = self.advance()

        if self.peek() != "'":
            raise LexError("Char literal must hold exactly one character", self.start_line, self.start_column)

        self.advance()  # closing quote
        self.emit(TT.CHAR_LITERAL, value)

    def scan_number(self):
        """Scan number literal"""
        value = ''
        token_type = TT.INT_LITERAL

        while self.peek().isdigit():
            value += self.advance()

        if self.peek() == '.' and self.peek(1).isdigit():
            token_type = TT.FLOAT_LITERAL
            value += self.advance()  # .
            while self.peek().isdigit():
                value += self.advance()

        self.emit(token_type, value)

    def scan_identifier(self):
        """Scan identifier, keyword or boolean literal"""
        value = ''

        while self.peek().isalnum() or self.peek() == '_':
            value += self.advance()

        if value in self.KEYWORDS:
            self.emit(TT.KEYWORD, value)
        elif value in self.BOOLEANS:
            self.emit(TT.BOOL_LITERAL, value)
        else:
            self.emit(TT.IDENTIFIER, value)

    def scan_operator(self):
        """Scan operators and punctuation"""
        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                self.emit(op_type, op_str)
                return

        ch = self.peek()
        raise LexError(f"Unexpected character '{ch}'", self.line, self.column)

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        result = ''
        for _ in range(n):
            ch = self.source[self.pos] if self.pos < len(self.source) else '\0'
            result += ch
            self.pos += 1
            self.column += 1
        return result

    def skip_whitespace(self) -> bool:
        """Skip whitespace (not newlines), return True if any skipped"""
        skipped = False
        while self.peek() in (' ', '\t'):
            self.advance()
            skipped = True
        return skipped

    def skip_comment(self):
        """Skip comment until end of line"""
        while self.peek() not in ('\n', '\r', '\0'):
            self.advance()

    def mark(self):
        self.start_pos = self.pos
        self.start_line = self.line
        self.start_column = self.column

    def emit(self, token_type: TT, value):
        """Emit a token positioned at the last mark()"""
        self.tokens.append(Tok(
            type=token_type,
            value=value,
            position=self.start_pos,
            line=self.start_line,
            column=self.start_column,
        ))


def tokenize(source: str, indent_width: Optional[int] = None) -> List[Tok]:
    """Convenience function to tokenize source"""
    lexer = Lexer(source, indent_width=indent_width)
    return lexer.tokenize()
