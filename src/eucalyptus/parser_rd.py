"""
Recursive Descent Parser for Eucalyptus

Structure:
- Lexer: Token stream from source
- Parser: Recursive descent for statements and terms, precedence
  climbing (two stacks) for binary operations
- AST: lark Tree/Token nodes, positions carried on Token attributes
  and Tree.meta

Disambiguation is explicit one-token lookahead:
- `let name ident ...` is a function definition, `let name =` a binding
- `ident =` at statement start is an assignment
- an identifier (or parenthesized expression) followed by a literal,
  identifier, `(` or `{` is being called with arguments
"""

from typing import List, Optional

from lark import Tree

from .token_types import LITERAL_TYPES, TT, Operand, Tok
from .tree import Node, make_token, make_tree, tree_label
from .types import EucalyptusError

# ============================================================================
# Parser
# ============================================================================

class ParseError(EucalyptusError):
    """Parse error with position info"""
    def __init__(self, message: str, token: Optional[Tok] = None):
        line = token.line if token is not None else None
        column = token.column if token is not None else None
        super().__init__(message, line, column)
        self.token = token
        self.position = token.position if token is not None else None

# Tokens after an identifier that mean "this identifier stands alone"
TERMINATORS = ('}', ']', ',', ')')

LEAF_TYPES = {
    TT.INT_LITERAL: 'NUMBER',
    TT.FLOAT_LITERAL: 'NUMBER',
    TT.BOOL_LITERAL: 'BOOL',
    TT.STRING_LITERAL: 'STRING',
    TT.CHAR_LITERAL: 'CHAR',
}

class Parser:
    """
    Recursive descent parser for Eucalyptus.

    Operator precedence (tightest first):
    0. ^
    1. * / %
    2. + -
    3. == !=
    4. < > <= >=
    All binary operators are left-associative.
    """

    def __init__(self, tokens: List[Tok]):
        if not tokens or tokens[-1].type != TT.EOF:
            last = tokens[-1] if tokens else None
            tokens = list(tokens) + [_eof_after(last)]
        self.tokens = tokens
        self.pos = 0

    # ========================================================================
    # Token Navigation
    # ========================================================================

    @property
    def current(self) -> Tok:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return self.tokens[-1]

    def remaining(self) -> int:
        return len(self.tokens) - self.pos

    def peek(self, offset: int = 0) -> Tok:
        """Look ahead at token"""
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        prev = self.current
        if self.pos < len(self.tokens):
            self.pos += 1
        return prev

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def check_content(self, *values: str) -> bool:
        """Check if current token is a symbol/operator with one of the given texts"""
        return self.current.type in (TT.SYMBOL, TT.OPERATOR) and self.current.value in values

    def match_content(self, value: str) -> bool:
        if self.check_content(value):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, message: Optional[str] = None) -> Tok:
        """Consume token of expected type or raise error"""
        if not self.check(token_type):
            msg = message or f"expected {_describe_type(token_type)}, found {_describe(self.current)}"
            raise ParseError(msg, self.current)
        return self.advance()

    def expect_content(self, value: str) -> Tok:
        if not self.check_content(value):
            raise ParseError(f"expected '{value}', found {_describe(self.current)}", self.current)
        return self.advance()

    def skip_layout(self) -> None:
        """Skip line breaks and indentation markers"""
        while self.check(TT.EOL, TT.INDENT) and self.remaining() > 1:
            self.advance()

    def at_end(self) -> bool:
        return self.remaining() < 2

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> List[Tree]:
        """Parse entire program into a list of top-level statements"""
        stmts: List[Tree] = []

        while not self.at_end():
            self.skip_layout()
            if self.at_end():
                break
            stmts.append(self.parse_statement())

        return stmts

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_statement(self) -> Tree:
        """
        Parse a single statement:
        - let binding / function definition
        - assignment (ident = expr)
        - expression
        """
        self.skip_layout()
        start = self.current

        if self.check(TT.KEYWORD) and start.value == 'let':
            return self.parse_binding()

        if self.check(TT.IDENTIFIER):
            nxt = self.peek(1)
            if nxt.type == TT.SYMBOL and nxt.value == '=':
                return self.parse_assignment()

        expr = self.parse_expression()
        return make_tree('expr_stmt', [expr], start)

    def parse_binding(self) -> Tree:
        """
        Parse `let` forms:
        let name = expr                    (binding)
        let name p1 p2 = expr | <block>    (function)
        """
        let_tok = self.advance()
        name_tok = self.expect(TT.IDENTIFIER, f"expected name after 'let', found {_describe(self.current)}")
        name = make_token('IDENT', name_tok.value, name_tok)

        if self.check(TT.IDENTIFIER):
            params = self.parse_params('=')
            body = self.parse_body()
            return make_tree('function', [name, params, body], let_tok)

        self.skip_layout()
        self.expect_content('=')
        right = self.parse_value_expression()

        return make_tree('binding', [name, right], let_tok)

    def parse_assignment(self) -> Tree:
        """Parse assignment: ident = expr"""
        name_tok = self.advance()
        self.advance()  # '='
        right = self.parse_value_expression()
        return make_tree('assignment', [make_token('IDENT', name_tok.value, name_tok), right], name_tok)

    def parse_params(self, closer: str) -> Tree:
        """Collect parameter identifiers up to (and consuming) `closer`"""
        start = self.current
        params: List[Node] = []

        while not self.check_content(closer):
            if self.check(TT.EOL, TT.EOF):
                raise ParseError(f"expected '{closer}', found {_describe(self.current)}", self.current)
            param = self.expect(TT.IDENTIFIER, f"expected parameter name, found {_describe(self.current)}")
            params.append(make_token('IDENT', param.value, param))

        self.advance()  # closer
        return make_tree('paramlist', params, start)

    def parse_body(self) -> Node:
        """Body after `=` or `->`: an expression, or an indented block after a line break"""
        if self.check(TT.EOL):
            self.advance()
            return self.parse_block()

        return self.parse_value_expression()

    def parse_block(self) -> Tree:
        """
        Capture every line that starts with an INDENT marker, strip one
        INDENT from each, and parse the captured stream with a nested
        Parser. Deeper INDENTs stay in place for nested blocks.
        """
        start = self.current
        captured: List[Tok] = []

        while self.check(TT.INDENT):
            self.advance()
            while not self.check(TT.EOL, TT.EOF):
                captured.append(self.advance())
            if self.check(TT.EOL):
                captured.append(self.advance())

        if not any(tok.type not in (TT.EOL, TT.INDENT) for tok in captured):
            raise ParseError(f"expected indented block, found {_describe(self.current)}", self.current)

        captured.append(_eof_after(captured[-1]))
        stmts = Parser(captured).parse()

        return make_tree('block', stmts, start)

    # ========================================================================
    # Expressions
    # ========================================================================

    def parse_value_expression(self) -> Node:
        """An expression that must be present (right-hand sides, bodies)"""
        expr = self.parse_expression()
        if tree_label(expr) == 'eof':
            raise ParseError("expected expression, found end of input", self.current)
        return expr

    def parse_expression(self) -> Node:
        """Parse term, then a binary operation if an operator follows"""
        self.skip_layout()
        expr = self.parse_term()

        if tree_label(expr) == 'eof':
            return expr

        if not self.at_end() and self.check(TT.OPERATOR):
            return self.parse_operation(expr)

        return expr

    def parse_term(self) -> Node:
        """
        Parse a term:
        - literals
        - identifier, optionally indexed or called
        - ( expr ), optionally indexed or called
        - { array }
        - fun params -> body
        """
        self.skip_layout()

        if self.at_end():
            return make_tree('eof', [], self.current)

        tok = self.current

        if tok.type in LITERAL_TYPES:
            self.advance()
            return make_token(LEAF_TYPES[tok.type], tok.value, tok)

        if tok.type == TT.IDENTIFIER:
            self.advance()
            ident = make_token('IDENT', tok.value, tok)
            return self.parse_suffix(ident)

        if tok.type == TT.SYMBOL:
            if tok.value == '(':
                return self.parse_group()
            if tok.value == '{':
                return self.parse_array()
            raise ParseError(f"unexpected symbol: {tok.value}", tok)

        if tok.type == TT.KEYWORD:
            if tok.value == 'fun':
                return self.parse_lambda()
            raise ParseError(f"unexpected keyword: {tok.value}", tok)

        raise ParseError(f"unexpected: {_describe(tok)}", tok)

    def parse_suffix(self, base: Node) -> Node:
        """Index or call following an identifier or parenthesized expression"""
        if self.at_end() or self.check_content(*TERMINATORS):
            return base

        if self.check_content('['):
            return self.parse_index(base)

        return self.try_call(base)

    def parse_group(self) -> Node:
        """Parse ( expr )"""
        self.advance()

        if self.check_content(')'):
            raise ParseError("illegal empty clause '()'", self.current)

        expr = self.parse_value_expression()
        self.skip_layout()
        self.expect_content(')')

        return self.parse_suffix(expr)

    def parse_index(self, base: Node) -> Node:
        """Parse one or more [index] suffixes"""
        while self.check_content('['):
            lsqb = self.advance()
            index = self.parse_value_expression()
            self.skip_layout()
            self.expect_content(']')
            base = make_tree('index', [base, index], lsqb)

        return base

    def try_call(self, callee: Node) -> Node:
        """Lookahead: literal/identifier/( /{ after the callee means a call"""
        tok = self.current

        if tok.type in LITERAL_TYPES or tok.type == TT.IDENTIFIER:
            return self.parse_call(callee)

        if tok.type == TT.SYMBOL and tok.value in ('(', '{'):
            return self.parse_call(callee)

        return callee

    def parse_call(self, callee: Node) -> Tree:
        """
        Parse call arguments up to the line break:
        f a            -> f(a)
        f a, b, c      -> f(a, b, c)
        A second argument must be comma separated; a bare one ends the call.
        """
        start = self.current
        args: List[Node] = []

        while not self.check(TT.EOL, TT.EOF):
            if self.match_content(','):
                expr = self.parse_expression()
            elif not args:
                expr = self.parse_expression()
            else:
                break

            if tree_label(expr) == 'eof':
                break

            args.append(expr)

        return make_tree('call', [callee, make_tree('arglist', args, start)], start)

    def parse_array(self) -> Tree:
        """
        Parse array literal: { expr, expr, ... }
        Elements after the first must be comma separated.
        """
        lbrace = self.advance()
        items: List[Node] = []

        self.skip_layout()
        while not self.check_content('}'):
            if self.match_content(','):
                items.append(self.parse_value_expression())
            elif not items:
                items.append(self.parse_value_expression())
            else:
                break
            self.skip_layout()

        self.expect_content('}')
        array = make_tree('array', items, lbrace)

        if self.check_content('['):
            return self.parse_index(array)

        return array

    def parse_lambda(self) -> Tree:
        """Parse lambda: fun p1 p2 -> body"""
        fun_tok = self.advance()
        params = self.parse_params('->')
        body = self.parse_body()
        return make_tree('lambda', [params, body], fun_tok)

    def parse_operation(self, first: Node) -> Node:
        """
        Precedence climbing with an expression stack and an operator
        stack. Before pushing an operator, fold while its rank is >= the
        rank on top of the stack (equal ranks fold left-to-right).
        """
        exprs: List[Node] = [first]
        ops: List[Operand] = []
        op_toks: List[Tok] = []

        while self.check(TT.OPERATOR):
            op_tok = self.advance()
            op = Operand.from_symbol(op_tok.value)
            if op is None:
                raise ParseError(f"unknown operator: {op_tok.value}", op_tok)

            while ops and op.rank >= ops[-1].rank:
                self._fold(exprs, ops, op_toks)

            # Line break directly after an operator continues the expression
            self.skip_layout()
            term = self.parse_term()
            if tree_label(term) == 'eof':
                raise ParseError(f"expected operand after '{op_tok.value}'", self.current)

            exprs.append(term)
            ops.append(op)
            op_toks.append(op_tok)

        while ops:
            self._fold(exprs, ops, op_toks)

        return exprs[0]

    def _fold(self, exprs: List[Node], ops: List[Operand], op_toks: List[Tok]) -> None:
        right = exprs.pop()
        left = exprs.pop()
        op = ops.pop()
        op_tok = op_toks.pop()
        exprs.append(make_tree('operation', [left, make_token(op.name, op.symbol, op_tok), right], op_tok))


def _eof_after(tok: Optional[Tok]) -> Tok:
    if tok is None:
        return Tok(TT.EOF, None, 0, 1, 1)
    return Tok(TT.EOF, None, tok.position + 1, tok.line, tok.column + 1)

def _describe_type(token_type: TT) -> str:
    return token_type.name.lower().replace('_', ' ')

def _describe(tok: Tok) -> str:
    if tok.type == TT.EOL:
        return "end of line"
    if tok.type == TT.EOF:
        return "end of input"
    return f"'{tok.value}'"

# ============================================================================
# Entry points
# ============================================================================

def parse_tokens(tokens: List[Tok]) -> List[Tree]:
    """Parse a token stream into top-level statements"""
    return Parser(tokens).parse()

def parse_source(source: str) -> List[Tree]:
    """
    Parse Eucalyptus source code to a list of statement trees.

    Args:
        source: Source code to parse
    """
    from .lexer_rd import tokenize

    return parse_tokens(tokenize(source))

def parse_expr_fragment(source: str) -> Node:
    """Parse a standalone expression; the whole fragment must be consumed"""
    from .lexer_rd import tokenize

    parser = Parser(tokenize(source))
    expr = parser.parse_value_expression()

    parser.skip_layout()
    if not parser.at_end():
        raise ParseError("unexpected tokens after expression fragment", parser.current)
    return expr
