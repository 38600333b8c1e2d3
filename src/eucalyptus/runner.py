from __future__ import annotations

import sys
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .evaluator import eval_statement
from .lexer_rd import tokenize
from .parser_rd import parse_tokens
from .resolver import resolve_statement
from .scope import Scope
from .tree import Node
from .typecheck import infer_statement
from .types import EucNil, EucType, EucValue, EucalyptusError, EucalyptusRuntimeError, T_UNDEFINED
from .utils import debug_py_trace_enabled, show_types_enabled, stringify

@dataclass
class StatementResult:
    value: EucValue
    type: EucType

def run_program(src: str, scope: Optional[Scope] = None) -> List[StatementResult]:
    """
    Run every top-level statement through resolve, infer and evaluate, in
    that order, before moving on to the next. The first error propagates
    and the remaining statements never run; the failing statement's own
    declarations are rolled back out of `scope`.
    """
    if scope is None:
        scope = Scope()

    try:
        stmts = parse_tokens(tokenize(src))
    except RecursionError:
        raise _recursion_error() from None

    results: List[StatementResult] = []

    for stmt in stmts:
        saved = scope.snapshot()
        try:
            results.append(_run_statement(stmt, scope))
        except EucalyptusError:
            # a failed statement leaves no bindings behind
            scope.restore(saved)
            raise

    return results

def _run_statement(stmt: Node, scope: Scope) -> StatementResult:
    try:
        resolve_statement(stmt, scope)
        t = infer_statement(stmt, scope)
        value = eval_statement(stmt, scope)
    except RecursionError:
        raise _recursion_error() from None

    return StatementResult(value, t)

def _recursion_error() -> EucalyptusRuntimeError:
    return EucalyptusRuntimeError("maximum recursion depth exceeded")

def run(src: str, scope: Optional[Scope] = None) -> EucValue:
    results = run_program(src, scope)
    if not results:
        return EucNil()
    return results[-1].value

def repl_eval(src: str, scope: Scope) -> StatementResult:
    """Run one REPL submission against a persistent scope."""
    results = run_program(src, scope)
    if not results:
        return StatementResult(EucNil(), T_UNDEFINED)
    return results[-1]

def format_result(result: StatementResult, show_types: bool) -> str:
    text = stringify(result.value)
    if show_types:
        return f"{text} : {result.type!r}"
    return text

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    candidate = Path(arg)
    if candidate.exists():
        return candidate.read_text(encoding="utf-8")

    return arg

def _dump_tokens(source: str) -> None:
    for tok in tokenize(source):
        print(repr(tok), file=sys.stderr)

def _dump_ast(source: str) -> None:
    try:
        stmts = parse_tokens(tokenize(source))
    except RecursionError:
        raise _recursion_error() from None

    for stmt in stmts:
        print(stmt.pretty(), file=sys.stderr, end="")

def main(argv: Optional[List[str]] = None) -> None:
    show_types = show_types_enabled()
    py_trace = debug_py_trace_enabled()
    dump_tokens = False
    dump_ast = False
    arg = None

    for token in sys.argv[1:] if argv is None else argv:
        if token == "--types":
            show_types = True
            continue

        if token == "--tokens":
            dump_tokens = True
            continue

        if token == "--ast":
            dump_ast = True
            continue

        if token == "--trace":
            py_trace = True
            continue

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    source = _load_source(arg or "-")

    try:
        if dump_tokens:
            _dump_tokens(source)
        if dump_ast:
            _dump_ast(source)
        results = run_program(source)
    except EucalyptusError as exc:
        if py_trace:
            traceback.print_exc()
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from None

    if results:
        print(format_result(results[-1], show_types))

if __name__ == "__main__":
    main()
