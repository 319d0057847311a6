"""
Interactive read-parse-print loop for minibasic.

Each entry is tokenized and parsed and its tree is printed. Input continues
on a ``...`` prompt while a DEF, IF or WHILE block is still open.

Commands:
    exit / quit      leave the REPL
    verbose-mode     toggle printing of tokens and tracebacks
"""

import io
import traceback

from minibasic.minibasic_cli import render_tokens, render_tree
from minibasic.minibasic_constants import BLOCK_OPENERS, END_KEYWORDS, KEYWORD
from minibasic.minibasic_lexer import LexError, tokenize
from minibasic.minibasic_parser import BasicSyntaxError, Parser


def block_depth_change(line: str) -> int:
    """Net number of blocks opened by ``line``.

    Raises:
        LexError: If the line does not tokenize.
    """
    depth = 0
    for tok in tokenize(line):
        if tok.kind != KEYWORD:
            continue
        if tok.lexeme in BLOCK_OPENERS:
            depth += 1
        elif tok.lexeme in END_KEYWORDS:
            depth -= 1
    return depth


def print_traceback() -> None:
    buf = io.StringIO()
    traceback.print_exc(file=buf)
    print("[error] >>>")
    print(buf.getvalue())


def read_entry() -> str | None:
    """Read lines until every opened block is closed; None means the user asked to leave.

    A line that does not tokenize ends the entry at once, so the caller reports
    the lexical error instead of waiting for a block that can never close.
    """
    src_lines: list[str] = []
    depth = 0
    while True:
        prompt = ">>> " if not src_lines else "... "
        line = input(prompt)
        if line.strip().lower() in ("exit", "quit") and not src_lines:
            return None
        src_lines.append(line)
        try:
            depth += block_depth_change(line)
        except LexError:
            return "\n".join(src_lines).strip()
        if depth <= 0:
            return "\n".join(src_lines).strip()


def start_repl(verbose: bool = False) -> None:
    print("minibasic REPL. Type 'exit' or 'quit' to leave.")

    while True:
        try:
            src = read_entry()
            if src is None:
                print("Exiting minibasic REPL.")
                return
            if not src:
                continue
            if src.lower() == "verbose-mode":
                verbose = not verbose
                print(f"[mode] >>> Verbose mode {'ON' if verbose else 'OFF'}")
                continue

            try:
                tokens = tokenize(src)
                if verbose:
                    print("[tokens] >>>")
                    print(render_tokens(tokens))
                program = Parser(tokens).parse()
                rendered = [render_tree(stmt) for stmt in program.children]
            except (LexError, BasicSyntaxError, RecursionError) as e:
                if verbose:
                    print_traceback()
                else:
                    print("[error] >>>")
                    print(e)
                continue

            if not rendered:
                continue
            print("[tree] >>>")
            for text in rendered:
                print(text)

        except (KeyboardInterrupt, EOFError):
            print("\nExiting minibasic REPL.")
            break


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
