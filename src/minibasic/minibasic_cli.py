"""
minibasic CLI Entrypoint.

This module provides the command-line harness around the tokenizer and parser.
It reads a program, tokenizes and parses it, and prints the result for
inspection.

Features:
    - Read source from `.bas` files or inline strings.
    - Print the token sequence, the parse tree, or the tree as JSON.
    - Output to console or file.
    - Launch an interactive REPL.

Example usage:
    minibasic hello.bas
    minibasic -s "x := 2 + 3 * 4" --tokens
    minibasic prog.bas --json -o prog.json
    minibasic --repl --verbose

Functions:
    render_tree(node: ASTNode) -> str:
        Indented, human-readable view of a parse tree.

    run_minibasic(source: str, is_string: bool = False, show_tokens: bool = False,
                  as_json: bool = False, out: Optional[str] = None, pretty: bool = False) -> ASTNode:
        Executes the pipeline (read → tokenize → parse → output).

    main() -> None:
        Parses CLI arguments and invokes the appropriate action.
"""

import argparse
import io
import json
import sys
import traceback

from minibasic.minibasic_ast import ASTNode
from minibasic.minibasic_lexer import LexError, Token, tokenize
from minibasic.minibasic_parser import BasicSyntaxError, Parser


def render_tree(node: ASTNode, depth: int = 0) -> str:
    """Render ``node`` and its descendants, one node per line, two spaces per level.

    Walks the tree with an explicit stack, so output depth is not bounded by
    the interpreter's recursion limit.
    """
    lines: list[str] = []
    stack: list[str | tuple[ASTNode, int]] = [(node, depth)]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            lines.append(item)
            continue

        current, level = item
        pad = "  " * level
        label = current.kind
        if isinstance(current.value, str):
            label += f" {current.value!r}"
        if current.kind == "def":
            label += f" ({', '.join(current.params)})"
        lines.append(pad + label)

        pending: list[str | tuple[ASTNode, int]] = []
        if isinstance(current.value, ASTNode):
            pending.append(f"{pad}  condition:")
            pending.append((current.value, level + 2))
            pending.append(f"{pad}  body:")
            pending.extend((child, level + 2) for child in current.children)
        else:
            pending.extend((child, level + 1) for child in current.children)
        stack.extend(reversed(pending))
    return "\n".join(lines)


def render_tokens(tokens: list[Token]) -> str:
    return "\n".join(f"{tok.kind:<10}{tok.lexeme}" for tok in tokens)


def print_traceback() -> None:
    buf = io.StringIO()
    traceback.print_exc(file=buf)
    print(buf.getvalue(), file=sys.stderr)


def run_minibasic(
    source: str,
    is_string: bool = False,
    show_tokens: bool = False,
    as_json: bool = False,
    out: str | None = None,
    pretty: bool = False,
) -> ASTNode:
    """
    Run the minibasic front end: read, tokenize, parse, and print or write the result.

    Args:
        source (str): The program text or path to a `.bas` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path. Defaults to False.
        show_tokens (bool): If True, prints the token sequence before the tree. Defaults to False.
        as_json (bool): If True, the tree is emitted as indented JSON. Defaults to False.
        out (str | None): Optional path to write the tree output to. If None, prints to stdout.
        pretty (bool): If True, prints section banners. Defaults to False.

    Returns:
        ASTNode: The parsed `program` node.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.bas'.
        LexError: If the source contains unrecognized characters.
        BasicSyntaxError: If the tokens do not form a valid program.
    """
    if not is_string and not source.endswith(".bas"):
        raise ValueError("Only .bas files are supported.")
    # 1. Read source
    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    # 2. Tokenizing
    tokens = tokenize(source)
    banner = "=" * 20
    if show_tokens:
        if pretty:
            print(f"{banner}\nTokens\n{banner}")
        print(render_tokens(tokens))

    # 3. Parsing
    program = Parser(tokens).parse()

    # 4. Output result
    if as_json:
        text = json.dumps(program.to_dict(), indent=2)
    else:
        text = render_tree(program)

    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        if pretty:
            print(f"(wrote to {out})")
    else:
        if pretty:
            print(f"{banner}\nParse tree\n{banner}")
        print(text)

    return program


def main() -> None:
    """
    Entry point for the minibasic CLI.

    Parses command-line arguments and dispatches to the appropriate mode:
    - Launches the REPL if no arguments are passed or `--repl` is specified.
    - Otherwise, tokenizes and parses the source and prints the result.

    Supported flags:
        - `-s`, `--string`: Interpret source as a raw string instead of a file path.
        - `--tokens`: Print the token sequence.
        - `--json`: Print the parse tree as JSON.
        - `-o`, `--out`: Write the tree output to a file.
        - `-p`, `--pretty`: Show section banners.
        - `--repl`: Launch the interactive REPL.
        - `--verbose`: Show tracebacks on errors (and tokens in the REPL).

    Lexical and syntax errors, and trees too deep for JSON output, are reported
    on stderr and exit with status 1.
    """
    if len(sys.argv) == 1:
        # No args passed: open REPL instead
        from minibasic.minibasic_repl import start_repl

        start_repl()
        return
    parser = argparse.ArgumentParser(prog="minibasic")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "--tokens", action="store_true", help="Print the token sequence"
    )
    parser.add_argument(
        "--json", dest="as_json", action="store_true", help="Print the tree as JSON"
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "-p", "--pretty", action="store_true", help="Show output with banners"
    )
    parser.add_argument(
        "--repl",
        action="store_true",
        help="Launch interactive REPL instead of parsing a program",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Show tracebacks and REPL tokens"
    )

    args = parser.parse_args()

    if args.repl or args.source is None:
        from minibasic.minibasic_repl import start_repl

        start_repl(verbose=args.verbose)
        return

    try:
        run_minibasic(
            source=args.source,
            is_string=args.string,
            show_tokens=args.tokens,
            as_json=args.as_json,
            out=args.out,
            pretty=args.pretty,
        )
    except (LexError, BasicSyntaxError, ValueError, OSError, RecursionError) as e:
        message = (
            "Program nested too deeply to render"
            if isinstance(e, RecursionError)
            else str(e)
        )
        print(f"[error] >>> {message}", file=sys.stderr)
        if args.verbose:
            print_traceback()
        sys.exit(1)


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    main()
