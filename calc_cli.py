"""Console front end.

    glyphcalc '2*π'          # one-shot, exit status 1 on error
    glyphcalc --postfix √9+1 # show the postfix order instead
    glyphcalc                # interactive prompt

Set CALC_DEBUG to log every pipeline stage, CALC_PROMPT to change the prompt.
"""
import os
import sys
import logging
import argparse

try:
    import readline  # noqa: F401 -- gives input() line editing and history
except ImportError:  # pragma: no cover
    pass

from calc_errors import CalcError
from calc_eval import calculate
from calc_parser import parse

DEBUG = bool(os.getenv("CALC_DEBUG", False))
PROMPT = os.getenv("CALC_PROMPT", "> ")

logger = logging.getLogger(__name__)


def show_postfix(expression):
    try:
        return " ".join(tok.text for tok in parse(expression))
    except CalcError as e:
        return f"Error: {e}"


def run(expression, postfix=False):
    return show_postfix(expression) if postfix else calculate(expression)


def repl(postfix=False, prompt=PROMPT):
    while True:
        try:
            line = input(prompt)
        except EOFError:
            print()
            break
        if line.strip().lower() in {"exit", "quit"}:
            break
        if ans := run(line, postfix):
            print(ans)


def build_parser():
    ap = argparse.ArgumentParser(
        prog="glyphcalc", description="Evaluate calculator expressions."
    )
    ap.add_argument(
        "expression", nargs="*", help="expression to evaluate (prompt if omitted)"
    )
    ap.add_argument(
        "--postfix", action="store_true", help="print the postfix token order"
    )
    ap.add_argument(
        "--debug", action="store_true", default=DEBUG, help="log each stage"
    )
    return ap


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(name)s: %(message)s",
    )
    if not args.expression:
        logger.debug("starting interactive prompt")
        repl(args.postfix)
        return 0
    ans = run(" ".join(args.expression), args.postfix)
    print(ans)
    return 1 if ans.startswith("Error: ") else 0


if __name__ == "__main__":
    sys.exit(main())
