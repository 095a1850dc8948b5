import argparse
import logging
import sys

import shunt


def run(src: str, args: argparse.Namespace) -> str:
    if args.rpn:
        return shunt.format_number(shunt.evaluate(src.split()))
    tokens = shunt.tokenize(src)
    if args.postfix:
        return " ".join(shunt.to_postfix(tokens))
    return shunt.format_number(shunt.evaluate(shunt.to_postfix(tokens)))


def repl(args: argparse.Namespace) -> None:
    while True:
        try:
            src = input("% ")
        except EOFError:
            print()
            break

        if not src.strip():
            continue
        try:
            out = run(src, args)
        except shunt.ExpressionError as e:
            print(f"error: {e}")
        else:
            print(out)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="shunt", description="Evaluate infix arithmetic expressions."
    )
    parser.add_argument("expression", nargs="*", help="expression to evaluate")
    parser.add_argument(
        "-p", "--postfix", action="store_true", help="print the postfix form"
    )
    parser.add_argument(
        "-r", "--rpn", action="store_true", help="read input as postfix tokens"
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if not args.expression:
        repl(args)
        return 0

    try:
        print(run(" ".join(args.expression), args))
    except shunt.ExpressionError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
