#!/usr/bin/env python3

# Module: calc.py

# Calculator for sums of unsigned 64-bit integers.
#
#     Expr   -> Expr '+' Term | Term
#     Term   -> Factor
#     Factor -> '(' Expr ')' | INT
#
# Every action yields `Ok(value)` or fails with `EvalError`, which the
# parser turns into `Err(reason)`. Tokens the parser inserted while
# recovering arrive as `Err`, so unwrapping them fails the subtree
# instead of producing a made-up value.

import sys
import copy
import argparse

from lalr import LALR, Ok, Err, EvalError, MAX_REPAIR_COST


U64_MAX = 2 ** 64 - 1
U64_DIGITS = len(str(U64_MAX))


def parse_int(text):
    if not text:
        raise EvalError('empty integer literal')
    # Leading zeros are allowed in any number.
    digits = text.lstrip('0') or '0'
    if len(digits) > U64_DIGITS:
        raise EvalError('integer literal out of range')
    value = int(digits)
    if value > U64_MAX:
        raise EvalError('integer literal out of range')
    return value


def checked_add(a, b):
    s = a + b
    if s > U64_MAX:
        raise EvalError('overflow detected')
    return s


class Calc(metaclass=LALR.meta):

    'Sums of unsigned 64-bit integers, with parentheses.'

    IGNORED = r'[ \t]+'
    INT     = r'[0-9]+'
    PLUS    = r'\+'
    LPAREN  = r'\('
    RPAREN  = r'\)'

    def Expr(Expr, PLUS, Term):
        lhs = Expr.unwrap()
        PLUS.unwrap()
        return Ok(checked_add(lhs, Term.unwrap()))

    def Expr(Term):
        return Term

    # Room for '*' and friends.
    def Term(Factor):
        return Factor

    def Factor(LPAREN, Expr, RPAREN):
        LPAREN.unwrap()
        RPAREN.unwrap()
        return Expr

    def Factor(lexer, INT):
        return Ok(parse_int(lexer.span_str(INT.unwrap().span)))


def evaluate(line, parser=Calc):
    """Evaluate one line.

    Returns `(result, diagnostics)`: `result` is `Ok(int)`, `Err(reason)`
    when the line parsed but could not be evaluated, or None when it
    could not be parsed at all (this includes blank lines).

    """
    return parser.interpret(line)


def render(diagnostic, line, parser=Calc):
    return diagnostic.pp(line, parser.lexer.epp)


def report(line, parser=Calc, out=None, err=None):
    """Print the diagnostics and the outcome for `line`; returns whether
    it evaluated."""
    out = sys.stdout if out is None else out
    err = sys.stderr if err is None else err

    result, diagnostics = evaluate(line, parser)
    for d in diagnostics:
        print(render(d, line, parser), file=out)

    if isinstance(result, Ok):
        print('Result: {}'.format(result.value), file=out)
        return True
    elif isinstance(result, Err):
        print('Unable to evaluate expression: {}.'.format(result.reason),
              file=err)
    else:
        print('Unable to evaluate expression.', file=err)
    return False


def main(argv=None):
    ap = argparse.ArgumentParser(
        description='Evaluate sums of unsigned 64-bit integers.')
    ap.add_argument('-c', dest='expr', metavar='EXPR',
                    help='evaluate EXPR and exit')
    ap.add_argument('--max-repair-cost', type=int, default=MAX_REPAIR_COST,
                    metavar='N',
                    help='most tokens inserted/deleted to repair one '
                         'syntax error (default: %(default)s)')
    args = ap.parse_args(argv)
    if args.max_repair_cost < 0:
        ap.error('--max-repair-cost must not be negative')

    parser = copy.copy(Calc)
    parser.max_repair_cost = args.max_repair_cost

    if args.expr is not None:
        return 0 if report(args.expr, parser) else 1

    while 1:
        try:
            line = input('>>> ')
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if not line.strip():
            continue
        report(line, parser)
    return 0


if __name__ == '__main__':
    sys.exit(main())
