import preamble
import random
import unittest

from concurrent.futures import ThreadPoolExecutor

from lalr import Ok, Err, ParseTree
from calc import Calc, U64_MAX, evaluate, parse_int, checked_add
from lalr import EvalError


class TestArith(unittest.TestCase):

    def test_single(self):
        self.assertEqual(evaluate('0'), (Ok(0), []))

    def test_sum(self):
        self.assertEqual(evaluate('1+2'), (Ok(3), []))
        self.assertEqual(evaluate(' 1 +\t2 + 39 '), (Ok(42), []))

    def test_leading_zeros(self):
        self.assertEqual(evaluate('007+1'), (Ok(8), []))

    def test_parens(self):
        self.assertEqual(evaluate('(1+2)+3'), (Ok(6), []))
        self.assertEqual(evaluate('1+(2+3)'), (Ok(6), []))
        self.assertEqual(evaluate('((((5))))'), (Ok(5), []))

    def test_random_sums(self):
        rnd = random.Random(7)
        for _ in range(50):
            nums = [rnd.randrange(0, 2 ** 58) for _ in range(rnd.randint(1, 12))]
            line = '+'.join(str(n) for n in nums)
            self.assertEqual(evaluate(line), (Ok(sum(nums)), []))

    def test_left_to_right(self):
        t, diags = Calc.parse('1+2+3')
        self.assertEqual(diags, [])
        # ((1 + 2) + 3)
        self.assertEqual(t.node, 'Expr')
        self.assertEqual(t.subs[0].node, 'Expr')
        self.assertEqual(t.subs[0].subs[0].node, 'Expr')
        self.assertEqual(t.subs[1].symbol, 'PLUS')
        self.assertEqual(t.subs[1].start, 3)
        self.assertEqual(t.subs[2],
                         ParseTree('Term', [ParseTree('Factor', [t.subs[2].subs[0].subs[0]])]))
        self.assertEqual(t.subs[2].subs[0].subs[0].symbol, 'INT')


class TestOverflow(unittest.TestCase):

    def test_max(self):
        self.assertEqual(evaluate('18446744073709551615+0'), (Ok(U64_MAX), []))
        self.assertEqual(evaluate('18446744073709551615'), (Ok(U64_MAX), []))

    def test_sum_overflows(self):
        self.assertEqual(evaluate('18446744073709551615+1'),
                         (Err('overflow detected'), []))
        self.assertEqual(evaluate('9223372036854775808+9223372036854775808'),
                         (Err('overflow detected'), []))

    def test_literal_out_of_range(self):
        self.assertEqual(evaluate('18446744073709551616'),
                         (Err('integer literal out of range'), []))
        self.assertEqual(evaluate('1+18446744073709551616'),
                         (Err('integer literal out of range'), []))

    def test_very_long_literal(self):
        self.assertEqual(evaluate('1' * 5000),
                         (Err('integer literal out of range'), []))
        self.assertEqual(evaluate('2+' + '9' * 5000),
                         (Err('integer literal out of range'), []))

    def test_very_long_zero_padding(self):
        self.assertEqual(evaluate('0' * 5000 + '1+1'), (Ok(2), []))
        self.assertEqual(evaluate('0' * 5000), (Ok(0), []))
        self.assertEqual(parse_int('0' * 5000 + '18446744073709551615'),
                         U64_MAX)

    def test_err_propagates(self):
        self.assertEqual(evaluate('(18446744073709551615+1)+0'),
                         (Err('overflow detected'), []))
        self.assertEqual(evaluate('0+(18446744073709551616)'),
                         (Err('integer literal out of range'), []))

    def test_helpers(self):
        self.assertEqual(parse_int('0018'), 18)
        self.assertEqual(parse_int('000'), 0)
        self.assertEqual(checked_add(U64_MAX - 1, 1), U64_MAX)
        with self.assertRaises(EvalError):
            parse_int('')
        with self.assertRaises(EvalError):
            checked_add(U64_MAX, 1)


class TestBlank(unittest.TestCase):

    def test_empty(self):
        self.assertEqual(evaluate(''), (None, []))

    def test_whitespace_only(self):
        self.assertEqual(evaluate(' \t  '), (None, []))


class TestIndependentCalls(unittest.TestCase):

    def test_threads(self):
        lines = ['{}+{}'.format(i, i) for i in range(200)] + ['+1+', '(1+2']
        with ThreadPoolExecutor(max_workers=8) as ex:
            results = list(ex.map(evaluate, lines))
        self.assertEqual(results, [evaluate(line) for line in lines])
        self.assertEqual(results[10], (Ok(20), []))


if __name__ == '__main__':
    unittest.main()
