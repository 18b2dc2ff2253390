# Module: lalr.py

# LALR(1) parser with semantic actions and error recovery.

# A parser is declared by a class body (see `LALR.meta`): string
# attributes are lexical patterns, functions are rules whose bodies are
# run on reduction. `make()` builds the tables once; every `interpret()`
# call afterwards owns its own stacks and diagnostics.

# When a token is rejected, the parser searches for the cheapest
# sequence of token insertions/deletions after which parsing goes on,
# applies it, records a `Diagnostic` and continues. Tokens inserted
# this way reach the actions as `Err` values.

import warnings

from pprint import pformat

from collections import namedtuple
from collections import OrderedDict as odict

from lexer import END, IGNORED, ERR, LexerDef, Span, Token
from grammar import Grammar, GrammarWarning, LanguageError, Rule, where
from tables import Tables, SHIFT, REDUCE
from diagnostics import Diagnostic, Repair, LEX, PARSE, INSERT, DELETE


# Defaults of the repair search.
MAX_REPAIR_COST = 3
PARSE_AT_LEAST = 3


class EvalError(Exception):

    """Raised inside a semantic action to fail the subtree being
    reduced. The parser turns it into an `Err` value."""


class _Variant(object):

    # Values of different variants never compare equal, even when
    # their payloads do.

    def __eq__(self, other):
        return type(self) is type(other) and tuple.__eq__(self, other)

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash((type(self).__name__, tuple(self)))


class Ok(_Variant, namedtuple('Ok', 'value')):

    def unwrap(self):
        return self.value


class Err(_Variant, namedtuple('Err', 'reason')):

    def unwrap(self):
        raise EvalError(self.reason)


class ParseTree(namedtuple('ParseTree', 'node subs')):

    def __repr__(self):
        return tuple.__repr__(self)

    @property
    def start(self):
        return self.subs[0].start if self.subs else None

    @property
    def end(self):
        return self.subs[-1].end if self.subs else None


class ConflictWarning(GrammarWarning):
    pass


# Marks a simulated parse that reached acceptance.
_ACCEPTED = object()


class LALR(object):

    """LookAhead LR parser.

    - Conflicts are resolved with precedence of tokens when given,
      otherwise by shifting (shift/reduce) or by the earliest rule
      (reduce/reduce), with a warning.

    - Syntax errors are repaired, see `_repair`.

    """

    def __init__(self, lexer=None, rules=None, precedence=None,
                 max_repair_cost=MAX_REPAIR_COST,
                 parse_at_least=PARSE_AT_LEAST):
        self.rules = rules if rules else []
        self.precedence = precedence if precedence else {}
        self.lexer = lexer if lexer else LexerDef()
        self.max_repair_cost = max_repair_cost
        self.parse_at_least = parse_at_least

        assert isinstance(self.lexer, LexerDef)
        assert parse_at_least >= 1, 'Repairs must make the parse move on.'

    def rule(self, func):
        self.rules.append(Rule.from_func(func))
        return func

    def make(self):
        if not self.rules:
            raise LanguageError('No rule declared.')

        self.lexer.ensure_ignored()
        self.precedence.update(self.lexer.precedence)

        self.rules = [Rule.top(self.rules[0].lhs)] + self.rules
        self.grammar = G = Grammar(self.rules, self.precedence)
        self._check(G)

        # Terminals a repair may insert, in declaration order.
        self.inserts = [nm for nm in odict.fromkeys(self.lexer.names)
                        if nm in G.terminals]

        self.tables = Tables(G)
        self.GOTO = self.tables.goto
        self.ACTION = [
            {a: self._resolve(i, a, acts) for a, acts in row.items()}
            for i, row in enumerate(self.tables.actions)
        ]

    def _check(self, G):
        for rule in G.rules:
            missing = [X for X in rule.rhs
                       if X in G.terminals and X not in self.lexer]
            if missing:
                raise LanguageError(
                    'No lexical pattern for terminal symbol: {}\n'
                    '- used by rule {}, declared at\n{}'
                    '- known patterns: {}'
                    .format(missing[0], rule, where(rule.seman), self.lexer))

        for rule in G.rules:
            if rule.lhs in G.unreachable:
                raise LanguageError(
                    'Nonterminal {} is unreachable from {}; rule {} '
                    'declared at\n{}'
                    .format(rule.lhs, G.start, rule, where(rule.seman)))

        for nm in self.lexer.names:
            if nm != IGNORED and nm not in G.terminals:
                warnings.warn(
                    'Unused terminal symbol {}'.format(nm), GrammarWarning)

    def _resolve(self, i, a, acts):
        """Pick one action among the conflicting `acts` of the `i`th
        state on lookahead `a`."""
        if len(acts) == 1:
            return next(iter(acts))

        reduces = sorted(act for act in acts if act[0] == REDUCE)
        others = [act for act in acts if act[0] != REDUCE]
        if reduces and others:
            rp = self.grammar.rule_precedence(reduces[0][1])
            if rp is not None and a in self.precedence:
                return reduces[0] if rp >= self.precedence[a] else others[0]
            chosen = others[0]
        else:
            chosen = reduces[0]

        warnings.warn(
            'Conflict on lookahead: {} in state\n{}\n'
            'between\n{}\nresolved to {}'.format(
                a,
                pformat(self.tables.show_state(i)),
                '\n'.join('- ' + self.tables.show_action(act)
                          for act in sorted(acts)),
                self.tables.show_action(chosen)),
            ConflictWarning)
        return chosen

    # Parsing routines.

    def interpret(self, inp):
        """Parse the line `inp` running the semantic actions.

        Returns `(result, diagnostics)` where `result` is the value of
        the start rule, or None if no parse could be completed.

        """
        return self._run(inp, True)

    def parse(self, inp):
        """Parse the line `inp` into a `ParseTree`; returns
        `(tree, diagnostics)`."""
        return self._run(inp, False)

    def _run(self, inp, interpret):
        assert hasattr(self, 'ACTION'), \
            'Call yourparser.make() to build the parser first!'

        lexer = self.lexer.lexer(inp)
        tokens = []
        lexical = []
        for token in lexer:
            if token.symbol == ERR:
                lexical.append(Diagnostic(LEX, token.span, (), ()))
            else:
                tokens.append(token)

        # Nothing but END.
        if len(tokens) == 1:
            return None, lexical

        syntactic = []
        result = self._drive(lexer, tokens, syntactic, interpret)

        if interpret and lexical and isinstance(result, Ok):
            result = Err('unrecognized characters in input')

        # Both lists are in input order; ties put lexical ones first.
        diagnostics = sorted(lexical + syntactic, key=lambda d: d.span.start)
        return result, diagnostics

    def _drive(self, lexer, tokens, diagnostics, interpret):
        sstk = [0]              # state stack
        tstk = []               # value/subtree stack
        i = 0

        while 1:
            token = tokens[i]

            if self._advance(sstk, token.symbol) is None:
                symbols = [tk.symbol for tk in tokens[i:]]
                repairs = self._repair(sstk, symbols)
                diagnostics.append(Diagnostic(
                    PARSE, token.span, self.expected(sstk), repairs))
                if not repairs:
                    return None
                for act, symbol in repairs[0]:
                    if act == DELETE:
                        i += 1
                    else:
                        at = tokens[i].start
                        phantom = Token(symbol, Span(at, at))
                        value = (Err('inserted {}'.format(self.lexer.epp(symbol)))
                                 if interpret else phantom)
                        self._feed(sstk, tstk, phantom, value, lexer, interpret)
                continue

            value = Ok(token) if interpret else token
            if self._feed(sstk, tstk, token, value, lexer, interpret):
                return tstk.pop()
            i += 1

    def _feed(self, sstk, tstk, token, value, lexer, interpret):
        """Run reductions for the lookahead `token` then shift it.
        Returns True when the parse is accepted instead."""
        while 1:
            act, arg = self.ACTION[sstk[-1]][token.symbol]

            if act == SHIFT:
                sstk.append(arg)
                tstk.append(value)
                return False
            elif act != REDUCE:
                return True

            rule = self.rules[arg]
            n = len(rule.rhs)
            subs = tstk[len(tstk)-n:]
            del tstk[len(tstk)-n:]
            del sstk[len(sstk)-n:]
            if interpret:
                tstk.append(self._apply(rule, subs, lexer))
            else:
                tstk.append(ParseTree(rule.lhs, subs))
            sstk.append(self.GOTO[sstk[-1]][rule.lhs])

    def _apply(self, rule, subs, lexer):
        if rule.wants_lexer:
            subs = [lexer] + subs
        try:
            return rule.seman(*subs)
        except EvalError as e:
            return Err(str(e))

    def _advance(self, sstk, symbol):
        """Simulate `symbol` on a copy of the state stack `sstk`.

        Returns the stack after `symbol` is shifted, `_ACCEPTED` if it
        completes the parse, or None if it is rejected.

        """
        sstk = list(sstk)
        while 1:
            if symbol not in self.ACTION[sstk[-1]]:
                return None
            act, arg = self.ACTION[sstk[-1]][symbol]
            if act == SHIFT:
                sstk.append(arg)
                return sstk
            elif act != REDUCE:
                return _ACCEPTED
            rule = self.rules[arg]
            del sstk[len(sstk)-len(rule.rhs):]
            sstk.append(self.GOTO[sstk[-1]][rule.lhs])

    def _survives(self, sstk, symbols):
        """Whether parsing from `sstk` accepts or gets through the next
        `parse_at_least` symbols."""
        for symbol in symbols[:self.parse_at_least]:
            sstk = self._advance(sstk, symbol)
            if sstk is None:
                return False
            if sstk is _ACCEPTED:
                return True
        return True

    def expected(self, sstk):
        return tuple(a for a in self.inserts + [END]
                     if self._advance(sstk, a) is not None)

    def _repair(self, sstk, symbols):
        """Find the cheapest repair sequences for the rejected
        `symbols[0]`.

        Sequences are searched breadth-first by cost, inserting any
        terminal or deleting the next input symbol (END excluded) at
        cost 1 each, up to `max_repair_cost`. A sequence succeeds if
        parsing survives the rest of the input after it. All successful
        sequences of the lowest cost are returned; insertions order
        before deletions and inserted symbols by declaration.

        """
        frontier = [((), sstk, 0)]
        for _ in range(self.max_repair_cost):
            news = []
            for seq, states, j in frontier:
                for a in self.inserts:
                    nxt = self._advance(states, a)
                    if nxt is not None:
                        news.append((seq + (Repair(INSERT, a),), nxt, j))
                if symbols[j] != END:
                    news.append(
                        (seq + (Repair(DELETE, symbols[j]),), states, j + 1))
            found = tuple(seq for seq, states, j in news
                          if self._survives(states, symbols[j:]))
            if found:
                return found
            frontier = news
        return ()

    # Class-body declaration, see `meta`.
    def __getitem__(self, name):
        # Unknown names fall through to the enclosing scopes.
        raise KeyError(name)

    def __setitem__(self, name, value):
        """Record one class-body binding: a pattern string, a
        `(pattern, precedence)` pair or a rule function. Dunder names
        other than `__doc__` are skipped."""
        if name == '__doc__':
            self.__doc__ = value
        elif name[:2] == name[-2:] == '__':
            return
        elif isinstance(value, str):
            self.lexer.register(name, value)
        elif isinstance(value, tuple):
            pattern, prece = value
            self.lexer.register(name, pattern, prece)
        elif callable(value):
            self.rule(value)

    def __enter__(self):
        return self.lexer, self.rule

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.make()

    class meta(type):

        """Metaclass turning a class body into a built `LALR` parser.
        Keywords of the class statement are passed to `LALR()`::

            class Calc(metaclass=LALR.meta, max_repair_cost=2):
                INT = r'[0-9]+'
                def Expr(INT): ...

        """

        @classmethod
        def __prepare__(mcls, name, bases, **options):
            return LALR(**options)

        def __new__(mcls, name, bases, parser, **options):
            parser.make()
            return parser
