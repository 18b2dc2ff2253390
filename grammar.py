# Module: grammar.py

# Grammars written as Python functions: a function's name is the
# left-hand side of its rule, its parameter names are the right-hand
# side and its body is the action run when the rule is reduced.

# `Grammar` answers what the table builder asks about a rule list:
# which symbols are terminals, which nonterminals derive the empty
# string, which terminals may begin a symbol string, and what a
# nonterminal expands to.

import re
import pprint
import inspect
import traceback

from collections import namedtuple


# Name of the optional leading parameter through which an action
# receives the active lexer rather than a grammar symbol.
LEXER_PARAM = 'lexer'

_SUBSCRIPT = re.compile(r'_\d+$')


class LanguageError(Exception):

    """Raised when a grammar cannot be turned into a parser."""


class GrammarWarning(UserWarning):
    pass


def _params(func):
    return list(inspect.signature(func).parameters)


def wants_lexer(func):
    ps = _params(func)
    return bool(ps) and ps[0] == LEXER_PARAM


def where(func):
    'Source location of a rule function, for error messages.'
    code = func.__code__
    return traceback.format_list([
        (code.co_filename, code.co_firstlineno, func.__name__, '')])[0]


def identity(x):
    return x


class Rule(namedtuple('Rule', 'lhs rhs seman wants_lexer')):

    """A production `lhs -> rhs` with its action `seman`, which takes
    the active lexer first when `wants_lexer` is set."""

    def __repr__(self):
        return '({} = {})'.format(self.lhs, ' '.join(self.rhs))

    @staticmethod
    def from_func(func):
        """Read a rule off a function signature. Trailing subscripts like
        `expr_2` are cut so a symbol may appear more than once.

        """
        names = _params(func)
        lexer = wants_lexer(func)
        if lexer:
            names = names[1:]
        rhs = tuple(_SUBSCRIPT.sub('', x) for x in names)
        return Rule(func.__name__, rhs, func, lexer)

    @staticmethod
    def top(start):
        return Rule(start + '^', (start,), identity, False)


class Grammar(object):

    def __init__(self, rules, precedence=None):
        """Analyse `rules`, the first of which names the start symbol.

            :expansions: dict
                Each nonterminal mapped to the indices of its rules, in
                declaration order.
            :nullable: set
                Nonterminals deriving the empty string.
            :firsts: dict
                Each nonterminal mapped to the terminals that may begin
                it. The empty string is never a member; `nullable` tells.
            :unreachable: set
                Nonterminals the start symbol never derives.

        """
        if not rules:
            raise LanguageError('A grammar needs at least one rule.')

        self.rules = rules
        self.start = rules[0].lhs
        self.precedence = precedence if precedence else {}

        self.expansions = {}
        for i, rule in enumerate(rules):
            self.expansions.setdefault(rule.lhs, []).append(i)
        self.nonterminals = set(self.expansions)
        self.terminals = {X for rule in rules for X in rule.rhs
                          if X not in self.expansions}

        self.unreachable = self.nonterminals - self.derivable(self.start)
        self.nullable, self.firsts = self._firsts()

    def __repr__(self):
        return pprint.pformat(self.rules)

    def derivable(self, X):
        'Nonterminals appearing in derivations from `X`, itself included.'
        seen = {X}
        todo = [X]
        while todo:
            for i in self.expansions[todo.pop()]:
                for Y in self.rules[i].rhs:
                    if Y in self.nonterminals and Y not in seen:
                        seen.add(Y)
                        todo.append(Y)
        return seen

    def _firsts(self):
        nullable = set()
        firsts = {X: set() for X in self.nonterminals}
        changed = True
        while changed:
            changed = False
            for rule in self.rules:
                acc = firsts[rule.lhs]
                size = len(acc)
                if self._scan(rule.rhs, acc, nullable, firsts):
                    if rule.lhs not in nullable:
                        nullable.add(rule.lhs)
                        changed = True
                if len(acc) != size:
                    changed = True
        return nullable, firsts

    def _scan(self, seq, acc, nullable, firsts):
        # Adds the terminals able to begin `seq` to `acc`; True when
        # all of `seq` may vanish.
        for Y in seq:
            if Y in self.terminals:
                acc.add(Y)
                return False
            acc.update(firsts[Y])
            if Y not in nullable:
                return False
        return True

    def first_of(self, seq, follow):
        """Terminals that may begin the string `seq` followed by the
        terminal `follow`."""
        acc = set()
        if self._scan(seq, acc, self.nullable, self.firsts):
            acc.add(follow)
        return acc

    def rule_precedence(self, r):
        """Precedence of the `r`th rule: the one of its rightmost terminal
        declared with a precedence, or None."""
        for X in reversed(self.rules[r].rhs):
            if X in self.terminals and X in self.precedence:
                return self.precedence[X]
        return None
