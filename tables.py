# Module: tables.py

# LALR(1) tables by lookahead propagation over the LR(0) automaton.
#
# 1. States are kernels, i.e. sorted tuples of items, numbered in the
#    order they are first reached from state 0 (the start item).
# 2. Closing each kernel item under the stand-in lookahead `_PASS`
#    shows, for every item it leads to, whether that item's lookahead
#    is generated on the spot or passed on from the kernel item.
# 3. Passed lookaheads flow along those edges until nothing changes.
#
# Actions on the same lookahead are kept together as a set; choosing
# among conflicting ones is left to the parser.

from collections import namedtuple

from lexer import END


SHIFT = 'shift'
REDUCE = 'reduce'
ACCEPT = 'accept'

_PASS = '\x00'


class Item(namedtuple('Item', 'rule dot')):

    """The position `dot` inside the right-hand side of the `rule`th
    rule."""

    def advance(self):
        return Item(self.rule, self.dot + 1)


class Tables(object):

    def __init__(self, grammar):
        self.grammar = grammar
        self.states = []
        self.goto = []
        self._numbers = {}

        self._automaton()
        self.lookaheads = self._propagate()
        self.actions = [self._actions(i) for i in range(len(self.states))]

    def symbol_after(self, item):
        'The symbol right of the dot, or None at the end of the rule.'
        rhs = self.grammar.rules[item.rule].rhs
        return rhs[item.dot] if item.dot < len(rhs) else None

    def closure(self, kernel):
        """Items of the state `kernel`, kernel items first."""
        expansions = self.grammar.expansions
        items = list(kernel)
        seen = set(items)
        for item in items:
            for r in expansions.get(self.symbol_after(item), ()):
                new = Item(r, 0)
                if new not in seen:
                    seen.add(new)
                    items.append(new)
        return items

    def closure1(self, item, lookahead):
        """The set of `(item, lookahead)` pairs reached by closing the
        single pair given."""
        G = self.grammar
        seen = {(item, lookahead)}
        todo = [(item, lookahead)]
        while todo:
            item, a = todo.pop()
            X = self.symbol_after(item)
            if X not in G.nonterminals:
                continue
            rest = G.rules[item.rule].rhs[item.dot+1:]
            follows = G.first_of(rest, a)
            for r in G.expansions[X]:
                for b in follows:
                    pair = (Item(r, 0), b)
                    if pair not in seen:
                        seen.add(pair)
                        todo.append(pair)
        return seen

    def _number(self, kernel):
        if kernel not in self._numbers:
            self._numbers[kernel] = len(self.states)
            self.states.append(kernel)
        return self._numbers[kernel]

    def _automaton(self):
        self._number((Item(0, 0),))
        i = 0
        while i < len(self.states):
            moves = {}
            for item in self.closure(self.states[i]):
                X = self.symbol_after(item)
                if X is not None:
                    moves.setdefault(X, set()).add(item.advance())
            self.goto.append({X: self._number(tuple(sorted(kernel)))
                              for X, kernel in moves.items()})
            i += 1

    def _propagate(self):
        """Lookahead set of each kernel item, keyed `(state, item)`."""
        las = {(i, item): set()
               for i, kernel in enumerate(self.states) for item in kernel}
        las[0, Item(0, 0)].add(END)

        edges = []
        for i, kernel in enumerate(self.states):
            for k in kernel:
                for item, a in self.closure1(k, _PASS):
                    X = self.symbol_after(item)
                    if X is None:
                        continue
                    dest = (self.goto[i][X], item.advance())
                    if a == _PASS:
                        edges.append(((i, k), dest))
                    else:
                        las[dest].add(a)

        changed = True
        while changed:
            changed = False
            for src, dest in edges:
                if not las[src] <= las[dest]:
                    las[dest] |= las[src]
                    changed = True
        return las

    def _actions(self, i):
        acts = {}
        for X, j in self.goto[i].items():
            if X in self.grammar.terminals:
                acts.setdefault(X, set()).add((SHIFT, j))
        for k in self.states[i]:
            for item, b in self.closure1(k, _PASS):
                if self.symbol_after(item) is not None:
                    continue
                if item.rule == 0:
                    acts.setdefault(END, set()).add((ACCEPT, 0))
                    continue
                for a in (self.lookaheads[i, k] if b == _PASS else (b,)):
                    acts.setdefault(a, set()).add((REDUCE, item.rule))
        return acts

    # Readable forms for conflict reports.
    def show_item(self, item):
        lhs, rhs = self.grammar.rules[item.rule][:2]
        return '{} -> {}'.format(
            lhs, ' '.join(rhs[:item.dot] + ('.',) + rhs[item.dot:]))

    def show_state(self, i):
        return [self.show_item(item) for item in self.closure(self.states[i])]

    def show_action(self, act):
        kind, arg = act
        if kind == REDUCE:
            return 'reduce {!r}'.format(self.grammar.rules[arg])
        elif kind == SHIFT:
            return 'shift to state {}'.format(arg)
        return kind
