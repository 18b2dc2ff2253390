# Module: lexer.py

# Lexical analysis. A `LexerDef` bookkeeps the ordered token rules of a
# language; `LexerDef.lexer(line)` prepares a `Lexer` which walks one
# line of input and yields `Token` objects carrying spans, never copied
# substrings.

# Matching policy:
# - The longest match wins;
# - On equal length, the rule declared earlier wins;
# - IGNORED matches are dropped;
# - A character no rule matches is delivered as an ERR token.

import re

from pprint import pformat

from collections import namedtuple


END = 'END'
IGNORED = 'IGNORED'
IGNORED_PAT = r'[ \t]+'
ERR = 'ERR'

# Patterns made of plain (possibly escaped) characters are shown as
# quoted literals in messages.
_LITERAL_PAT = re.compile(r'(?:\\[^\w\s]|[\w ])+')


class Span(namedtuple('Span', 'start end')):

    """Half-open range `[start, end)` of code point offsets into the
    input line. `len()` is its width, so an empty span is falsy.

    """

    def __len__(self):
        return self.end - self.start

    def __repr__(self):
        return '[{}:{})'.format(self.start, self.end)


class Token(namedtuple('Token', 'symbol span')):

    @property
    def start(self):
        return self.span.start

    @property
    def end(self):
        return self.span.end

    def __repr__(self):
        return '({}@{})'.format(self.symbol, repr(self.span))


class LexerDef(object):

    def __init__(self, names=None, patterns=None):
        """Token rules in declaration order, kept as parallel lists:

            :names:

                Token names, i.e. the terminal symbols of the grammar
                using this lexer.

            :patterns:

                Compiled regular expression of the name at the same
                index.

        Names given a precedence are also keys of :precedence:.

        """
        self.names = names if names else []
        self.patterns = patterns if patterns else []
        self.precedence = {}

    def __repr__(self):
        return 'LexerDef{{\n{}}}'.format(
            pformat([(nm, rgx.pattern)
                     for nm, rgx in zip(self.names, self.patterns)]))

    def __contains__(self, name):
        return name in self.names

    def __call__(self, **kw):
        r"""Supporting registering lexical pattern like::

            lex(INT = r'[0-9]+')
            lex(PLUS = r'\+', p = 1)

        """
        prece = kw.pop('p', None)
        if len(kw) != 1:
            raise TypeError('Register exactly one pattern per call.')
        (name, pattern), = kw.items()
        self.register(name, pattern, prece)

    def register(self, name, pattern, precedence=None):
        """Registers lexical pattern directly."""
        if name in (END, ERR):
            raise ValueError(
                'Token name {} is reserved by the lexer.'.format(name))
        if precedence is not None and name in self.precedence:
            raise ValueError(
                'Repeated specifying the precedence '
                'of symbol: {}'.format(name))
        self.names.append(name)
        self.patterns.append(re.compile(pattern))
        if precedence is not None:
            self.precedence[name] = precedence

    def more(self, **kw):
        r"""Register more lexical name-patterns with one call like::

            my_lexer.more(
                PLUS = r'\+',
                LPAREN = r'\(',
                ...
            )

        Keyword order is kept, so ties between these patterns go to
        the earlier keyword.
        """
        for name, pat in kw.items():
            self.register(name, pat)

    def ensure_ignored(self):
        if IGNORED not in self.names:
            self.register(IGNORED, IGNORED_PAT)

    def epp(self, symbol):
        """Name of `symbol` as shown to users."""
        if symbol == END:
            return 'end of input'
        if symbol in self.names:
            pat = self.patterns[self.names.index(symbol)].pattern
            if _LITERAL_PAT.fullmatch(pat):
                return repr(re.sub(r'\\(.)', r'\1', pat))
        return symbol

    def lexer(self, line):
        return Lexer(self, line)


class Lexer(object):

    """Tokenizer over one line of input. Iterating it lazily yields the
    tokens of the line, ending with a single END token. It can be
    iterated only once.

    """

    def __init__(self, lexerdef, line):
        self.lexerdef = lexerdef
        self.line = line
        self._tokens = self._tokenize()

    def __iter__(self):
        return self

    def __next__(self):
        return next(self._tokens)

    def span_str(self, span):
        return self.line[span.start:span.end]

    def _tokenize(self):
        inp = self.line
        rules = list(zip(self.lexerdef.names, self.lexerdef.patterns))
        pos = 0
        while pos < len(inp):
            name, end = None, pos
            for nm, rgx in rules:
                m = rgx.match(inp, pos)
                # Strictly longer only: earlier rules win ties, and
                # zero-length matches never count.
                if m and m.end() > end:
                    name, end = nm, m.end()
            if name is None:
                yield Token(ERR, Span(pos, pos + 1))
                pos += 1
            else:
                if name != IGNORED:
                    yield Token(name, Span(pos, end))
                pos = end
        yield Token(END, Span(pos, pos))
