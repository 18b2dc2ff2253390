# Module: diagnostics.py

# Records of the problems met while parsing one line, and their
# rendering as single human-readable lines.

from collections import namedtuple


LEX = 'lex'
PARSE = 'parse'

INSERT = 'insert'
DELETE = 'delete'


class Repair(namedtuple('Repair', 'action symbol')):

    def pp(self, epp=str):
        return '{} {}'.format(self.action.capitalize(), epp(self.symbol))


def pp_sequence(seq, epp=str):
    return ', '.join(rp.pp(epp) for rp in seq)


def pp_choices(symbols, epp=str):
    names = [epp(s) for s in symbols]
    if len(names) < 2:
        return ''.join(names)
    return '{} or {}'.format(', '.join(names[:-1]), names[-1])


class Diagnostic(namedtuple('Diagnostic', 'kind span expected repairs')):

    """One lexical or syntactic problem of a line.

        :kind:
            LEX for an unrecognized character, PARSE for a token the
            grammar rejects.
        :span:
            Where the problem is in the line.
        :expected:
            Terminal symbols acceptable at that point.
        :repairs:
            The cheapest repair sequences found, best first. The first
            one was applied. Empty when recovery failed.

    """

    @property
    def repaired(self):
        return bool(self.repairs)

    @property
    def applied(self):
        return self.repairs[0] if self.repairs else None

    def pp(self, line, epp=str):
        col = self.span.start + 1
        if self.kind == LEX:
            return 'Lexing error at column {}: unrecognized character {}.'.format(
                col, repr(line[self.span.start:self.span.end]))

        if self.span.start >= len(line):
            at = 'end of input'
        else:
            at = repr(line[self.span.start:self.span.end])
        msg = 'Parsing error at column {} ({}): expected {}'.format(
            col, at, pp_choices(self.expected, epp))
        if not self.repairs:
            return msg + '; no repair found.'
        msg += '; repaired by: {}'.format(pp_sequence(self.repairs[0], epp))
        if len(self.repairs) > 1:
            msg += '; other repairs: {}'.format(
                ' | '.join(pp_sequence(seq, epp) for seq in self.repairs[1:]))
        return msg + '.'
