#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Update rules of Boolean networks.

This module defines the :class:`~boolsim.UpdateRule` class, which compiles
the textual update rule of a single node into an evaluable object. The rule
text is tokenized and parsed into an abstract syntax tree once; every call
then walks the tree against a state mapping. No Python code is generated or
evaluated at runtime.

Grammar (NOT binds tighter than AND, which binds tighter than OR)::

    expression := term   ( OR  term   )*
    term       := factor ( AND factor )*
    factor     := NOT factor | '(' expression ')' | literal | identifier

Accepted spellings of the operators and literals:

    ========  ==========================================
    NOT       ``!``, ``~``, ``not``, ``NOT``
    AND       ``&&``, ``&``, ``and``, ``AND``
    OR        ``||``, ``|``, ``or``, ``OR``
    literals  ``true``/``false``, ``True``/``False``, ``TRUE``/``FALSE``
    ========  ==========================================

Identifiers are runs of word characters (letters, digits, underscore).
"""

import re

import numpy as np

from typing import Callable, Iterable, Optional

try:
    import boolsim.utils as utils
    from boolsim.exceptions import RuleCompilationError, StateMismatchError
except ModuleNotFoundError:
    import utils
    from exceptions import RuleCompilationError, StateMismatchError


__all__ = [
    "UpdateRule",
    "compile_rule",
    "is_empty_rule",
]

_TOKEN_RE = re.compile(r'\s*(?:(&&|\|\||[&|!~()])|(\w+))', re.UNICODE)

_SYMBOLS = {
    '&&': 'AND', '&': 'AND',
    '||': 'OR', '|': 'OR',
    '!': 'NOT', '~': 'NOT',
    '(': 'LPAREN', ')': 'RPAREN',
}
_KEYWORDS = {
    'and': 'AND', 'AND': 'AND',
    'or': 'OR', 'OR': 'OR',
    'not': 'NOT', 'NOT': 'NOT',
}
_LITERALS = {
    'true': True, 'True': True, 'TRUE': True,
    'false': False, 'False': False, 'FALSE': False,
}


def is_empty_rule(text : Optional[str]) -> bool:
    """Return True if text describes a node without dynamics."""
    return text is None or text.strip() == ''


def _tokenize(text : str) -> list:
    """
    Split rule text into (kind, value, position) triples.

    kind is one of 'AND', 'OR', 'NOT', 'LPAREN', 'RPAREN', 'CONST', 'VAR'.
    """
    tokens = []
    pos = 0
    end = len(text.rstrip())
    while pos < end:
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            column = pos + len(text[pos:]) - len(text[pos:].lstrip())
            raise RuleCompilationError(f"unexpected character {text[column]!r} at position {column}", rule=text)
        symbol, word = match.groups()
        start = match.start(1) if symbol is not None else match.start(2)
        if symbol is not None:
            tokens.append((_SYMBOLS[symbol], symbol, start))
        elif word in _KEYWORDS:
            tokens.append((_KEYWORDS[word], word, start))
        elif word in _LITERALS:
            tokens.append(('CONST', _LITERALS[word], start))
        else:
            tokens.append(('VAR', word, start))
        pos = match.end()
    return tokens


class _Parser(object):
    """
    Recursive descent parser producing a tuple-based syntax tree.

    Nodes are ('var', name), ('const', bool), ('not', child), and
    ('and', [children]) / ('or', [children]); chains of the same binary
    operator are kept flat.
    """

    def __init__(self, text : str, tokens : list):
        self.text = text
        self.tokens = tokens
        self.index = 0

    def _peek(self):
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def _error(self, message):
        token = self._peek()
        where = f"at position {token[2]}" if token is not None else "at end of rule"
        return RuleCompilationError(f"{message} {where}", rule=self.text)

    def parse(self):
        if not self.tokens:
            raise RuleCompilationError("empty rule cannot be compiled", rule=self.text)
        tree = self._expression()
        if self._peek() is not None:
            raise self._error(f"unexpected {self._peek()[1]!r}")
        return tree

    def _binary(self, kind, operand):
        children = [operand()]
        while self._peek() is not None and self._peek()[0] == kind:
            self.index += 1
            children.append(operand())
        if len(children) == 1:
            return children[0]
        return (kind.lower(), children)

    def _expression(self):
        return self._binary('OR', self._term)

    def _term(self):
        return self._binary('AND', self._factor)

    def _factor(self):
        token = self._peek()
        if token is None:
            raise self._error("expected an operand")
        kind, value, _ = token
        if kind == 'NOT':
            self.index += 1
            return ('not', self._factor())
        if kind == 'LPAREN':
            self.index += 1
            tree = self._expression()
            if self._peek() is None or self._peek()[0] != 'RPAREN':
                raise self._error("missing ')'")
            self.index += 1
            return tree
        if kind == 'CONST':
            self.index += 1
            return ('const', value)
        if kind == 'VAR':
            self.index += 1
            return ('var', value)
        raise self._error(f"unexpected {value!r}")


def _evaluate(tree, lookup : Callable):
    """Evaluate a syntax tree; lookup maps identifiers to bools or bool arrays."""
    kind = tree[0]
    if kind == 'var':
        return lookup(tree[1])
    if kind == 'const':
        return tree[1]
    if kind == 'not':
        return np.logical_not(_evaluate(tree[1], lookup))
    combine = np.logical_and if kind == 'and' else np.logical_or
    children = tree[1]
    result = _evaluate(children[0], lookup)
    for child in children[1:]:
        result = combine(result, _evaluate(child, lookup))
    return result


class UpdateRule(object):
    """
    Compiled update rule of a single node.

    **Constructor Parameters:**

        - text (str): The rule text, e.g. ``'A && !(B || C)'``.

        - variables (iterable[str] | None, optional): Identifiers the rule is
          allowed to reference (the dynamic nodes of the network). If None,
          any identifier is accepted at compile time.

        - name (str | None, optional): Id of the node governed by this rule,
          used in error messages.

    **Members:**

        - text (str): As passed by the constructor.
        - name (str | None): As passed by the constructor.
        - regulators (list[str]): Referenced identifiers, in order of first
          occurrence.
        - n (int): Number of regulators.

    **Raises:**

        - RuleCompilationError: if the text is empty, malformed, or
          references an identifier not contained in variables.

    **Example:**

        >>> rule = UpdateRule('A && !B')
        >>> rule({'A': True, 'B': False})
        True
    """

    def __init__(self, text : str, variables : Optional[Iterable[str]] = None,
                 name : Optional[str] = None):
        self.text = text
        self.name = name
        try:
            self._tokens = _tokenize(text)
            self._tree = _Parser(text, self._tokens).parse()
        except RuleCompilationError as e:
            raise RuleCompilationError(str(e), rule=text, node=name) from None

        self.regulators = []
        for kind, value, _ in self._tokens:
            if kind == 'VAR' and value not in self.regulators:
                self.regulators.append(value)
        self.n = len(self.regulators)

        if variables is not None:
            known = set(variables)
            unknown = [var for var in self.regulators if var not in known]
            if unknown:
                raise RuleCompilationError(f"unknown node identifier(s) {', '.join(map(repr, unknown))}",
                                           rule=text, node=name)

    def __call__(self, state : dict) -> bool:
        """
        Evaluate the rule on a state.

        **Raises:**

            - StateMismatchError: if a regulator is missing from state.
        """
        def lookup(var):
            try:
                return state[var]
            except KeyError:
                raise StateMismatchError(f"node {var!r} referenced by the rule of {self.name!r} is not part of the state") from None
        return bool(_evaluate(self._tree, lookup))

    def __str__(self):
        return self.text

    def __repr__(self):
        return f"{self.__class__.__name__}({self.text!r})"

    def get_truth_table(self) -> np.ndarray:
        """
        Evaluate the rule on all 2^n combinations of its regulators.

        Regulators are taken in the order of self.regulators, the first
        regulator being the most significant bit.

        **Returns:**

            - np.array[int]: Vector of length 2^n with the rule outputs.
        """
        table = utils.get_left_side_of_truth_table(self.n).astype(bool)
        columns = {var: table[:, i] for i, var in enumerate(self.regulators)}
        f = _evaluate(self._tree, columns.__getitem__)
        return np.broadcast_to(np.asarray(f, dtype=int), (2**self.n,)).copy()

    def to_expression(self, AND : str = '&&', OR : str = '||', NOT : str = '!',
                      TRUE : str = 'true', FALSE : str = 'false') -> str:
        """
        Render the rule with a different operator vocabulary.

        The token sequence of the original text is kept, so parentheses
        are preserved as written. Binary operators are surrounded by single
        spaces; a word-like NOT operator is followed by a space.

        **Example:**

            >>> UpdateRule('A && !B || true').to_expression('and', 'or', 'not', 'True', 'False')
            'A and not B or True'
        """
        parts = []
        for kind, value, _ in self._tokens:
            if kind == 'AND':
                parts.append(f' {AND} ')
            elif kind == 'OR':
                parts.append(f' {OR} ')
            elif kind == 'NOT':
                parts.append(NOT + ' ' if NOT[-1:].isalnum() else NOT)
            elif kind == 'CONST':
                parts.append(TRUE if value else FALSE)
            else:
                parts.append(value)
        return ''.join(parts)


def compile_rule(text : str, variables : Optional[Iterable[str]] = None,
                 name : Optional[str] = None) -> UpdateRule:
    """
    Compile rule text into an :class:`UpdateRule`.

    Thin functional wrapper around the constructor, see UpdateRule for the
    parameters.
    """
    return UpdateRule(text, variables=variables, name=name)
