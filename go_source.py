#!/usr/bin/env python3
"""
Lightweight parser for Go test sources.

Only what the index builder needs is extracted: the package clause and the
names of top-level func declarations (including methods). Comments, strings
and rune literals are tokenized so that braces inside them do not confuse the
bracket tracking, and structurally broken files raise GoParseError the way
go/parser would refuse them.
"""

import re
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

_TOKEN_RE = re.compile(r'''
    (?P<newline>\n)
  | (?P<space>[ \t\r\f]+)
  | (?P<line_comment>//[^\n]*)
  | (?P<block_comment>/\*.*?\*/)
  | (?P<open_comment>/\*)
  | (?P<string>"(?:[^"\\\n]|\\[^\n])*")
  | (?P<open_string>")
  | (?P<raw_string>`[^`]*`)
  | (?P<open_raw_string>`)
  | (?P<rune>'(?:[^'\\\n]|\\[^\n])+')
  | (?P<open_rune>')
  | (?P<ident>[^\W\d]\w*)
  | (?P<number>\d[\w.]*)
  | (?P<bracket>[{}()\[\]])
  | (?P<other>.)
''', re.VERBOSE | re.DOTALL)

_SKIPPED = {'newline', 'space', 'line_comment', 'block_comment'}

_UNTERMINATED = {
    'open_comment': 'comment not terminated',
    'open_string': 'string literal not terminated',
    'open_raw_string': 'raw string literal not terminated',
    'open_rune': 'rune literal not terminated',
}

_CLOSERS = {'(': ')', '[': ']', '{': '}'}


class GoParseError(ValueError):
    """Raised when a Go source file is not structurally valid."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.message = message
        self.line = line
        if line is not None:
            message = f"{line}: {message}"
        super().__init__(message)


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    line: int


@dataclass(frozen=True)
class GoFuncDecl:
    """A top-level func declaration."""
    name: str
    line: int
    receiver: Optional[str] = None

    @property
    def is_exported(self) -> bool:
        return self.name[:1].isupper()

    @property
    def is_method(self) -> bool:
        return self.receiver is not None


@dataclass
class GoFile:
    """Declarations extracted from one Go source file."""
    package: str
    functions: List[GoFuncDecl] = field(default_factory=list)


def tokenize(source: str) -> Iterator[Token]:
    """Yield the significant tokens of a Go source, dropping whitespace and comments."""
    line = 1
    for match in _TOKEN_RE.finditer(source):
        kind = match.lastgroup
        text = match.group()
        if kind in _UNTERMINATED:
            raise GoParseError(_UNTERMINATED[kind], line)
        if kind not in _SKIPPED:
            yield Token(kind, text, line)
        line += text.count('\n')


def _ends_statement(tok: Token) -> bool:
    """Whether a line break after tok terminates the statement (Go semicolon insertion)."""
    if tok.kind == 'bracket':
        return tok.text in ')]}'
    return tok.kind != 'other'


def _starts_declaration(previous: Token, tok: Token) -> bool:
    # Only meaningful at bracket depth zero. A func keyword inside a type,
    # a var initializer or a result list continues the current declaration.
    if previous.text == ';':
        return True
    previous_end = previous.line + previous.text.count('\n')
    return tok.line > previous_end and _ends_statement(previous)


def _skip_receiver(tokens: List[Token], start: int) -> Tuple[str, int]:
    """Consume a parenthesised receiver starting at tokens[start]; return its text and the next index."""
    depth = 0
    index = start
    while index < len(tokens):
        tok = tokens[index]
        if tok.kind == 'bracket':
            if tok.text in _CLOSERS:
                depth += 1
            else:
                depth -= 1
                if depth == 0:
                    receiver = ' '.join(t.text for t in tokens[start + 1:index])
                    return receiver, index + 1
        index += 1
    raise GoParseError("receiver not terminated", tokens[start].line)


def parse_go_source(source: str) -> GoFile:
    """
    Parse the package clause and top-level func declarations of a Go file.

    Args:
        source (str): Go source text.

    Returns:
        GoFile: Package name and declared functions in source order.

    Raises:
        GoParseError: If the file has no valid package clause, an unterminated
            literal or comment, unbalanced brackets, or a malformed func header.
    """
    tokens = list(tokenize(source.lstrip('\ufeff')))

    if not tokens or tokens[0].text != 'package':
        line = tokens[0].line if tokens else 1
        raise GoParseError("expected 'package' clause", line)
    if len(tokens) < 2 or tokens[1].kind != 'ident' or tokens[1].text == '_':
        raise GoParseError("expected package name", tokens[0].line)

    go_file = GoFile(package=tokens[1].text)
    stack: List[Token] = []
    index = 2

    while index < len(tokens):
        tok = tokens[index]
        if tok.kind == 'bracket':
            if tok.text in _CLOSERS:
                stack.append(tok)
            elif not stack:
                raise GoParseError(f"unexpected '{tok.text}'", tok.line)
            elif _CLOSERS[stack[-1].text] != tok.text:
                opener = stack[-1]
                raise GoParseError(
                    f"expected '{_CLOSERS[opener.text]}' to close '{opener.text}' "
                    f"from line {opener.line}, found '{tok.text}'",
                    tok.line,
                )
            else:
                stack.pop()
        elif (tok.kind == 'ident' and tok.text == 'func' and not stack
              and _starts_declaration(tokens[index - 1], tok)):
            receiver = None
            index += 1
            if index < len(tokens) and tokens[index].text == '(':
                receiver, index = _skip_receiver(tokens, index)
            if index >= len(tokens) or tokens[index].kind != 'ident':
                raise GoParseError("expected function name after 'func'", tok.line)
            name_tok = tokens[index]
            go_file.functions.append(GoFuncDecl(name_tok.text, name_tok.line, receiver))
        index += 1

    if stack:
        opener = stack[-1]
        raise GoParseError(f"'{opener.text}' is never closed", opener.line)

    return go_file
