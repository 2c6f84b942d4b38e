"""DDL 문장에서 대상 스키마/테이블을 추출하는 파서.

sqlglot MySQL 토크나이저로 인용 식별자, 주석, 문장 구분을 처리하고
선두 키워드로 문장 형태를 판별한다. 인식하지 못한 형태는 모두 에러다.
"""

from dataclasses import dataclass
from enum import Enum

import sqlglot
from sqlglot.dialects.mysql import MySQL
from sqlglot.errors import SqlglotError
from sqlglot.tokens import Token, TokenType

from pitr.core.errors import InvalidDDLError

_QUOTED_TYPES = (TokenType.IDENTIFIER, TokenType.STRING)

# RENAME 같은 명령 키워드 뒤의 나머지 문장은 STRING 토큰 하나로 나온다
_COMMAND_TYPES = frozenset(MySQL.tokenizer_class.COMMANDS)


class StatementKind(Enum):
    """인식하는 문장 형태."""

    USE = "use"
    CREATE_DATABASE = "create database"
    DROP_DATABASE = "drop database"
    CREATE_TABLE = "create table"
    ALTER_TABLE = "alter table"
    DROP_TABLE = "drop table"
    RENAME_TABLE = "rename table"
    TRUNCATE_TABLE = "truncate table"
    CREATE_INDEX = "create index"
    DROP_INDEX = "drop index"


@dataclass(frozen=True)
class ResolvedStatement:
    """문장 하나의 판별 결과. 스키마가 명시되지 않았으면 빈 문자열."""

    kind: StatementKind
    schema: str = ""
    table: str = ""


@dataclass(frozen=True)
class _Word:
    text: str
    quoted: bool

    def matches(self, *keywords: str) -> bool:
        return not self.quoted and self.text.upper() in keywords


class _StatementReader:
    """한 문장의 토큰을 앞에서부터 읽는다."""

    def __init__(self, words: list[_Word], ddl: str) -> None:
        self._words = words
        self._pos = 0
        self._ddl = ddl

    def accept(self, *keywords: str) -> bool:
        if self._pos < len(self._words) and self._words[self._pos].matches(*keywords):
            self._pos += 1
            return True
        return False

    def expect(self, *keywords: str) -> None:
        if not self.accept(*keywords):
            raise self.error()

    def skip_until(self, keyword: str) -> None:
        while self._pos < len(self._words):
            if self.accept(keyword):
                return
            self._pos += 1
        raise self.error()

    def name(self) -> str:
        if self._pos >= len(self._words):
            raise self.error()
        word = self._words[self._pos]
        if word.text == "." and not word.quoted:
            raise self.error()
        self._pos += 1
        return word.text

    def qualified_name(self) -> tuple[str, str]:
        """``table`` 또는 ``schema.table`` 을 읽는다."""
        first = self.name()
        if self.accept("."):
            return first, self.name()
        return "", first

    def error(self) -> InvalidDDLError:
        return InvalidDDLError(f"unknown ddl type, ddl: {self._ddl}")


def parse_schema_table_from_ddl(ddl: str) -> tuple[str, str]:
    """DDL에서 스키마와 테이블을 추출한다.

    ``use test; create table t (a int)`` 처럼 use 문 하나와 DDL 하나의 조합도 허용한다.

    Args:
        ddl: DDL 문자열

    Returns:
        (스키마, 테이블) 튜플. 문장에서 알 수 없으면 빈 문자열.

    Raises:
        InvalidDDLError: 인식할 수 없는 문장이거나 문장 개수가 잘못된 경우
    """
    statements = [resolve_statement(words, ddl) for words in _split_statements(ddl)]

    schema = ""
    table = ""
    have_use = False
    for statement in statements:
        if statement.kind == StatementKind.USE:
            have_use = True
        if statement.schema:
            schema = statement.schema
        if statement.kind not in (
            StatementKind.USE,
            StatementKind.CREATE_DATABASE,
            StatementKind.DROP_DATABASE,
        ):
            table = statement.table

    expected = 2 if have_use else 1
    if len(statements) != expected:
        raise InvalidDDLError(f"invalid ddl {ddl}")

    return schema, table


def resolve_statement(words: list[_Word], ddl: str) -> ResolvedStatement:
    """문장 하나의 형태와 대상을 판별한다."""
    reader = _StatementReader(words, ddl)

    if reader.accept("USE"):
        return ResolvedStatement(StatementKind.USE, schema=reader.name())

    if reader.accept("CREATE"):
        reader.accept("TEMPORARY")
        if reader.accept("DATABASE", "SCHEMA"):
            _accept_if_exists(reader, negated=True)
            return ResolvedStatement(StatementKind.CREATE_DATABASE, schema=reader.name())
        if reader.accept("TABLE"):
            _accept_if_exists(reader, negated=True)
            schema, table = reader.qualified_name()
            return ResolvedStatement(StatementKind.CREATE_TABLE, schema, table)
        reader.accept("UNIQUE", "FULLTEXT", "SPATIAL")
        if reader.accept("INDEX"):
            reader.skip_until("ON")
            schema, table = reader.qualified_name()
            return ResolvedStatement(StatementKind.CREATE_INDEX, schema, table)
        raise reader.error()

    if reader.accept("DROP"):
        reader.accept("TEMPORARY")
        if reader.accept("DATABASE", "SCHEMA"):
            _accept_if_exists(reader)
            return ResolvedStatement(StatementKind.DROP_DATABASE, schema=reader.name())
        if reader.accept("TABLE"):
            _accept_if_exists(reader)
            # 여러 테이블을 지워도 첫 번째 테이블만 대상으로 삼는다
            schema, table = reader.qualified_name()
            return ResolvedStatement(StatementKind.DROP_TABLE, schema, table)
        if reader.accept("INDEX"):
            reader.skip_until("ON")
            schema, table = reader.qualified_name()
            return ResolvedStatement(StatementKind.DROP_INDEX, schema, table)
        raise reader.error()

    if reader.accept("ALTER"):
        reader.accept("ONLINE", "OFFLINE")
        reader.accept("IGNORE")
        reader.expect("TABLE")
        schema, table = reader.qualified_name()
        return ResolvedStatement(StatementKind.ALTER_TABLE, schema, table)

    if reader.accept("RENAME"):
        reader.expect("TABLE")
        reader.qualified_name()
        reader.expect("TO")
        schema, table = reader.qualified_name()
        return ResolvedStatement(StatementKind.RENAME_TABLE, schema, table)

    if reader.accept("TRUNCATE"):
        reader.accept("TABLE")
        schema, table = reader.qualified_name()
        return ResolvedStatement(StatementKind.TRUNCATE_TABLE, schema, table)

    raise reader.error()


def _accept_if_exists(reader: _StatementReader, negated: bool = False) -> None:
    if reader.accept("IF"):
        if negated:
            reader.expect("NOT")
        reader.expect("EXISTS")


def _split_statements(ddl: str) -> list[list[_Word]]:
    """세미콜론 기준으로 문장을 나눈다. 빈 문장은 버린다."""
    statements: list[list[_Word]] = []
    current: list[_Word] = []
    previous: Token | None = None
    for token in _tokenize(ddl):
        if token.token_type == TokenType.SEMICOLON:
            if current:
                statements.append(current)
            current = []
            previous = token
            continue
        if _is_command_tail(token, previous, current):
            current.extend(word for tail in _tokenize(token.text) for word in _to_words(tail))
        else:
            current.extend(_to_words(token))
        previous = token
    if current:
        statements.append(current)
    return statements


def _tokenize(sql: str) -> list[Token]:
    try:
        return sqlglot.tokenize(sql, read="mysql")
    except SqlglotError as e:
        raise InvalidDDLError(f"invalid ddl {sql}: {e}") from e


def _is_command_tail(token: Token, previous: Token | None, current: list[_Word]) -> bool:
    """명령 키워드 바로 뒤에 붙은, 토크나이저가 통째로 넘긴 문장 나머지인지."""
    return (
        token.token_type == TokenType.STRING
        and previous is not None
        and previous.token_type in _COMMAND_TYPES
        and len(current) == 1
    )


def _to_words(token: Token) -> list[_Word]:
    if token.token_type in _QUOTED_TYPES:
        return [_Word(token.text, True)]
    # 토크나이저는 "IF NOT EXISTS" 같은 복합 키워드를 한 토큰으로 낼 수 있다
    return [_Word(part, False) for part in token.text.split()]
