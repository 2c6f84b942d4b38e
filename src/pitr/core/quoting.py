"""MySQL 식별자 인용 헬퍼."""


def quote_identifier(name: str) -> str:
    """식별자를 백틱으로 감싼다. 내부 백틱은 두 번 써서 이스케이프."""
    return "`{}`".format(name.replace("`", "``"))


def quote_schema_table(schema: str, table: str) -> str:
    """`schema`.`table` 형식의 키를 만든다."""
    return f"{quote_identifier(schema)}.{quote_identifier(table)}"
