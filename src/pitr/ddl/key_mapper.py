"""키 구간 매핑 - 현재 키가 원래 어떤 소스 키에서 왔는지 추적."""

from pitr.adapters.engine.scratch_engine import ScratchEngine
from pitr.core.errors import EngineError, KeyMapReadError
from pitr.core.models import KeyLookup
from pitr.ddl.oracle import SchemaOracle

INTERVAL_MAP_DB = "_interval_map_"
INTERVAL_MAP_TABLE = "_inter_map_"

CREATE_MAP_DB_SQL = f"CREATE DATABASE {INTERVAL_MAP_DB}"
CREATE_MAP_TABLE_SQL = (
    f"USE {INTERVAL_MAP_DB}; "
    f"create table {INTERVAL_MAP_TABLE} (curKey varchar(128) unique, srcKey varchar(128))"
)
SELECT_SRC_KEY_SQL = (
    f"SELECT srcKey FROM {INTERVAL_MAP_DB}.{INTERVAL_MAP_TABLE} WHERE curKey = %s"
)
INSERT_MAPPING_SQL = f"INSERT INTO {INTERVAL_MAP_DB}.{INTERVAL_MAP_TABLE} VALUES (%s, %s)"


class KeyIntervalMapper:
    """스크래치 엔진의 보조 테이블에 curKey → srcKey 매핑을 저장한다.

    삽입 시 한 단계만 따라간다. 이전 키에 매핑이 있으면 그 대상을, 없으면 이전 키
    자체를 저장한다. 삽입이 순서대로 일어나면 체인은 항상 원래 키로 모인다.
    """

    def __init__(self, engine: ScratchEngine, oracle: SchemaOracle) -> None:
        """매퍼 초기화.

        Args:
            engine: 스크래치 엔진 (조회/삽입)
            oracle: 스키마 오라클 (테이블 생성)
        """
        self._engine = engine
        self._oracle = oracle

    def create_table(self) -> None:
        """매핑 데이터베이스와 테이블을 만든다. 이미 있으면 아무것도 하지 않는다."""
        self._oracle.execute_ddl("", CREATE_MAP_DB_SQL)
        self._oracle.execute_ddl("", CREATE_MAP_TABLE_SQL)

    def fetch(self, key: str) -> KeyLookup:
        """키에 매핑된 소스 키를 조회한다.

        Returns:
            찾으면 FOUND, 없으면 NOT_FOUND 상태의 KeyLookup

        Raises:
            KeyMapReadError: 조회 자체가 실패한 경우
        """
        try:
            rows = self._engine.query(SELECT_SRC_KEY_SQL, (key,))
        except EngineError as e:
            raise KeyMapReadError(f"키 매핑 조회 실패 (curKey={key}): {e}") from e

        if not rows:
            return KeyLookup.miss()
        return KeyLookup.hit(rows[0][0])

    def insert(self, new_key: str, old_key: str) -> None:
        """new_key → (old_key의 매핑 대상 또는 old_key) 를 저장한다.

        Raises:
            KeyMapReadError: 이전 키 조회가 실패한 경우
            EngineExecutionError: 삽입이 실패한 경우 (curKey 중복 등)
        """
        lookup = self.fetch(old_key)
        source_key = lookup.value if lookup.found else old_key
        self._engine.execute(INSERT_MAPPING_SQL, (new_key, source_key))
