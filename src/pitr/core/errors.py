"""PITR 스키마 카탈로그 에러 정의."""


class PITRError(Exception):
    """모든 PITR 에러의 기반 클래스."""


class DDLError(PITRError):
    """DDL 처리 에러."""


class TableNotExistError(DDLError):
    """조회된 컬럼이 없음 - 테이블이 없거나 방금 삭제됨."""


class SchemaNotFoundError(DDLError):
    """테이블 수준 이벤트가 아직 생성되지 않은 스키마를 참조함."""


class UnknownTableStateError(DDLError):
    """테이블 정의의 상태가 public/absent 어느 쪽도 아님."""


class UnknownDDLActionError(DDLError):
    """가속 경로가 인식하지 못하는 DDL 액션."""


class InvalidDDLError(DDLError):
    """인식할 수 없는 문장 형태이거나 문장 개수가 잘못됨."""


class MissingJobPayloadError(DDLError):
    """액션에 필요한 데이터베이스/테이블 정의가 잡에 없음."""


class EngineError(PITRError):
    """스크래치 엔진 에러."""


class EngineConnectionError(EngineError):
    """스크래치 엔진 접속 실패."""


class EngineExecutionError(EngineError):
    """스크래치 엔진 문장 실행 실패."""

    def __init__(self, message: str, code: int | None = None, statement: str = "") -> None:
        super().__init__(message)
        self.code = code
        self.statement = statement


class KeyMapReadError(PITRError):
    """키 매핑 테이블 조회 실패."""


class ReplayError(PITRError):
    """DDL 히스토리 재생 중단."""

    def __init__(self, message: str, job_id: int | None = None) -> None:
        super().__init__(message)
        self.job_id = job_id
