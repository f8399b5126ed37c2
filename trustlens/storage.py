"""SQLite 저장소 - 최근 분석 결과 관리.

저장소는 항상 마지막 실행 결과 하나만 보관합니다 (마지막 쓰기가 이김).
"""

import json
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from trustlens.core.exceptions import StorageError
from trustlens.core.logging import get_logger

logger = get_logger(__name__)

# DB 파일 경로
DEFAULT_DB_PATH = Path("data") / "trustlens.db"


class IssueRecord(BaseModel):
    """이슈 레코드 모델."""
    criterion: str
    score: float
    weight: float


class ReviewResultRecord(BaseModel):
    """리뷰 결과 레코드 모델."""
    model_config = ConfigDict(populate_by_name=True)

    text: str
    issues: list[IssueRecord] = Field(default_factory=list)
    suspicion_score: int = Field(alias="suspicionScore", ge=0, le=100)


class AnalysisStore:
    """최근 분석 결과 저장소."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        """
        초기화.

        Args:
            db_path: SQLite 파일 경로
        """
        self.db_path = Path(db_path)
        self._init_db()

    def _init_db(self) -> None:
        """데이터베이스 초기화."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
            try:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS analysis_results (
                        position INTEGER PRIMARY KEY,
                        text TEXT NOT NULL,
                        issues TEXT NOT NULL,
                        suspicion_score INTEGER NOT NULL,
                        saved_at TEXT NOT NULL
                    )
                """)
                conn.commit()
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            raise StorageError("저장소를 초기화할 수 없습니다.", path=str(self.db_path)) from e

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def save_analysis(self, data: list[dict[str, Any]]) -> int:
        """분석 결과 저장 (기존 결과는 모두 교체).

        Args:
            data: 직렬화된 ReviewResult 목록

        Returns:
            저장된 리뷰 수

        Raises:
            StorageError: 형식 오류 또는 DB 오류
        """
        try:
            records = [ReviewResultRecord.model_validate(item) for item in data]
        except ValidationError as e:
            raise StorageError("분석 결과 형식이 올바르지 않습니다.", details=str(e)) from e

        saved_at = datetime.now().isoformat()
        rows = [
            (
                position,
                record.text,
                json.dumps([i.model_dump() for i in record.issues], ensure_ascii=False),
                record.suspicion_score,
                saved_at,
            )
            for position, record in enumerate(records)
        ]

        try:
            conn = self._connect()
            try:
                # 삭제와 삽입을 한 트랜잭션으로 처리
                with conn:
                    conn.execute("DELETE FROM analysis_results")
                    conn.executemany(
                        """
                        INSERT INTO analysis_results
                            (position, text, issues, suspicion_score, saved_at)
                        VALUES (?, ?, ?, ?, ?)
                        """,
                        rows,
                    )
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(path=str(self.db_path)) from e

        logger.info(f"분석 결과 {len(rows)}건 저장")
        return len(rows)

    def get_analysis(self) -> Optional[list[dict[str, Any]]]:
        """마지막으로 저장된 분석 결과 조회 (없으면 None)."""
        try:
            conn = self._connect()
            try:
                cursor = conn.execute(
                    "SELECT text, issues, suspicion_score FROM analysis_results ORDER BY position"
                )
                rows = cursor.fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError("분석 결과를 조회할 수 없습니다.", path=str(self.db_path)) from e

        if not rows:
            return None

        return [
            {
                "text": row["text"],
                "issues": json.loads(row["issues"]),
                "suspicionScore": row["suspicion_score"],
            }
            for row in rows
        ]

    def clear(self) -> None:
        """저장된 결과 삭제.

        Raises:
            StorageError: DB 오류
        """
        try:
            conn = self._connect()
            try:
                with conn:
                    conn.execute("DELETE FROM analysis_results")
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError("저장된 결과를 삭제할 수 없습니다.", path=str(self.db_path)) from e


def create_analysis_store(db_path: str | Path = DEFAULT_DB_PATH) -> AnalysisStore:
    """AnalysisStore 팩토리 함수."""
    return AnalysisStore(db_path=db_path)
