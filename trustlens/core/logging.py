"""
로깅 설정 모듈.

콘솔/파일 핸들러 설정과 함께, 분석 실행 번호와 리뷰 순번을
로그 라인에 붙이는 컨텍스트(log_context)를 제공합니다.

채점 태스크는 생성 시점의 컨텍스트를 복사하므로 동시에 채점 중인
리뷰들의 로그도 각자의 "run N:review M" 표시를 유지합니다.
"""

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Iterator, Optional


# 로그 포맷 (context는 LogContextFilter가 채움)
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | [%(context)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# 컨텍스트 밖에서 찍힌 로그의 표시
NO_CONTEXT = "-"

# 외부 라이브러리 로그는 WARNING 이상만
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "langchain", "asyncio", "playwright")

_log_context: ContextVar[tuple[str, ...]] = ContextVar("trustlens_log_context", default=())


@contextmanager
def log_context(label: str) -> Iterator[str]:
    """
    블록 안에서 찍히는 로그에 label을 붙임.

    중첩하면 바깥 label 뒤에 ":"로 이어 붙습니다.

    Example:
        ```python
        with log_context("run 2"):
            with log_context("review 4"):
                logger.info("채점 완료")  # [run 2:review 4] 채점 완료
        ```
    """
    token = _log_context.set(_log_context.get() + (label,))
    try:
        yield current_log_context()
    finally:
        _log_context.reset(token)


def current_log_context() -> str:
    """현재 로그 컨텍스트 문자열."""
    return ":".join(_log_context.get()) or NO_CONTEXT


class LogContextFilter(logging.Filter):
    """레코드에 context 속성을 채우는 필터."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.context = current_log_context()
        return True


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    log_dir: Optional[Path] = None,
) -> None:
    """
    로깅 설정 초기화.

    Args:
        level: 로그 레벨 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: 로그 파일명 (None이면 파일 로깅 비활성화)
        log_dir: 로그 디렉토리 경로 (None이면 ./logs)
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    context_filter = LogContextFilter()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_path = (log_dir or Path("logs")) / log_file
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        # 핸들러 단위로 붙여야 자식 로거의 레코드에도 적용됨
        handler.addFilter(context_filter)
        root_logger.addHandler(handler)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """모듈별 로거 반환 (보통 __name__ 사용)."""
    return logging.getLogger(name)


def log_exception(logger: logging.Logger, error: Exception, context: str = "") -> None:
    """예외를 traceback과 함께 로깅."""
    prefix = f"{context}: " if context else ""
    logger.error(f"{prefix}{type(error).__name__}: {error}", exc_info=True)


def preview(text: str, length: int = 60) -> str:
    """로그 출력용 텍스트 미리보기."""
    text = " ".join(text.split())
    return text if len(text) <= length else text[:length] + "..."
