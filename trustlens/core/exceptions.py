"""
커스텀 예외 클래스 모듈.

프로젝트에서 사용하는 예외 클래스들을 정의합니다.
"""

from typing import Optional


class TrustLensError(Exception):
    """TrustLens 기본 예외 클래스."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        suggestion: Optional[str] = None,
    ):
        """
        Args:
            message: 에러 메시지
            details: 상세 정보
            suggestion: 해결 방법 제안
        """
        super().__init__(message)
        self.message = message
        self.details = details
        self.suggestion = suggestion

    def __str__(self) -> str:
        parts = [self.message]
        if self.details:
            parts.append(f"상세: {self.details}")
        if self.suggestion:
            parts.append(f"해결: {self.suggestion}")
        return " | ".join(parts)


# =============================================================================
# 리뷰 채점 관련 예외
# =============================================================================


class ScoringFailure(TrustLensError):
    """리뷰 한 건의 채점 실패.

    실행 전체를 중단시키지 않으며, 해당 리뷰만 결과에서 제외됩니다.
    """

    kind = "unknown"

    def __init__(
        self,
        message: str = "리뷰를 채점할 수 없습니다.",
        **kwargs,
    ):
        super().__init__(message, **kwargs)


class TransportFailure(ScoringFailure):
    """Provider 또는 채널에 도달할 수 없거나 비정상 응답."""

    kind = "transport"

    def __init__(
        self,
        message: str = "판정 Provider 호출에 실패했습니다.",
        status_code: Optional[int] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.status_code = status_code


class ParseFailure(ScoringFailure):
    """응답에서 JSON 객체를 추출하거나 해석할 수 없음."""

    kind = "parse"

    def __init__(
        self,
        message: str = "API 응답을 해석할 수 없습니다.",
        raw_text: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.raw_text = raw_text


class SchemaFailure(ScoringFailure):
    """JSON은 정상이지만 필수 점수 필드가 없거나 숫자가 아님."""

    kind = "schema"

    def __init__(
        self,
        message: str = "API 응답에 필수 점수 필드가 없습니다.",
        field: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        if field:
            self.details = f"필드: {field}"


class ConfigFailure(ScoringFailure):
    """Provider 인증 정보가 설정되지 않음."""

    kind = "config"

    def __init__(
        self,
        message: str = "API 키가 설정되지 않았습니다.",
        **kwargs,
    ):
        kwargs.setdefault("suggestion", ".env 파일의 API 키를 확인해주세요.")
        super().__init__(message, **kwargs)


FAILURE_KINDS: dict[str, type[ScoringFailure]] = {
    TransportFailure.kind: TransportFailure,
    ParseFailure.kind: ParseFailure,
    SchemaFailure.kind: SchemaFailure,
    ConfigFailure.kind: ConfigFailure,
}


def failure_from_reply(error: str, kind: Optional[str]) -> ScoringFailure:
    """채널 응답의 kind 태그로부터 실패 예외를 복원.

    kind가 없거나 알 수 없으면 TransportFailure로 간주합니다.
    """
    failure_cls = FAILURE_KINDS.get(kind or "", TransportFailure)
    return failure_cls(error)


# =============================================================================
# 메시지 채널 관련 예외
# =============================================================================


class ChannelError(TrustLensError):
    """메시지 채널이 닫혔거나 수신자가 없음."""

    def __init__(
        self,
        message: str = "메시지 채널에 연결할 수 없습니다.",
        **kwargs,
    ):
        super().__init__(message, **kwargs)


# =============================================================================
# 저장소 관련 예외
# =============================================================================


class StorageError(TrustLensError):
    """분석 결과 저장/조회 실패."""

    def __init__(
        self,
        message: str = "분석 결과를 저장할 수 없습니다.",
        path: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.path = path
        if path:
            self.details = f"파일: {path}"


# =============================================================================
# 크롤링 관련 예외
# =============================================================================


class CrawlerError(TrustLensError):
    """크롤링 실패 예외."""

    def __init__(
        self,
        message: str = "페이지를 불러오지 못했습니다.",
        url: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.url = url


class CrawlerTimeoutError(CrawlerError):
    """크롤링 타임아웃 예외."""

    def __init__(
        self,
        message: str = "페이지 로딩 시간이 초과되었습니다.",
        timeout: Optional[int] = None,
        **kwargs,
    ):
        super().__init__(
            message,
            suggestion="네트워크 상태를 확인하거나 타임아웃 설정을 늘려주세요.",
            **kwargs,
        )
        self.timeout = timeout


class CrawlerBlockedError(CrawlerError):
    """크롤링 차단 예외."""

    def __init__(
        self,
        message: str = "크롤링이 차단되었습니다.",
        **kwargs,
    ):
        super().__init__(
            message,
            suggestion="잠시 후 다시 시도하거나 저장된 HTML 파일로 분석해주세요.",
            **kwargs,
        )
