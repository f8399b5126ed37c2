"""
Provider 응답 파싱 모듈.

모델 응답은 JSON 객체 앞뒤에 설명 문장이나 코드 펜스를 붙이는 경우가 많으므로
첫 번째 `{`부터 마지막 `}`까지를 잘라 해석합니다.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, ValidationError

from trustlens.core.exceptions import ParseFailure, SchemaFailure
from trustlens.pipeline.models import SubScores


def extract_json_object(raw_text: str) -> dict[str, Any]:
    """응답 텍스트에서 JSON 객체 추출.

    Args:
        raw_text: 모델이 반환한 원문

    Returns:
        파싱된 딕셔너리

    Raises:
        ParseFailure: 중괄호 구간이 없거나 JSON 객체가 아닌 경우
    """
    start = raw_text.find("{")
    end = raw_text.rfind("}")
    if start == -1 or end < start:
        raise ParseFailure(
            "응답에서 JSON 객체를 찾을 수 없습니다.",
            raw_text=raw_text,
        )

    try:
        parsed = json.loads(raw_text[start : end + 1])
    except json.JSONDecodeError as e:
        raise ParseFailure(
            "API 응답의 JSON 형식이 올바르지 않습니다.",
            raw_text=raw_text,
            details=str(e),
        ) from e

    if not isinstance(parsed, dict):
        raise ParseFailure("API 응답이 JSON 객체가 아닙니다.", raw_text=raw_text)

    return parsed


class SubScoresPayload(BaseModel):
    """Provider 응답의 4개 세부 점수.

    숫자(int/float)만 허용하며 bool, 문자열, NaN/Infinity는 거부합니다.
    """

    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False, extra="ignore")

    superlatives_punctuation: StrictInt | StrictFloat = Field(alias="superlativesPunctuationScore")
    generic_content: StrictInt | StrictFloat = Field(alias="genericContentScore")
    ai_written: StrictInt | StrictFloat = Field(alias="aiWrittenScore")
    behavior_patterns: StrictInt | StrictFloat = Field(alias="behaviorPatternsScore")

    def to_sub_scores(self) -> SubScores:
        return SubScores(**{name: float(value) for name, value in self.model_dump().items()})


def validate_sub_scores(payload: dict[str, Any]) -> SubScores:
    """4개 점수 필드가 모두 유한한 숫자인지 확인하고 SubScores 생성.

    Raises:
        SchemaFailure: 필드가 없거나 숫자가 아닌 경우
    """
    try:
        validated = SubScoresPayload.model_validate(payload)
    except ValidationError as e:
        error = e.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else None
        if error["type"] == "missing":
            raise SchemaFailure(field=field) from e
        raise SchemaFailure("점수 필드가 유한한 숫자가 아닙니다.", field=field) from e
    return validated.to_sub_scores()


def parse_sub_scores(raw_text: str) -> SubScores:
    """모델 응답 원문을 SubScores로 변환."""
    return validate_sub_scores(extract_json_object(raw_text))
