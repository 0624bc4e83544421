"""
Board Service Validation Layer
요청 파라미터 검증을 위한 체이닝 방식의 규칙 빌더입니다.

    params = QueryValidator().identifier('post_id', True)
    if not params.check(request.view_args, res):
        return res.response
    post_id = params.get_int('post_id')

- QueryValidator: 경로/쿼리 파라미터 (항상 문자열, 숫자 문자열 허용)
- BodyValidator: JSON 본문 (네이티브 타입만 허용)
"""

import logging
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence

from .constraints import (
    NUMERIC_STRING,
    BooleanString,
    BooleanType,
    Constraint,
    DateTimeRange,
    Email,
    Format,
    IdentifierArray,
    Inclusion,
    Length,
    Numeric,
    ObjectType,
    Polygon,
    Rule,
    ValidationResult,
    evaluate,
    is_a_number,
    is_an_integer,
    parse_iso8601,
    utc_now,
)
from .errors import ValidationError

logger = logging.getLogger(__name__)


class RequestValidator:
    """규칙 빌더 공통 로직 (선언은 필드당 한 번만 가능)"""

    strings_only = False

    def __init__(self, clock=None, date_parser=None):
        self._rules: Dict[str, Rule] = {}
        self._data: Optional[Mapping[str, Any]] = None
        self._clock = clock or utc_now
        self._date_parser = date_parser or parse_iso8601

    @property
    def rules(self) -> Mapping[str, Rule]:
        return MappingProxyType(self._rules)

    def _declare(self, name: str, required: bool, constraint: Optional[Constraint] = None):
        if name in self._rules:
            raise ValueError(f"Field '{name}' is already declared")
        self._rules[name] = Rule(required=bool(required), constraint=constraint)
        return self

    def _numeric(self, **options) -> Numeric:
        return Numeric(allow_strings=self.strings_only, **options)

    def _boolean(self) -> Constraint:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # 규칙 선언
    # ------------------------------------------------------------------

    def presence(self, name: str, required: bool):
        """값이 존재하는지만 검사"""
        return self._declare(name, required)

    def number(self, name: str, required: bool, min=None, max=None, integer_only: bool = True):
        """
        숫자 검사
        min / max: 허용 범위 (포함)
        integer_only: False면 실수도 허용
        """
        return self._declare(name, required, self._numeric(
            minimum=min, maximum=max, integer_only=integer_only))

    def identifier(self, name: str, required: bool):
        """식별자 검사 (0보다 큰 정수)"""
        return self._declare(name, required, self._numeric(greater_than=0, integer_only=True))

    def string(self, name: str, required: bool, max_length: int = -1, min_length: int = 0):
        """문자열 길이 검사 (0 이하는 제한 없음)"""
        return self._declare(name, required, Length(
            maximum=max_length if max_length > 0 else None,
            minimum=min_length if min_length > 0 else None))

    def boolean(self, name: str, required: bool):
        return self._declare(name, required, self._boolean())

    def inclusion(self, name: str, required: bool, allowed: Sequence[Any]):
        """허용된 값 중 하나인지 검사"""
        return self._declare(name, required, Inclusion(allowed))

    def datetime(self, name: str, required: bool, only_past: bool = True, only_future: bool = False,
                 include_today: bool = False, date_only: bool = True):
        """
        날짜 검사
        only_past: 과거만 허용 (기본 True)
        only_future: 미래만 허용 (기본 False)
        include_today: 경계를 하루 늘림 (기본 False)
        date_only: True면 YYYY-MM-DD, False면 ISO-8601 날짜+시간 (기본 True)
        """
        return self._declare(name, required, DateTimeRange(
            only_past=only_past, only_future=only_future, include_today=include_today,
            date_only=date_only, parser=self._date_parser))

    def regex(self, name: str, pattern, required: bool):
        return self._declare(name, required, Format(pattern))

    def email(self, required: bool, name: str = 'email'):
        return self._declare(name, required, Email())

    def position(self):
        """lat / lng 좌표 쌍 (둘 다 필수)"""
        self._declare('lat', True, self._numeric(minimum=-90, maximum=90, integer_only=False))
        return self._declare('lng', True, self._numeric(minimum=-180, maximum=180, integer_only=False))

    # ------------------------------------------------------------------
    # 실행
    # ------------------------------------------------------------------

    def validate(self, data) -> ValidationResult:
        return evaluate(self._rules, data, self._clock())

    def check(self, data, responder) -> bool:
        """
        선언된 규칙으로 data를 검사합니다.
        실패하면 responder에 400 응답을 쓰고 False를 반환합니다 (호출자는 즉시 return).
        """
        result = self.validate(data)
        if not result.valid:
            self._data = None
            logger.info(f"Invalid parameters: {sorted(result.violations)}")
            error = ValidationError(result.details)
            responder.error(error.message, error.status_code, error.details)
            return False
        self._data = data if isinstance(data, Mapping) else {}
        return True

    # ------------------------------------------------------------------
    # 검증된 값 조회
    # ------------------------------------------------------------------

    def _value(self, name: str):
        if name not in self._rules:
            raise LookupError(f"Field '{name}' was never declared")
        if self._data is None:
            raise RuntimeError("Values are only available after a successful check()")
        return self._data.get(name)

    def get(self, name: str, default=None):
        value = self._value(name)
        return default if value is None else value

    def get_string(self, name: str, default: Optional[str] = None) -> Optional[str]:
        value = self._value(name)
        if value is None:
            return default
        if not isinstance(value, str):
            raise TypeError(f"Field '{name}' is not a string")
        return value

    def get_int(self, name: str, default: Optional[int] = None) -> Optional[int]:
        value = self._value(name)
        if value is None:
            return default
        if is_an_integer(value):
            return int(value)
        if self.strings_only and isinstance(value, str) and NUMERIC_STRING.match(value) and '.' not in value:
            return int(value)
        raise TypeError(f"Field '{name}' is not an integer")

    def get_float(self, name: str, default: Optional[float] = None) -> Optional[float]:
        value = self._value(name)
        if value is None:
            return default
        if is_a_number(value):
            return float(value)
        if self.strings_only and isinstance(value, str) and NUMERIC_STRING.match(value):
            return float(value)
        raise TypeError(f"Field '{name}' is not a number")

    def get_bool(self, name: str, default: Optional[bool] = None) -> Optional[bool]:
        value = self._value(name)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        if self.strings_only and value in ('true', 'false'):
            return value == 'true'
        raise TypeError(f"Field '{name}' is not a boolean")

    def get_datetime(self, name: str, default=None):
        value = self._value(name)
        if value is None:
            return default
        constraint = self._rules[name].constraint
        date_only = constraint.date_only if isinstance(constraint, DateTimeRange) else False
        parsed = self._date_parser(value, date_only)
        if parsed is None:
            raise TypeError(f"Field '{name}' is not a date")
        return parsed


class QueryValidator(RequestValidator):
    """경로/쿼리 파라미터 검증 (값은 항상 문자열)"""

    strings_only = True

    def _boolean(self):
        return BooleanString()


class BodyValidator(RequestValidator):
    """JSON 본문 검증 (네이티브 타입)"""

    def _boolean(self):
        return BooleanType()

    def identifier_array(self, name: str, required: bool):
        """식별자(0보다 큰 정수) 배열"""
        return self._declare(name, required, IdentifierArray())

    def polygon(self, name: str, required: bool):
        """[위도, 경도] 쌍이 3개 이상인 배열"""
        return self._declare(name, required, Polygon())

    def object(self, name: str, required: bool):
        return self._declare(name, required, ObjectType())
