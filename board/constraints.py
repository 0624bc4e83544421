"""
Board Service 제약 조건 엔진
규칙 집합(rule-set)을 입력 데이터에 적용하여 필드별 위반 목록을 만들어 냅니다.

- 네트워크/DB 접근이 없는 순수 함수입니다 (현재 시각도 인자로 받습니다).
- 필드별 검사 순서: (1) 존재 여부 (2) 타입/형태 (3) 범위/길이/포함 여부
- 선택(required=False) 필드가 비어 있으면 (2), (3)은 실행하지 않습니다.
"""

import enum
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Pattern, Sequence, Tuple

# 위반 코드별 메시지 (코드는 외부에서 렌더링/번역할 수 있도록 고정)
MESSAGES = {
    'blank': "can't be blank",
    'not_a_number': "is not a number",
    'not_an_integer': "must be an integer",
    'greater_than': "must be greater than {count}",
    'greater_than_or_equal_to': "must be greater than or equal to {count}",
    'less_than_or_equal_to': "must be less than or equal to {count}",
    'too_short': "is too short (minimum is {count} characters)",
    'too_long': "is too long (maximum is {count} characters)",
    'wrong_length': "has an incorrect length",
    'inclusion': "is not included in the list",
    'not_a_boolean': "must be a boolean",
    'invalid_date': "must be a valid date",
    'invalid_datetime': "must be a valid date and time",
    'too_late': "must be no later than {date}",
    'too_early': "must be no earlier than {date}",
    'invalid_format': "is invalid",
    'invalid_email': "is not a valid email",
    'not_an_identifier_array': "should be an array of identifier (integer greater than zero)",
    'not_a_polygon': "should be a shape (an array of at least 3 tuple with the latitude and the longitude)",
    'not_an_object': "should be an object",
}

# 쿼리 파라미터용 엄격한 숫자 형식 ("42", "-1.5")
NUMERIC_STRING = re.compile(r'^-?(0|[1-9]\d*)(\.\d+)?$')

EMAIL_PATTERN = re.compile(
    r"[a-z0-9!#$%&'*+/=?^_`{|}~-]+(?:\.[a-z0-9!#$%&'*+/=?^_`{|}~-]+)*"
    r"@(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+[a-z0-9](?:[a-z0-9-]*[a-z0-9])?",
    re.IGNORECASE,
)


class ConstraintKind(str, enum.Enum):
    presence = "presence"
    numeric = "numeric"
    length = "length"
    inclusion = "inclusion"
    boolean = "boolean"
    datetime = "datetime"
    regex = "regex"
    identifier_array = "identifier_array"
    polygon = "polygon"
    object = "object"


def prettify(name: str) -> str:
    """필드 이름을 메시지용으로 변환 (post_id -> Post id)"""
    text = name.replace('_', ' ').replace('.', ' ').strip()
    return text[:1].upper() + text[1:]


@dataclass(frozen=True)
class Violation:
    """단일 제약 위반 (code는 MESSAGES의 키)"""
    code: str
    params: Mapping[str, Any] = field(default_factory=dict)

    def render(self, name: str) -> str:
        return f"{prettify(name)} {MESSAGES[self.code].format(**self.params)}"


@dataclass
class ValidationResult:
    """검증 결과. violations가 비어 있으면 유효합니다."""
    violations: Dict[str, List[Violation]] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return not self.violations

    @property
    def details(self) -> Dict[str, List[str]]:
        return {
            name: [v.render(name) for v in items]
            for name, items in self.violations.items()
        }


# ============================================================================
# 타입 판별 헬퍼
# ============================================================================

def is_a_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def is_an_integer(value: Any) -> bool:
    return is_a_number(value) and value % 1 == 0


def is_an_identifier(value: Any) -> bool:
    return is_an_integer(value) and value > 0


def strict_equals(a: Any, b: Any) -> bool:
    """bool과 숫자를 구분하는 동등 비교"""
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    return a == b


def parse_iso8601(value: Any, date_only: bool) -> Optional[datetime]:
    """ISO-8601 문자열을 UTC datetime으로 변환. 실패하면 None"""
    if isinstance(value, datetime):
        parsed = value
    elif not isinstance(value, str):
        return None
    elif date_only:
        try:
            day = date.fromisoformat(value)
        except ValueError:
            return None
        return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
    else:
        text = value.strip()
        if text[-1:] in ('Z', 'z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


# ============================================================================
# 제약 조건
# ============================================================================

class Constraint:
    """제약 조건 기본 클래스. check()는 위반 목록을 반환합니다."""

    kind = ConstraintKind.presence

    def check(self, value: Any, now: datetime) -> List[Violation]:
        return []


class Numeric(Constraint):
    kind = ConstraintKind.numeric

    def __init__(self, minimum=None, maximum=None, greater_than=None,
                 integer_only: bool = True, allow_strings: bool = False):
        self.minimum = minimum
        self.maximum = maximum
        self.greater_than = greater_than
        self.integer_only = integer_only
        self.allow_strings = allow_strings

    def check(self, value, now):
        if isinstance(value, str) and self.allow_strings:
            if not NUMERIC_STRING.match(value):
                return [Violation('not_a_number')]
            if self.integer_only and '.' in value:
                return [Violation('not_an_integer')]
            value = float(value) if '.' in value else int(value)
        if not is_a_number(value):
            return [Violation('not_a_number')]
        if self.integer_only and not is_an_integer(value):
            return [Violation('not_an_integer')]

        errors = []
        if self.greater_than is not None and not value > self.greater_than:
            errors.append(Violation('greater_than', {'count': self.greater_than}))
        if self.minimum is not None and not value >= self.minimum:
            errors.append(Violation('greater_than_or_equal_to', {'count': self.minimum}))
        if self.maximum is not None and not value <= self.maximum:
            errors.append(Violation('less_than_or_equal_to', {'count': self.maximum}))
        return errors


class Length(Constraint):
    kind = ConstraintKind.length

    def __init__(self, maximum: Optional[int] = None, minimum: Optional[int] = None):
        self.maximum = maximum
        self.minimum = minimum

    def check(self, value, now):
        if not isinstance(value, str):
            return [Violation('wrong_length')]
        errors = []
        if self.minimum is not None and len(value) < self.minimum:
            errors.append(Violation('too_short', {'count': self.minimum}))
        if self.maximum is not None and len(value) > self.maximum:
            errors.append(Violation('too_long', {'count': self.maximum}))
        return errors


class Inclusion(Constraint):
    kind = ConstraintKind.inclusion

    def __init__(self, allowed: Sequence[Any]):
        self.allowed = tuple(allowed)

    def check(self, value, now):
        if any(strict_equals(value, candidate) for candidate in self.allowed):
            return []
        return [Violation('inclusion', {'value': value})]


class BooleanType(Constraint):
    kind = ConstraintKind.boolean

    def check(self, value, now):
        return [] if isinstance(value, bool) else [Violation('not_a_boolean')]


class BooleanString(Inclusion):
    """쿼리 파라미터용 boolean ('true' / 'false' 문자열)"""

    kind = ConstraintKind.boolean

    def __init__(self):
        super().__init__(('true', 'false'))


class DateTimeRange(Constraint):
    """날짜/시간 범위. 경계는 검사 시점의 now로 계산합니다."""

    kind = ConstraintKind.datetime

    def __init__(self, only_past: bool = True, only_future: bool = False,
                 include_today: bool = False, date_only: bool = True,
                 parser: Callable[[Any, bool], Optional[datetime]] = parse_iso8601):
        self.only_past = only_past
        self.only_future = only_future
        self.include_today = include_today
        self.date_only = date_only
        self.parser = parser

    def bounds(self, now: datetime) -> Tuple[Optional[datetime], Optional[datetime]]:
        """(earliest, latest) 경계 반환"""
        one_day = timedelta(days=1)
        latest = earliest = None
        if self.only_past:
            latest = now + one_day if self.include_today else now
        if self.only_future:
            earliest = now - one_day if self.include_today else now
        return earliest, latest

    def _format(self, moment: datetime) -> str:
        return moment.date().isoformat() if self.date_only else moment.isoformat()

    def check(self, value, now):
        parsed = self.parser(value, self.date_only)
        if parsed is None:
            return [Violation('invalid_date' if self.date_only else 'invalid_datetime')]

        earliest, latest = self.bounds(now)
        errors = []
        # include_today 경계는 포함, 그 외에는 현재 시각 자체를 허용하지 않음
        if latest is not None:
            if parsed > latest or (not self.include_today and parsed == latest):
                errors.append(Violation('too_late', {'date': self._format(latest)}))
        if earliest is not None:
            if parsed < earliest or (not self.include_today and parsed == earliest):
                errors.append(Violation('too_early', {'date': self._format(earliest)}))
        return errors


class Format(Constraint):
    kind = ConstraintKind.regex
    code = 'invalid_format'

    def __init__(self, pattern):
        self.pattern: Pattern = re.compile(pattern) if isinstance(pattern, str) else pattern

    def check(self, value, now):
        if not isinstance(value, str) or not self.pattern.fullmatch(value):
            return [Violation(self.code)]
        return []


class Email(Format):
    code = 'invalid_email'

    def __init__(self):
        super().__init__(EMAIL_PATTERN)


class IdentifierArray(Constraint):
    kind = ConstraintKind.identifier_array

    def check(self, value, now):
        if isinstance(value, list) and all(is_an_identifier(e) for e in value):
            return []
        return [Violation('not_an_identifier_array')]


class Polygon(Constraint):
    kind = ConstraintKind.polygon

    @staticmethod
    def _is_point(point) -> bool:
        if not isinstance(point, (list, tuple)) or len(point) != 2:
            return False
        lat, lng = point
        return (is_a_number(lat) and -90 <= lat <= 90
                and is_a_number(lng) and -180 <= lng <= 180)

    def check(self, value, now):
        if isinstance(value, list) and len(value) >= 3 and all(self._is_point(p) for p in value):
            return []
        return [Violation('not_a_polygon')]


class ObjectType(Constraint):
    kind = ConstraintKind.object

    def check(self, value, now):
        return [] if isinstance(value, dict) else [Violation('not_an_object')]


# ============================================================================
# 규칙 / 엔진
# ============================================================================

@dataclass(frozen=True)
class Rule:
    """필드 하나에 대한 규칙 선언"""
    required: bool
    constraint: Optional[Constraint] = None

    @property
    def kind(self) -> ConstraintKind:
        return self.constraint.kind if self.constraint else ConstraintKind.presence


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def evaluate(rules: Mapping[str, Rule], data: Optional[Mapping[str, Any]],
             now: Optional[datetime] = None) -> ValidationResult:
    """규칙 집합을 입력에 적용하여 ValidationResult 반환"""
    data = data if isinstance(data, Mapping) else {}
    now = now or utc_now()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    result = ValidationResult()

    for name, rule in rules.items():
        value = data.get(name)
        if value is None:
            if rule.required:
                result.violations[name] = [Violation('blank')]
            continue
        if rule.constraint is None:
            continue
        errors = rule.constraint.check(value, now)
        if errors:
            result.violations[name] = errors

    return result
