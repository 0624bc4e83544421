"""
Board Service 에러 정의
핸들러 경계에서 상태 코드로 변환되는 예외 클래스들입니다.
"""

from typing import Dict, List, Optional


class ApiError(Exception):
    """HTTP 상태 코드를 가진 API 에러의 기본 클래스"""

    status_code = 500
    message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        if status_code:
            self.status_code = status_code


class ValidationError(ApiError):
    """요청 파라미터 검증 실패 (필드별 상세 정보 포함)"""

    status_code = 400
    message = "Invalid parameters"

    def __init__(self, details: Dict[str, List[str]], message: Optional[str] = None):
        super().__init__(message)
        self.details = details


class Unauthenticated(ApiError):
    status_code = 401
    message = "Authorization header do not contains a valid token"


class Forbidden(ApiError):
    status_code = 403
    message = "Cannot modify this resource"


class NotFound(ApiError):
    status_code = 404
    message = "Resource not found"


class UpstreamAuthError(ApiError):
    """인증 서비스 연결 실패"""

    status_code = 500
    message = "Error while contacting auth service"


class StorageError(ApiError):
    """데이터베이스 오류 (상세 내용은 로그에만 남김)"""

    status_code = 500
    message = "Database error"
