"""
Board Service 인증 유틸리티
Bearer 토큰을 인증 서비스에 검증 요청하고 호출자 정보를 요청 컨텍스트에 저장합니다.
"""

import jwt
import requests
import logging
from dataclasses import dataclass, field
from functools import wraps
from typing import Any, Dict, Optional
from flask import request, current_app

from .errors import Unauthenticated, UpstreamAuthError
from .utils import api_error

logger = logging.getLogger(__name__)

INVALID_TOKEN = "Invalid token"


@dataclass(frozen=True)
class CallerIdentity:
    """인증된 호출자 (요청 하나 동안만 유지)"""
    user_id: int
    claims: Dict[str, Any] = field(default_factory=dict)


def extract_auth_token(authorization: Optional[str]) -> Optional[str]:
    """'Bearer <token>' 형식에서 토큰 추출 (scheme 대소문자 무시)"""
    if not authorization or not isinstance(authorization, str):
        return None
    parts = authorization.split(' ', 1)
    if len(parts) != 2 or parts[0].lower() != 'bearer':
        return None
    token = parts[1].strip()
    return token or None


def verify_with_auth_service(token: str) -> requests.Response:
    """인증 서비스에 토큰 검증 요청 (실패 시 requests 예외 전파)"""
    return requests.get(
        current_app.config['AUTH_SERVICE_URL'],
        headers={"Authorization": f"Bearer {token}"},
        timeout=current_app.config.get('AUTH_SERVICE_TIMEOUT', 5),
    )


def identity_from_token(token: str, claim: str) -> Optional[CallerIdentity]:
    """
    토큰 클레임을 로컬에서 디코드 (서명은 인증 서비스가 이미 검증함)
    사용자 ID 클레임이 없거나 정수가 아니면 None
    """
    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as e:
        logger.warning(f"토큰 디코드 실패: {e}")
        return None

    user_id = payload.get(claim)
    if isinstance(user_id, bool):
        return None
    if isinstance(user_id, str) and user_id.isdigit():
        user_id = int(user_id)
    if not isinstance(user_id, int):
        logger.warning(f"토큰에 사용자 ID 클레임이 없음: {claim}")
        return None
    return CallerIdentity(user_id=user_id, claims=payload)


def jwt_required(f):
    """Bearer 토큰 검증 데코레이터"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = extract_auth_token(request.headers.get('Authorization'))

        if not token:
            logger.warning("Authorization header missing or invalid format")
            return api_error(Unauthenticated.message, 401)

        try:
            result = verify_with_auth_service(token)
        except requests.RequestException as e:
            logger.error(f"인증 서비스 연결 실패: {e}")
            return api_error(UpstreamAuthError.message, 500)

        if result.status_code != 200:
            logger.warning(f"인증 서비스가 토큰을 거부함: {result.status_code}")
            return api_error(INVALID_TOKEN, result.status_code)

        identity = identity_from_token(token, current_app.config.get('AUTH_USER_ID_CLAIM', 'userId'))
        if identity is None:
            return api_error(INVALID_TOKEN, 401)

        request.current_user = identity
        logger.info(f"JWT validation successful for user: {identity.user_id}")
        return f(*args, **kwargs)

    return decorated_function


def current_caller() -> CallerIdentity:
    """현재 요청의 호출자 정보 (jwt_required 이후에만 사용)"""
    identity = getattr(request, 'current_user', None)
    if identity is None:
        raise Unauthenticated()
    return identity
