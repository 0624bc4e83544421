"""
Board Service Configuration
MSA 환경에서 게시글/댓글 서비스의 설정을 관리합니다.
"""

import os


def _database_url():
    """DATABASE_URL이 없으면 DB_* 환경변수로 MySQL URL 구성"""
    url = os.environ.get('DATABASE_URL')
    if url:
        return url
    return "mysql+pymysql://{user}:{password}@{host}:{port}/{name}".format(
        user=os.environ.get('DB_USER', 'board_user'),
        password=os.environ.get('DB_PASSWORD', ''),
        host=os.environ.get('DB_HOST', 'localhost'),
        port=int(os.environ.get('DB_PORT', 3306)),
        name=os.environ.get('DB_NAME', 'board_db'),
    )


class Config:
    # 보안 키 (운영 환경에서는 반드시 환경 변수로 설정)
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # 데이터베이스 설정 - Docker 환경에서는 mysql 서비스명 사용
    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # 커넥션 풀 (최대 60, 대기 3초)
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': int(os.environ.get('DB_POOL_SIZE', 60)),
        'pool_timeout': 3,
        'pool_recycle': 280,
        'pool_pre_ping': True,
    }

    # 인증 서비스 설정 (토큰 검증은 외부 서비스에 위임)
    AUTH_SERVICE_URL = os.environ.get('AUTH_SERVICE_URL', 'http://auth-service:8081/api/v1/auth/verify')
    AUTH_SERVICE_TIMEOUT = float(os.environ.get('AUTH_SERVICE_TIMEOUT', 5))
    # 사용자 ID가 담긴 토큰 클레임 이름
    AUTH_USER_ID_CLAIM = os.environ.get('AUTH_USER_ID_CLAIM', 'userId')

    # 목록 조회 설정
    DEFAULT_PAGE_SIZE = int(os.environ.get('DEFAULT_PAGE_SIZE', 20))
    LIST_CONTENT_PREVIEW = 80

    # CORS 허용 도메인 (쉼표 구분)
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', '*').split(',') if o.strip()]

    # AWS X-Ray 설정
    AWS_XRAY_ENABLED = os.environ.get('AWS_XRAY_ENABLED', 'true').lower() == 'true'
    AWS_XRAY_TRACING_NAME = os.environ.get('AWS_XRAY_TRACING_NAME', 'board-service')
    AWS_XRAY_CONTEXT_MISSING = os.environ.get('AWS_XRAY_CONTEXT_MISSING', 'LOG_ERROR')


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    AUTH_SERVICE_URL = 'http://auth.test/verify'
    AWS_XRAY_ENABLED = False
