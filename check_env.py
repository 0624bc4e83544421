#!/usr/bin/env python3
"""
환경변수 확인 스크립트
서비스 시작 전에 필요한 환경변수가 설정되었는지 확인합니다.
"""

import os
import sys

# 필수 환경변수 목록
REQUIRED_VARS = {
    'DATABASE_URL': '데이터베이스 연결 URL (없으면 DB_HOST/DB_USER/DB_PASSWORD/DB_NAME 사용)',
    'AUTH_SERVICE_URL': '토큰 검증용 인증 서비스 URL',
    'SECRET_KEY': 'Flask 보안 키'
}

# 선택적 환경변수 목록 (기본값 있음)
OPTIONAL_VARS = {
    'AUTH_SERVICE_TIMEOUT': '인증 서비스 타임아웃 초 (기본값: 5)',
    'AUTH_USER_ID_CLAIM': '사용자 ID 클레임 이름 (기본값: userId)',
    'DEFAULT_PAGE_SIZE': '목록 기본 항목 수 (기본값: 20)',
    'DB_POOL_SIZE': '커넥션 풀 크기 (기본값: 60)',
    'CORS_ORIGINS': 'CORS 허용 도메인, 쉼표 구분 (기본값: *)',
    'AWS_XRAY_ENABLED': 'X-Ray 추적 사용 여부 (기본값: true)',
    'AWS_XRAY_TRACING_NAME': 'X-Ray 서비스 이름 (기본값: board-service)'
}


def missing_required_variables(environ=None):
    """설정되지 않은 필수 환경변수 목록"""
    environ = os.environ if environ is None else environ
    missing = []
    for var in REQUIRED_VARS:
        if environ.get(var):
            continue
        # DATABASE_URL 대신 DB_* 조합도 허용
        if var == 'DATABASE_URL' and environ.get('DB_HOST') and environ.get('DB_USER'):
            continue
        missing.append(var)
    return missing


def check_environment_variables(environ=None):
    """환경변수 확인"""
    environ = os.environ if environ is None else environ
    print("🔍 환경변수 확인 중...")

    missing_required = missing_required_variables(environ)

    print("\n📋 필수 환경변수:")
    for var, description in REQUIRED_VARS.items():
        value = environ.get(var)
        if value:
            # 보안상 민감한 정보는 일부만 표시
            if 'SECRET' in var or 'DATABASE' in var:
                display_value = value[:8] + "..." if len(value) > 8 else "***"
            else:
                display_value = value
            print(f"✅ {var}: {display_value}")
        elif var in missing_required:
            print(f"❌ {var}: 설정되지 않음 - {description}")
        else:
            print(f"⚪ {var}: DB_* 환경변수 사용")

    print("\n📋 선택적 환경변수:")
    for var, description in OPTIONAL_VARS.items():
        value = environ.get(var)
        if value:
            print(f"✅ {var}: {value}")
        else:
            print(f"⚪ {var}: 기본값 사용 - {description}")

    print("\n" + "="*50)

    if missing_required:
        print("❌ 필수 환경변수가 설정되지 않았습니다!")
        print("\n다음 환경변수를 설정하세요:")
        for var in missing_required:
            print(f"  - {var}")
        print("\nLinux/Mac:")
        print(f"  export {missing_required[0]}=\"your-value\"")
        return False

    print("🎉 모든 필수 환경변수가 설정되었습니다!")
    print("\n서비스를 시작할 수 있습니다:")
    print("  python app.py")
    return True


if __name__ == "__main__":
    success = check_environment_variables()
    sys.exit(0 if success else 1)
