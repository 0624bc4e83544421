"""
Board Service - Flask Application
MSA 아키텍처에서 게시글/댓글 서비스를 담당하는 Flask 애플리케이션입니다.
"""

import logging
from urllib.parse import urlparse

from flask import Flask, jsonify
from flask_cors import CORS
from flask_swagger_ui import get_swaggerui_blueprint
from sqlalchemy import create_engine, text
from werkzeug.exceptions import HTTPException

from board.models import db
from board.routes import bp
from board.utils import api_error

# 로깅 설정
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SWAGGER_URL = '/api/docs'
API_URL = '/static/swagger.json'


def _create_mysql_database(db_url):
    """MySQL 데이터베이스가 없으면 생성"""
    parsed = urlparse(db_url)
    if not parsed.scheme.startswith('mysql'):
        return
    db_name = parsed.path[1:]
    base_url = f"{parsed.scheme}://{parsed.netloc}/"

    try:
        engine = create_engine(base_url)
        with engine.connect() as conn:
            conn.execute(text(f"CREATE DATABASE IF NOT EXISTS {db_name}"))
            conn.commit()
        engine.dispose()
        logger.info(f"Database '{db_name}' created successfully")
    except Exception as e:
        logger.error(f"Database creation failed: {str(e)}")


def create_app(config_class=None):
    """Flask 애플리케이션 팩토리"""
    app = Flask(__name__)

    # 설정 로드
    if config_class:
        app.config.from_object(config_class)
    else:
        # 기본 설정 (config.py의 Config 클래스 사용)
        from config import Config
        app.config.from_object(Config)

    # X-Ray 분산 추적 설정 (다른 미들웨어보다 먼저 설정)
    if app.config.get('AWS_XRAY_ENABLED'):
        from aws_xray_sdk.core import xray_recorder
        from aws_xray_sdk.ext.flask.middleware import XRayMiddleware

        xray_recorder.configure(
            service=app.config['AWS_XRAY_TRACING_NAME'],
            context_missing=app.config['AWS_XRAY_CONTEXT_MISSING'],
        )
        XRayMiddleware(app, xray_recorder)

    # CORS 설정
    CORS(app, resources={
        r"/api/*": {
            "origins": app.config.get('CORS_ORIGINS', '*'),
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"]
        }
    })

    # 데이터베이스 초기화
    _create_mysql_database(app.config['SQLALCHEMY_DATABASE_URI'])
    db.init_app(app)

    # 데이터베이스 테이블 생성
    with app.app_context():
        try:
            db.create_all()
            logger.info("Database tables created successfully")
        except Exception as e:
            logger.error(f"Database initialization failed: {str(e)}")
            raise

    # Swagger UI 설정
    swaggerui_blueprint = get_swaggerui_blueprint(
        SWAGGER_URL,
        API_URL,
        config={
            'app_name': "Board Service API"
        }
    )
    app.register_blueprint(swaggerui_blueprint, url_prefix=SWAGGER_URL)

    # 블루프린트 등록
    app.register_blueprint(bp, url_prefix='/api/v1/posts')

    # 전역 에러 핸들러
    @app.errorhandler(HTTPException)
    def handle_exception(e):
        """HTTP 예외 처리"""
        return api_error(e.description, e.code)

    @app.errorhandler(Exception)
    def handle_generic_exception(e):
        """일반 예외 처리"""
        logger.error(f"Unhandled exception: {str(e)}")
        return api_error("An unexpected error occurred", 500)

    # 헬스체크 엔드포인트
    @app.route('/health', methods=['GET'])
    def health():
        """서비스 상태 확인"""
        return jsonify({
            'status': 'healthy',
            'service': 'Board Service API',
            'version': '1.0.0'
        })

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(debug=True, host='0.0.0.0', port=8082)
