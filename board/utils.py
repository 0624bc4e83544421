"""
Board Service 응답 유틸리티
표준화된 API 응답 생성과 요청당 단일 응답 보장을 담당합니다.
"""

from flask import jsonify


def api_response(data=None, message="Success", status_code=200, meta=None):
    """표준화된 API 응답 생성"""
    response = {
        "success": status_code < 400,
        "message": message,
        "data": data
    }

    if meta:
        response["meta"] = meta

    return jsonify(response), status_code


def error_body(message, details=None):
    """에러 응답 본문 생성 ({error, details})"""
    body = {"error": message}
    if details is not None:
        body["details"] = details
    return body


def api_error(message="Error", status_code=400, details=None):
    """표준화된 API 에러 응답 생성"""
    return jsonify(error_body(message, details)), status_code


def no_content():
    """본문 없는 204 응답"""
    return '', 204


class Responder:
    """
    핸들러가 보낼 응답을 하나만 보관합니다.
    검증 실패 등으로 응답이 이미 작성된 뒤 다시 쓰면 RuntimeError가 발생합니다.
    """

    def __init__(self):
        self._response = None

    @property
    def written(self):
        return self._response is not None

    @property
    def response(self):
        if self._response is None:
            raise RuntimeError("No response has been written")
        return self._response

    def send(self, body, status_code=200):
        if self._response is not None:
            raise RuntimeError("A response has already been written for this request")
        self._response = (jsonify(body), status_code)

    def error(self, message, status_code=400, details=None):
        self.send(error_body(message, details), status_code)
