"""
Board Service API Routes
게시글/댓글 CRUD API입니다. 변경 API는 Bearer 토큰과 작성자 권한이 필요합니다.
"""

from flask import Blueprint, request, current_app
from sqlalchemy.exc import SQLAlchemyError

from .auth_utils import jwt_required, current_caller
from .errors import ApiError, NotFound, StorageError
from .models import db, Post, Comment
from .services import PostService, CommentService, authorize_owner_or_fail
from .utils import Responder, api_response, api_error, no_content
from .validators import QueryValidator, BodyValidator

bp = Blueprint('board', __name__)

SORT_FIELDS = ['ts', 'upvotes', 'downvotes']
ORDERS = ['asc', 'desc']


# ============================================================================
# 에러 처리
# ============================================================================

@bp.errorhandler(ApiError)
def handle_api_error(e):
    """NotFound / Forbidden 등 API 에러를 상태 코드로 변환"""
    return api_error(e.message, e.status_code, getattr(e, 'details', None))


@bp.errorhandler(SQLAlchemyError)
def handle_database_error(e):
    """DB 에러는 로그만 남기고 일반 메시지로 응답"""
    db.session.rollback()
    current_app.logger.error(f"Database error: {str(e)}")
    return api_error(StorageError.message, StorageError.status_code)


def _page_params(validator):
    return validator.number('page', False, 0).number('items', False, 1)


def _pagination(params):
    page = params.get_int('page', 0)
    items = params.get_int('items', current_app.config.get('DEFAULT_PAGE_SIZE', 20))
    return page, items


# ============================================================================
# 게시글 API
# ============================================================================

def _list_posts(feed):
    res = Responder()
    params = _page_params(
        QueryValidator()
        .inclusion('sort', False, SORT_FIELDS)
        .inclusion('order', False, ORDERS)
    )
    if not params.check(request.args, res):
        return res.response

    page, items = _pagination(params)
    posts = PostService.list_posts(
        feed=feed,
        sort=params.get_string('sort', 'ts'),
        order=params.get_string('order', 'desc'),
        page=page,
        items=items,
    )
    preview = current_app.config.get('LIST_CONTENT_PREVIEW', 80)
    return api_response(
        data=[p.to_dict(preview=preview) for p in posts],
        meta={"page": page, "items": items}
    )


@bp.route('/', methods=['GET'])
def list_posts():
    """게시글 목록 조회"""
    return _list_posts('all')


@bp.route('/temporary', methods=['GET'])
def list_temporary_posts():
    """만료일이 있는 게시글 목록 조회"""
    return _list_posts('temporary')


@bp.route('/permanent', methods=['GET'])
def list_permanent_posts():
    """만료일이 없는 게시글 목록 조회"""
    return _list_posts('permanent')


@bp.route('/<post_id>', methods=['GET'])
def get_post(post_id):
    """게시글 단건 조회"""
    res = Responder()
    params = QueryValidator().identifier('post_id', True)
    if not params.check(request.view_args, res):
        return res.response

    post = PostService.get_post(params.get_int('post_id'))
    if not post:
        raise NotFound("Post not found")
    return api_response(data=post.to_dict())


@bp.route('/', methods=['POST'])
@jwt_required
def create_post():
    """게시글 작성"""
    res = Responder()
    body = (
        BodyValidator()
        .string('title', True, 255)
        .string('content', True)
        .datetime('expiration', False, only_past=False, only_future=True, include_today=True, date_only=False)
    )
    if not body.check(request.get_json(silent=True), res):
        return res.response

    post = PostService.create_post(
        author=current_caller().user_id,
        title=body.get_string('title'),
        content=body.get_string('content'),
        expiration=body.get_datetime('expiration'),
    )
    current_app.logger.info(f"게시글 작성 완료: {post.id}")
    return api_response(data={"post_id": post.id}, message="Post created")


@bp.route('/<post_id>', methods=['PUT'])
@jwt_required
def edit_post(post_id):
    """게시글 수정 (제목, 내용 중 하나 이상)"""
    res = Responder()
    params = QueryValidator().identifier('post_id', True)
    if not params.check(request.view_args, res):
        return res.response
    body = BodyValidator().string('title', False, 255).string('content', False)
    if not body.check(request.get_json(silent=True), res):
        return res.response

    post_id = params.get_int('post_id')
    authorize_owner_or_fail(Post, post_id, current_caller().user_id)

    title = body.get_string('title')
    content = body.get_string('content')
    if title is None and content is None:
        return api_error("Nothing to do", 400)

    PostService.update_post(post_id, title=title, content=content)
    return no_content()


@bp.route('/<post_id>', methods=['DELETE'])
@jwt_required
def delete_post(post_id):
    """게시글 삭제 (댓글, 투표 포함)"""
    res = Responder()
    params = QueryValidator().identifier('post_id', True)
    if not params.check(request.view_args, res):
        return res.response

    post_id = params.get_int('post_id')
    authorize_owner_or_fail(Post, post_id, current_caller().user_id)

    PostService.delete_post(post_id)
    current_app.logger.info(f"게시글 삭제 완료: {post_id}")
    return no_content()


@bp.route('/<post_id>/vote', methods=['PUT'])
@jwt_required
def vote_for_post(post_id):
    """게시글 추천/비추천 (같은 투표 반복은 변화 없음)"""
    res = Responder()
    params = QueryValidator().identifier('post_id', True)
    if not params.check(request.view_args, res):
        return res.response
    body = BodyValidator().boolean('negative', False)
    if not body.check(request.get_json(silent=True), res):
        return res.response

    post_id = params.get_int('post_id')
    if not PostService.post_exists(post_id):
        raise NotFound("Post not found")

    PostService.vote(post_id, current_caller().user_id, body.get_bool('negative', False))
    return no_content()


# ============================================================================
# 댓글 API
# ============================================================================

@bp.route('/<post_id>/comments', methods=['GET'])
def list_post_comments(post_id):
    """게시글의 댓글 목록 조회"""
    res = Responder()
    params = QueryValidator().identifier('post_id', True)
    if not params.check(request.view_args, res):
        return res.response
    query = _page_params(QueryValidator())
    if not query.check(request.args, res):
        return res.response

    page, items = _pagination(query)
    comments = CommentService.list_comments(params.get_int('post_id'), page=page, items=items)
    return api_response(
        data=[c.to_dict() for c in comments],
        meta={"page": page, "items": items}
    )


@bp.route('/comment/<comment_id>', methods=['GET'])
def get_comment(comment_id):
    """댓글 단건 조회"""
    res = Responder()
    params = QueryValidator().identifier('comment_id', True)
    if not params.check(request.view_args, res):
        return res.response

    comment = CommentService.get_comment(params.get_int('comment_id'))
    if not comment:
        raise NotFound("Comment not found")
    return api_response(data=comment.to_dict())


@bp.route('/<post_id>/comment', methods=['POST'])
@jwt_required
def create_comment(post_id):
    """댓글 작성"""
    res = Responder()
    params = QueryValidator().identifier('post_id', True)
    if not params.check(request.view_args, res):
        return res.response
    body = BodyValidator().string('content', True)
    if not body.check(request.get_json(silent=True), res):
        return res.response

    post_id = params.get_int('post_id')
    if not PostService.post_exists(post_id):
        raise NotFound("Post not found")

    comment = CommentService.create_comment(post_id, current_caller().user_id, body.get_string('content'))
    return api_response(data={"comment_id": comment.id}, message="Comment created")


@bp.route('/comment/<comment_id>', methods=['PUT'])
@jwt_required
def edit_comment(comment_id):
    """댓글 수정"""
    res = Responder()
    params = QueryValidator().identifier('comment_id', True)
    if not params.check(request.view_args, res):
        return res.response
    body = BodyValidator().string('content', True)
    if not body.check(request.get_json(silent=True), res):
        return res.response

    comment_id = params.get_int('comment_id')
    authorize_owner_or_fail(Comment, comment_id, current_caller().user_id)

    CommentService.update_comment(comment_id, body.get_string('content'))
    return no_content()


@bp.route('/comment/<comment_id>', methods=['DELETE'])
@jwt_required
def delete_comment(comment_id):
    """댓글 삭제"""
    res = Responder()
    params = QueryValidator().identifier('comment_id', True)
    if not params.check(request.view_args, res):
        return res.response

    comment_id = params.get_int('comment_id')
    authorize_owner_or_fail(Comment, comment_id, current_caller().user_id)

    CommentService.delete_comment(comment_id)
    return no_content()
