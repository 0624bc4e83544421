"""
Board Service Business Logic Layer
게시글/댓글 저장소 로직과 작성자 권한 확인을 담당하는 서비스 클래스들입니다.
"""

import logging
from sqlalchemy import delete, update
from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from .errors import Forbidden, NotFound
from .models import db, Post, Comment, PostVote

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    'ts': Post.ts,
    'upvotes': Post.upvotes,
    'downvotes': Post.downvotes,
}


def authorize_owner_or_fail(model, resource_id, caller_id):
    """
    작성자 권한 확인
    - 리소스가 없으면 NotFound (404)
    - 작성자가 호출자와 다르면 Forbidden (403)
    작성자 ID만 조회하고 결과는 바로 버립니다.
    """
    name = model.__resource_name__
    row = db.session.execute(
        db.select(model.author).where(model.id == resource_id)
    ).first()

    if row is None:
        raise NotFound(f"{name.capitalize()} not found")
    if row.author != caller_id:
        logger.warning(f"{name} {resource_id} 수정 거부: 작성자 {row.author}, 호출자 {caller_id}")
        raise Forbidden(f"Cannot modify this {name}")


class PostService:
    """게시글 관련 비즈니스 로직"""

    @staticmethod
    def list_posts(feed='all', sort='ts', order='desc', page=0, items=20):
        """게시글 목록 조회 (feed: all / temporary / permanent)"""
        query = Post.query
        if feed == 'permanent':
            query = query.filter(Post.expiration.is_(None))
        elif feed == 'temporary':
            query = query.filter(Post.expiration.isnot(None))

        column = SORT_COLUMNS[sort]
        if order == 'asc':
            query = query.order_by(column.asc(), Post.id.asc())
        else:
            query = query.order_by(column.desc(), Post.id.desc())

        return query.limit(items).offset(page * items).all()

    @staticmethod
    def get_post(post_id):
        return db.session.get(Post, post_id)

    @staticmethod
    def post_exists(post_id):
        return db.session.execute(
            db.select(Post.id).where(Post.id == post_id)
        ).first() is not None

    @staticmethod
    def create_post(author, title, content, expiration=None):
        """게시글 생성"""
        post = Post(author=author, title=title, content=content, expiration=expiration)
        db.session.add(post)
        db.session.commit()
        return post

    @staticmethod
    def update_post(post_id, title=None, content=None):
        """게시글 수정 (None이 아닌 필드만)"""
        values = {}
        if title is not None:
            values['title'] = title
        if content is not None:
            values['content'] = content

        db.session.execute(update(Post).where(Post.id == post_id).values(**values))
        db.session.commit()

    @staticmethod
    def delete_post(post_id):
        """게시글 삭제 (댓글, 투표 포함)"""
        db.session.execute(delete(PostVote).where(PostVote.post_id == post_id))
        db.session.execute(delete(Comment).where(Comment.post_id == post_id))
        db.session.execute(delete(Post).where(Post.id == post_id))
        db.session.commit()

    @staticmethod
    def vote(post_id, author, negative):
        """
        투표 등록 (post, author 기준 upsert)
        - 기존 투표 없음: 추가
        - 다른 방향의 기존 투표: 변경
        - 같은 방향의 기존 투표: 변화 없음
        """
        dialect = db.engine.dialect.name
        values = {'post_id': post_id, 'author': author, 'negative': negative}

        if dialect == 'mysql':
            stmt = mysql_insert(PostVote).values(**values)
            stmt = stmt.on_duplicate_key_update(negative=stmt.inserted.negative)
        elif dialect in ('postgresql', 'sqlite'):
            insert = postgresql_insert if dialect == 'postgresql' else sqlite_insert
            stmt = insert(PostVote).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=['post_id', 'author'],
                set_={'negative': stmt.excluded.negative},
                where=PostVote.negative != stmt.excluded.negative,
            )
        else:
            raise ValueError(f"Unsupported database dialect for vote upsert: {dialect}")

        db.session.execute(stmt)
        db.session.commit()


class CommentService:
    """댓글 관련 비즈니스 로직"""

    @staticmethod
    def list_comments(post_id, page=0, items=20):
        return (
            Comment.query.filter_by(post_id=post_id)
            .order_by(Comment.ts.asc(), Comment.id.asc())
            .limit(items)
            .offset(page * items)
            .all()
        )

    @staticmethod
    def get_comment(comment_id):
        return db.session.get(Comment, comment_id)

    @staticmethod
    def create_comment(post_id, author, content):
        """댓글 생성"""
        comment = Comment(post_id=post_id, author=author, content=content)
        db.session.add(comment)
        db.session.commit()
        return comment

    @staticmethod
    def update_comment(comment_id, content):
        db.session.execute(update(Comment).where(Comment.id == comment_id).values(content=content))
        db.session.commit()

    @staticmethod
    def delete_comment(comment_id):
        db.session.execute(delete(Comment).where(Comment.id == comment_id))
        db.session.commit()
