# threads_backend/api/posts/services.py
import logging
import uuid
from dataclasses import asdict
from typing import Optional, List
from firebase_admin import firestore
from marshmallow import ValidationError

from threads_backend.api.posts.schemas import PostCreateSchema, ReplyCreateSchema
from threads_backend.core.exceptions import NotFoundError, AuthorizationError, UnexpectedError
from threads_backend.core.security import is_owner
from threads_backend.models.post import Post, Reply
from threads_backend.services.image_store import ImageStore, derive_resource_key
from threads_backend.services.user_directory import UserDirectory
from threads_backend.utils.datetime_utils import DateTimeUtils

class PostService:
    """
    게시글 관련 비즈니스 로직을 담당하는 서비스 클래스.
    생성/조회/삭제, 좋아요 토글, 답글, 피드 구성을 포함합니다.

    좋아요와 답글은 문서 전체를 다시 쓰지 않고 ArrayUnion/ArrayRemove로
    Firestore에서 원자적으로 갱신합니다.
    """
    # Firestore 'in' 쿼리가 한 번에 받을 수 있는 값의 최대 개수
    FEED_QUERY_CHUNK_SIZE = 30

    def __init__(self, user_directory: UserDirectory, image_store: ImageStore, db=None):
        self.db = db or firestore.client()
        self.posts_ref = self.db.collection('posts')
        self.user_directory = user_directory
        self.image_store = image_store

    def _get_post_snapshot(self, post_id: str):
        if not post_id:
            raise NotFoundError("게시글을 찾을 수 없습니다.", error_code="POST_NOT_FOUND")
        doc = self.posts_ref.document(post_id).get()
        if not doc.exists:
            raise NotFoundError("게시글을 찾을 수 없습니다.", error_code="POST_NOT_FOUND")
        return doc

    def create_post(self, principal_id: str, posted_by: str, text: str, img: Optional[str] = None) -> Post:
        """
        새로운 게시글을 생성하고 Firestore에 저장합니다.
        - 요청자는 posted_by 본인이어야 합니다.
        - 이미지가 있으면 먼저 업로드하고, 업로드된 URL을 저장합니다.
        """
        raw = {"posted_by": posted_by, "text": text, "img": img}
        data = PostCreateSchema().load({k: v for k, v in raw.items() if v is not None})

        user = self.user_directory.find_by_id(data['posted_by'])
        if user is None:
            raise NotFoundError("사용자를 찾을 수 없습니다.", error_code="USER_NOT_FOUND")

        if not is_owner(principal_id, user.user_id):
            raise AuthorizationError("본인 계정으로만 게시글을 작성할 수 있습니다.")

        img_url = None
        if data.get('img'):
            try:
                img_url = self.image_store.upload(data['img'])['secure_url']
            except ValueError as e:
                raise ValidationError({"img": [str(e)]})
            except Exception as e:
                logging.error(f"게시글 이미지 업로드 실패 (user_id: {user.user_id}): {e}", exc_info=True)
                raise UnexpectedError("이미지 업로드 중 오류가 발생했습니다.") from e

        new_post = Post(
            post_id=str(uuid.uuid4()),
            posted_by=user.user_id,
            text=data['text'],
            img=img_url
        )
        try:
            self.posts_ref.document(new_post.post_id).set(DateTimeUtils.for_firestore(asdict(new_post)))
        except Exception as e:
            logging.error(f"게시글 생성 실패 (user_id: {user.user_id}): {e}", exc_info=True)
            raise UnexpectedError("게시글 저장 중 오류가 발생했습니다.") from e

        logging.info(f"게시글 생성 완료 (post_id: {new_post.post_id}, user_id: {user.user_id})")
        return new_post

    def get_post(self, post_id: str) -> Post:
        """게시글 하나를 조회합니다. 공개 조회이므로 권한 확인은 없습니다."""
        doc = self._get_post_snapshot(post_id)
        return Post.from_dict(doc.to_dict())

    def delete_post(self, principal_id: str, post_id: str) -> None:
        """
        게시글을 삭제합니다. (작성자 본인만 가능)
        이미지 삭제는 최선 노력(best-effort)으로 처리되며, 실패해도 게시글 문서는 삭제됩니다.
        """
        doc = self._get_post_snapshot(post_id)
        post = Post.from_dict(doc.to_dict())

        if not is_owner(principal_id, post.posted_by):
            raise AuthorizationError("게시글을 삭제할 권한이 없습니다.")

        if post.img:
            resource_key = derive_resource_key(post.img)
            try:
                self.image_store.destroy(resource_key)
            except Exception as e:
                logging.error(f"Storage 이미지 삭제 실패 (post_id: {post_id}, key: {resource_key}): {e}", exc_info=True)

        try:
            self.posts_ref.document(post_id).delete()
        except Exception as e:
            logging.error(f"게시글 삭제 실패 (post_id: {post_id}): {e}", exc_info=True)
            raise UnexpectedError("게시글 삭제 중 오류가 발생했습니다.") from e

    def like_unlike_post(self, user_id: str, post_id: str) -> bool:
        """
        게시글 좋아요를 토글합니다.

        :return: 토글 후 좋아요 상태 (True: 좋아요, False: 취소)
        """
        doc = self._get_post_snapshot(post_id)
        likes = doc.to_dict().get('likes') or []
        post_ref = self.posts_ref.document(post_id)

        if user_id in likes:
            post_ref.update({
                'likes': firestore.ArrayRemove([user_id]),
                'updated_at': DateTimeUtils.now()
            })
            return False

        post_ref.update({
            'likes': firestore.ArrayUnion([user_id]),
            'updated_at': DateTimeUtils.now()
        })
        return True

    def reply_to_post(self, user_id: str, username: str, user_profile_pic: Optional[str], post_id: str, text: str) -> Post:
        """게시글에 답글을 추가하고 갱신된 게시글을 반환합니다."""
        data = ReplyCreateSchema().load({"text": text} if text is not None else {})
        self._get_post_snapshot(post_id)

        reply = Reply(
            reply_id=str(uuid.uuid4()),
            user_id=str(user_id),
            username=username,
            text=data['text'],
            user_profile_pic=user_profile_pic
        )
        post_ref = self.posts_ref.document(post_id)
        post_ref.update({
            'replies': firestore.ArrayUnion([DateTimeUtils.for_firestore(asdict(reply))]),
            'updated_at': DateTimeUtils.now()
        })
        return Post.from_dict(post_ref.get().to_dict())

    def get_feed_posts(self, user_id: str) -> List[Post]:
        """사용자가 팔로우하는 계정들의 게시글을 최신순으로 반환합니다."""
        user = self.user_directory.find_by_id(user_id)
        if user is None:
            raise NotFoundError("사용자를 찾을 수 없습니다.", error_code="USER_NOT_FOUND")

        following = list(dict.fromkeys(user.following))
        if not following:
            return []

        posts = []
        for start in range(0, len(following), self.FEED_QUERY_CHUNK_SIZE):
            chunk = following[start:start + self.FEED_QUERY_CHUNK_SIZE]
            docs = self.posts_ref.where('posted_by', 'in', chunk).stream()
            posts.extend(Post.from_dict(doc.to_dict()) for doc in docs)

        # 청크별 결과를 합친 뒤 한 번에 정렬
        posts.sort(key=lambda post: post.created_at, reverse=True)
        return posts

    def get_user_posts(self, username: str) -> List[Post]:
        """특정 사용자가 작성한 게시글을 최신순으로 반환합니다."""
        user = self.user_directory.find_by_username(username)
        if user is None:
            raise NotFoundError("사용자를 찾을 수 없습니다.", error_code="USER_NOT_FOUND")

        query = self.posts_ref.where('posted_by', '==', user.user_id).order_by(
            "created_at", direction=firestore.Query.DESCENDING
        )
        return [Post.from_dict(doc.to_dict()) for doc in query.stream()]
