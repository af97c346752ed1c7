# threads_backend/api/posts/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from threads_backend.api.posts.schemas import PostResponseSchema
from threads_backend.core.exceptions import NotFoundError, AuthorizationError, UnexpectedError
from threads_backend.core.security import load_principal


posts_bp = Blueprint('posts_bp', __name__)

def _get_json_object() -> dict:
    """요청 본문을 JSON 객체로 읽습니다. 본문이 없으면 빈 딕셔너리, 객체가 아니면 ValidationError."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError({"_schema": ["요청 본문은 JSON 객체여야 합니다."]})
    return data

@posts_bp.route('/create', methods=['POST'])
@jwt_required()
def create_post():
    """
    새로운 게시글을 생성합니다.
    - 요청 본문: posted_by, text, img(선택, base64 data URI)
    - 성공 시, 생성된 게시글을 201 Created 상태 코드와 함께 반환합니다.
    """
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        data = _get_json_object()
        new_post = post_service.create_post(user_id, data.get('posted_by'), data.get('text'), data.get('img'))
        return jsonify(PostResponseSchema().dump(new_post)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except AuthorizationError as e:
        return jsonify(e.to_dict()), 401
    except NotFoundError as e:
        return jsonify(e.to_dict()), 404
    except UnexpectedError as e:
        return jsonify(e.to_dict()), 500
    except Exception as e:
        logging.error(f"Error in create_post: {e}", exc_info=True)
        return jsonify({"error_code": "POST_CREATION_FAILED", "message": "게시글 생성 중 오류가 발생했습니다."}), 500


@posts_bp.route('/feed', methods=['GET'])
@jwt_required()
def get_feed_posts():
    """현재 사용자가 팔로우하는 계정들의 게시글을 최신순으로 조회합니다."""
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        posts = post_service.get_feed_posts(user_id)
        return jsonify(PostResponseSchema(many=True).dump(posts)), 200
    except NotFoundError as e:
        return jsonify(e.to_dict()), 404
    except Exception as e:
        logging.error(f"Error in get_feed_posts (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "피드 조회 중 오류가 발생했습니다."}), 500


@posts_bp.route('/<string:post_id>', methods=['GET'])
def get_post(post_id: str):
    """특정 게시글의 상세 정보를 조회합니다."""
    post_service = current_app.services['posts']
    try:
        post = post_service.get_post(post_id)
        return jsonify(PostResponseSchema().dump(post)), 200
    except NotFoundError as e:
        return jsonify(e.to_dict()), 404
    except Exception as e:
        logging.error(f"Error in get_post (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "게시글 조회 중 오류가 발생했습니다."}), 500


@posts_bp.route('/<string:post_id>', methods=['DELETE'])
@jwt_required()
def delete_post(post_id: str):
    """
    특정 게시글을 삭제합니다. (작성자 본인만 가능)
    """
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        post_service.delete_post(user_id, post_id)
        return jsonify({"message": "게시글이 삭제되었습니다."}), 200
    except AuthorizationError as e:
        return jsonify(e.to_dict()), 401
    except NotFoundError as e:
        return jsonify(e.to_dict()), 404
    except Exception as e:
        logging.error(f"Error in delete_post (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "POST_DELETION_FAILED", "message": "게시글 삭제 중 오류가 발생했습니다."}), 500


@posts_bp.route('/like/<string:post_id>', methods=['PUT'])
@jwt_required()
def like_unlike_post(post_id: str):
    """
    게시글의 좋아요를 누르거나 취소합니다.
    """
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        liked = post_service.like_unlike_post(user_id, post_id)
        message = "게시글에 좋아요를 눌렀습니다." if liked else "게시글 좋아요를 취소했습니다."
        return jsonify({"message": message, "liked": liked}), 200
    except NotFoundError as e:
        return jsonify(e.to_dict()), 404
    except Exception as e:
        logging.error(f"Error in like_unlike_post (user_id: {user_id}, post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "LIKE_TOGGLE_FAILED", "message": "좋아요 처리 중 오류가 발생했습니다."}), 500


@posts_bp.route('/reply/<string:post_id>', methods=['PUT'])
@jwt_required()
def reply_to_post(post_id: str):
    """
    게시글에 답글을 작성합니다.
    - 답글에는 작성 시점의 username과 프로필 이미지가 함께 저장됩니다.
    """
    post_service = current_app.services['posts']
    try:
        data = _get_json_object()
        principal = load_principal()
        post = post_service.reply_to_post(
            principal.user_id, principal.username, principal.profile_pic, post_id, data.get('text')
        )
        return jsonify(PostResponseSchema().dump(post)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except AuthorizationError as e:
        return jsonify(e.to_dict()), 401
    except NotFoundError as e:
        return jsonify(e.to_dict()), 404
    except Exception as e:
        logging.error(f"Error in reply_to_post (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "REPLY_CREATION_FAILED", "message": "답글 작성 중 오류가 발생했습니다."}), 500


@posts_bp.route('/user/<string:username>', methods=['GET'])
def get_user_posts(username: str):
    """
    특정 사용자가 작성한 게시글 목록을 최신순으로 조회합니다.
    """
    post_service = current_app.services['posts']
    try:
        posts = post_service.get_user_posts(username)
        return jsonify(PostResponseSchema(many=True).dump(posts)), 200
    except NotFoundError as e:
        return jsonify(e.to_dict()), 404
    except Exception as e:
        logging.error(f"Error in get_user_posts (username: {username}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "게시글 목록 조회 중 오류가 발생했습니다."}), 500
