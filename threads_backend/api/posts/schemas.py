# threads_backend/api/posts/schemas.py
from marshmallow import Schema, fields, validate

MAX_POST_TEXT_LENGTH = 500

# --- 재사용을 위한 중첩 스키마 ---
class ReplySchema(Schema):
    """게시글 응답에 포함될 답글 스키마."""
    reply_id = fields.Str(required=True)
    user_id = fields.Str(required=True)
    username = fields.Str(required=True)
    user_profile_pic = fields.Str(allow_none=True)
    text = fields.Str(required=True)
    created_at = fields.DateTime(required=True)

# --- 요청/응답 스키마 ---

class PostCreateSchema(Schema):
    """게시글 생성 입력값의 유효성을 검사합니다."""
    posted_by = fields.Str(
        required=True,
        validate=validate.Length(min=1),
        error_messages={"required": "posted_by는 필수 항목입니다."}
    )
    text = fields.Str(
        required=True,
        validate=validate.Length(
            min=1, max=MAX_POST_TEXT_LENGTH,
            error=f"텍스트는 1자 이상 {MAX_POST_TEXT_LENGTH}자 이하여야 합니다."
        ),
        error_messages={"required": "text는 필수 항목입니다."}
    )
    img = fields.Str(allow_none=True, load_default=None)

class ReplyCreateSchema(Schema):
    """답글 작성 입력값의 유효성을 검사합니다."""
    text = fields.Str(
        required=True,
        validate=validate.Length(min=1, error="답글 내용을 입력해주세요."),
        error_messages={"required": "text는 필수 항목입니다."}
    )

class PostResponseSchema(Schema):
    """게시글 정보 응답을 위한 최종 JSON 형식을 정의합니다."""
    post_id = fields.Str(dump_only=True)
    posted_by = fields.Str(required=True)
    text = fields.Str(required=True)
    img = fields.Str(allow_none=True)
    likes = fields.List(fields.Str(), required=True)
    replies = fields.List(fields.Nested(ReplySchema), required=True)
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(required=True)
