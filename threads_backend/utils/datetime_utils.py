# threads_backend/utils/datetime_utils.py
"""
게시글 서비스 전체에서 일관된 시간 처리를 위한 유틸리티 모듈

- 서버의 모든 시각은 UTC timezone-aware datetime으로 다룹니다.
- Firestore에 쓰기 전/읽은 후의 변환을 한곳에서 처리합니다.
"""

import logging
from datetime import datetime, timezone
from typing import Any
from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)

class DateTimeUtils:
    """시간/날짜 처리를 위한 중앙화된 유틸리티 클래스"""

    @staticmethod
    def now() -> datetime:
        """현재 시간을 UTC timezone-aware datetime으로 반환"""
        return datetime.now(timezone.utc)

    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        ISO 포맷 문자열을 UTC datetime 객체로 파싱

        지원 포맷:
        - 2024-01-15T10:30:00Z
        - 2024-01-15T10:30:00+09:00
        - 2024-01-15T10:30:00
        """
        try:
            if not iso_string:
                raise ValueError("빈 문자열은 파싱할 수 없습니다")

            if iso_string.endswith('Z'):
                iso_string = iso_string[:-1] + '+00:00'

            dt = dateutil_parser.isoparse(iso_string)

            # timezone-naive인 경우 UTC로 가정
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)

            return dt.astimezone(timezone.utc)

        except Exception as e:
            logger.error(f"ISO datetime 파싱 실패: {iso_string} - {e}")
            raise ValueError(f"잘못된 ISO 날짜 형식입니다: {iso_string}")

    @staticmethod
    def for_firestore(obj: Any) -> Any:
        """
        Firestore 저장을 위해 객체의 날짜/시간 필드를 변환

        변환 규칙:
        - timezone-naive datetime -> timezone-aware datetime (UTC)
        - dict/list 내부 재귀적 변환
        """
        try:
            if isinstance(obj, datetime):
                if obj.tzinfo is None:
                    return obj.replace(tzinfo=timezone.utc)
                return obj.astimezone(timezone.utc)

            elif isinstance(obj, dict):
                return {k: DateTimeUtils.for_firestore(v) for k, v in obj.items()}

            elif isinstance(obj, list):
                return [DateTimeUtils.for_firestore(item) for item in obj]

            else:
                return obj

        except Exception as e:
            logger.error(f"Firestore 변환 실패: {obj} ({type(obj)}) - {e}")
            raise ValueError(f"Firestore 호환 형식으로 변환할 수 없습니다: {obj}")

    @staticmethod
    def from_firestore(obj: Any) -> Any:
        """
        Firestore에서 읽은 데이터의 datetime 필드를 UTC datetime으로 변환

        - Firestore timestamp(DatetimeWithNanoseconds) -> datetime (UTC)
        - ISO 문자열로 저장된 created_at/updated_at -> datetime (UTC)
        - dict/list 내부 재귀적 변환
        """
        try:
            if isinstance(obj, datetime):
                if obj.tzinfo is None:
                    return obj.replace(tzinfo=timezone.utc)
                return datetime.fromtimestamp(obj.timestamp(), tz=timezone.utc)

            elif isinstance(obj, dict):
                converted = {}
                for k, v in obj.items():
                    if k.endswith('_at') and isinstance(v, str):
                        converted[k] = DateTimeUtils.parse_iso_datetime(v)
                    else:
                        converted[k] = DateTimeUtils.from_firestore(v)
                return converted

            elif isinstance(obj, list):
                return [DateTimeUtils.from_firestore(item) for item in obj]

            else:
                return obj

        except Exception as e:
            logger.error(f"Firestore 읽기 변환 실패: {obj} ({type(obj)}) - {e}")
            # 변환 실패 시 원본 객체 반환 (로그만 남김)
            return obj

