# threads_backend/utils/__init__.py
"""
유틸리티 모듈 패키지

프로젝트 전체에서 공통으로 사용되는 시간 처리 유틸리티(DateTimeUtils)를 포함합니다.
"""
