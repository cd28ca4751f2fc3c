"""
Interface Layer

컨텍스트 파일 로딩과 검증을 담당합니다.
"""
