"""
Application Layer

토픽 참조 해석, 설정 해석, 메시지 템플릿, 파이프라인 구성, 스택 조립을 담당합니다.
"""
