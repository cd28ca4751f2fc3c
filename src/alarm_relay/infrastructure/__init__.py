"""
Infrastructure Layer

선언 그래프를 외부 형식(CloudFormation 템플릿)으로 내보냅니다.
"""
