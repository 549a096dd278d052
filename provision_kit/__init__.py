"""
provision_kit
-------------

정적 사이트 + 서버리스 함수 배포 전에 필요한 환경변수(API 키, 서비스 계정,
PEM 개인키, 미디어 스토리지 설정 등)가 모두 존재하고 형식이 올바른지
점검하는 CLI 패키지. 점검 결과에는 절대 실제 값이 출력되지 않는다.
"""

__all__ = [
    "fields",
    "provisioner",
]
