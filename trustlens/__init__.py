"""
TrustLens - 상품 리뷰 진위 분석.

언어 모델의 리뷰별 판정과 고정 가중치로 0~100 의심 점수를 계산합니다.
"""

__version__ = "0.1.0"
