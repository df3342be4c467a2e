# app/core/exceptions.py

"""
도메인 공통 예외를 정의하는 모듈입니다.

HTTP 계층과 무관한 오류(저장소 접근 실패 등)를 표현하며,
라우터에서 HTTPException으로 변환됩니다.
"""

from typing import Optional


class RepositoryError(Exception):
    """
    시료, 규칙, 해석 결과 저장소에 접근하는 중 발생한 모든 오류를 감쌉니다.

    Args:
        operation (str): 실패한 저장소 작업 이름 (예: "get_sample_with_results").
        cause (Optional[Exception]): 원인이 된 하위 예외 (주로 SQLAlchemyError).
    """

    def __init__(self, operation: str, cause: Optional[Exception] = None):
        self.operation = operation
        self.cause = cause
        message = f"Repository operation '{operation}' failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
