# app/core/config.py

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
import os

# 프로젝트의 루트 디렉토리 경로를 계산합니다.
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class Settings(BaseSettings):
    """
    애플리케이션의 모든 설정을 정의하는 Pydantic BaseSettings 모델입니다.
    환경 변수 및 .env 파일에서 값을 자동으로 로드합니다.
    """

    # --- Pydantic Settings 설정 ---
    model_config = SettingsConfigDict(
        env_file=os.path.join(BASE_DIR, '.env'),  # 프로젝트 루트의 .env 파일
        env_file_encoding='utf-8',
        extra='ignore',                      # 모델에 없는 변수는 무시
        case_sensitive=True
    )

    # --- 애플리케이션 기본 설정 ---
    APP_NAME: str = "Phyto LIMS API"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "Phytopathology Laboratory Information System (LIMS) API"
    APP_ENV: str = Field("development", description="Application environment (e.g., development, production, testing)")
    DEBUG_MODE: bool = Field(False, description="Enable debug mode for detailed logging and SQL echo")
    LOG_LEVEL: str = Field("INFO", description="Root logging level (DEBUG, INFO, WARNING, ...)")

    # --- 데이터베이스 설정 ---
    DATABASE_URL: SecretStr = Field(..., description="PostgreSQL database connection URL")

    # --- ARQ (Redis) 설정 ---
    REDIS_HOST: str = Field("localhost", description="Redis host used by the ARQ task queue")
    REDIS_PORT: int = Field(6379, description="Redis port used by the ARQ task queue")

    # --- 해석 규칙 엔진 설정 ---
    # 0 이면 매 평가마다 활성 규칙을 다시 읽습니다.
    # 캐시는 프로세스마다 따로 유지되며, 규칙 생성/비활성화 시의 무효화는 해당 요청을 처리한 프로세스에만 적용됩니다.
    # 따라서 0보다 크면 다른 API 프로세스와 ARQ 워커는 최대 TTL 동안 이전 규칙 목록(비활성화된 규칙 포함)으로 평가할 수 있습니다.
    INTERP_RULE_CACHE_TTL_SECONDS: int = Field(
        0, ge=0, description="Seconds the compiled active rule catalogue is reused (0 disables the cache)"
    )


settings = Settings()
