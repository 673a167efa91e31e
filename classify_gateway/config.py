from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    command: str = Field(
        default="classify",
        description="Classifier command line; the image path is appended as the last argument"
    )
    host: str = Field(
        default="0.0.0.0",
        description="Bind address"
    )
    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Bind port"
    )
    workers: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Threads available for concurrent classifier runs"
    )
    input_mode: Literal["auto", "json", "multipart"] = Field(
        default="auto",
        description="Accepted request encodings for /classify"
    )
    timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Seconds to wait for the classifier; unset waits forever"
    )
    scratch_dir: Optional[Path] = Field(
        default=None,
        description="Directory for scratch image files (system temp dir if unset)"
    )
    index_page: Optional[Path] = Field(
        default=None,
        description="HTML file served at / (packaged page if unset)"
    )

    class Config:
        env_file = ".env"
        env_prefix = "CLASSIFY_"
        case_sensitive = False


settings = Settings()
