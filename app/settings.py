from pathlib import Path
from typing import Any
from urllib.request import getproxies

import dotenv
from loguru import logger
from pydantic import SecretStr, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from telegram.ext import Application

dotenv.load_dotenv()


PROJECT_DIR = Path(__file__).parent
CACHE_DIR = PROJECT_DIR.joinpath(".cache")
LOG_DIR = PROJECT_DIR.joinpath("logs")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")

    TELEGRAM_BOT_API_TOKEN: SecretStr = Field(
        default="", description="通过 https://t.me/BotFather 获取机器人的 API_TOKEN"
    )

    HTTP_REQUEST_TIMEOUT: float = Field(
        default=75.0,
        description="HTTP 请求超时时间（秒），用于 Telegram API 调用以及外部生成服务的请求。",
    )

    OWNER_ID: int = Field(default=0, description="机器人所有者的 Telegram 用户 ID，用于 /delete")

    # Stable Horde
    STABLEHORDE_BASE_URL: str = Field(default="https://stablehorde.net/api/v2")

    STABLEHORDE_SITE_URL: str = Field(
        default="https://stablehorde.net/", description="成品图片按钮以及志愿者提示中的链接"
    )

    STABLEHORDE_API_KEY: SecretStr = Field(
        default="0000000000", description="匿名用户可使用 0000000000，但排队优先级最低"
    )

    STABLEHORDE_CLIENT_AGENT: str = Field(
        default="telegram-horde-bot:1.0:https://github.com/QIN2DIM",
        description="Stable Horde 要求的 Client-Agent 头",
    )

    STABLEHORDE_IMAGES_PER_JOB: int = Field(default=4, description="每个任务请求的图片数量")

    # Retry / polling policy shared by every remote call
    RETRY_COUNT: int = Field(default=3, description="失败后的最大重试次数")

    RETRY_DELAY: float = Field(default=2.0, description="两次重试之间的固定间隔（秒）")

    POLL_INTERVAL: float = Field(default=2.0, description="轮询任务状态的间隔（秒）")

    PROGRESS_DEBOUNCE: float = Field(
        default=12.0, description="两次进度消息编辑之间的最短间隔（秒）"
    )

    LONG_WAIT_THRESHOLD: int = Field(
        default=30, description="预计等待时间超过该值（秒）后附加志愿者提示"
    )

    COLLAGE_COLUMNS: int = Field(default=2)

    COLLAGE_PADDING: int = Field(default=8)

    # Craiyon
    CRAIYON_BASE_URL: str = Field(default="https://backend.craiyon.com")

    # Google PaLM
    GOOGLE_PALM_BASE_URL: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta2"
    )

    GOOGLE_PALM_API_KEY: SecretStr = Field(
        default="", description="Google PaLM API key，留空则 /palm 命令不可用"
    )

    def model_post_init(self, context: Any, /) -> None:
        if self.RETRY_COUNT < 0:
            logger.warning(f"RETRY_COUNT={self.RETRY_COUNT} 无效，已重置为 0")
            self.RETRY_COUNT = 0

        if self.COLLAGE_COLUMNS < 1:
            logger.warning(f"COLLAGE_COLUMNS={self.COLLAGE_COLUMNS} 无效，已重置为 2")
            self.COLLAGE_COLUMNS = 2

        # 防呆设置，PaLM 在没有 key 的情况下无法调用
        if not self.GOOGLE_PALM_API_KEY.get_secret_value():
            logger.debug("GOOGLE_PALM_API_KEY 未设置，/palm 命令将回复配置错误")

    def get_default_application(self) -> Application:
        _base_builder = (
            Application.builder()
            .token(self.TELEGRAM_BOT_API_TOKEN.get_secret_value())
            .connect_timeout(self.HTTP_REQUEST_TIMEOUT)
            .write_timeout(self.HTTP_REQUEST_TIMEOUT)
            .read_timeout(self.HTTP_REQUEST_TIMEOUT)
            .concurrent_updates(True)
        )
        if proxy_url := getproxies().get("http"):
            logger.success(f"使用代理: {proxy_url}")
            application = _base_builder.proxy(proxy_url).get_updates_proxy(proxy_url).build()
        else:
            application = _base_builder.build()

        return application


settings = Settings()  # type: ignore
