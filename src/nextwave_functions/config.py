from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    openai_base_url: str = Field(default="https://api.openai.com/v1", alias="OPENAI_BASE_URL")
    openai_model: str = Field(default="gpt-4", alias="OPENAI_MODEL")
    blog_temperature: float = Field(default=0.7, alias="BLOG_TEMPERATURE")
    blog_max_tokens: int = Field(default=2000, alias="BLOG_MAX_TOKENS")
    llm_timeout_seconds: float = Field(default=30.0, alias="LLM_TIMEOUT_SECONDS")

    smtp_host: str = Field(default="", alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_user: str = Field(default="", alias="SMTP_USER")
    smtp_pass: str = Field(default="", alias="SMTP_PASS")
    smtp_timeout_seconds: float = Field(default=30.0, alias="SMTP_TIMEOUT_SECONDS")

    site_name: str = Field(default="NextWave Digital Solutions", alias="SITE_NAME")
    site_url: str = Field(default="http://localhost:5173", alias="SITE_URL")

    stripe_secret_key: str = Field(default="", alias="STRIPE_SECRET_KEY")
    stripe_api_base: str = Field(default="https://api.stripe.com/v1", alias="STRIPE_API_BASE")
    stripe_price_starter: str = Field(default="price_starter", alias="STRIPE_PRICE_STARTER")
    stripe_price_pro: str = Field(default="price_pro", alias="STRIPE_PRICE_PRO")
    stripe_price_infinite: str = Field(default="price_infinite", alias="STRIPE_PRICE_INFINITE")
    stripe_subscription_plans: str = Field(default="infinite", alias="STRIPE_SUBSCRIPTION_PLANS")
    checkout_timeout_seconds: float = Field(default=30.0, alias="CHECKOUT_TIMEOUT_SECONDS")

    def model_post_init(self, __context) -> None:  # type: ignore[override]
        self.openai_model = self.openai_model.strip() or "gpt-4"
        self.site_url = self.site_url.strip().rstrip("/")
        self.stripe_api_base = self.stripe_api_base.strip().rstrip("/")

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_pass)

    def plan_prices(self) -> dict[str, str]:
        return {
            "starter": self.stripe_price_starter,
            "pro": self.stripe_price_pro,
            "infinite": self.stripe_price_infinite,
        }

    def subscription_plans(self) -> set[str]:
        return {item.strip().lower() for item in self.stripe_subscription_plans.split(",") if item.strip()}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
