"""Inbound webhook update shapes."""

from pydantic import BaseModel, ConfigDict


class TelegramChat(BaseModel):
    """Chat the update belongs to."""

    model_config = ConfigDict(extra="ignore")

    id: int | str


class WebAppData(BaseModel):
    """Data sent from the Web App through ``Telegram.WebApp.sendData``."""

    model_config = ConfigDict(extra="ignore")

    data: str | None = None


class TelegramMessage(BaseModel):
    """Subset of a Telegram message the bridge reads."""

    model_config = ConfigDict(extra="ignore")

    chat: TelegramChat
    text: str | None = None
    web_app_data: WebAppData | None = None


class WebhookAck(BaseModel):
    """Acknowledgement returned to the platform."""

    ok: bool = True
    skipped: str | None = None
    error: str | None = None
