from shared.clients.mail.MailClientInterface import MailClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class MailClientResend(MailClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._api_key = self.get_config_val("API_KEY", default=None, val_type="string")
        self._base_url = self.get_config_val("BASE_URL", default="https://api.resend.com", val_type="string")
        self._sender = self.get_config_val("FROM", default="Portfolio Bot <onboarding@resend.dev>", val_type="string")
        self._owner = self.get_config_val("TO", default="logan.venter@outlook.com", val_type="string")

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Resend"

    def get_owner_address(self) -> str:
        return self._owner

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="API_KEY", val_type="string", default=None),
            EnvConfig(env_key="BASE_URL", val_type="string", default="https://api.resend.com"),
            EnvConfig(env_key="FROM", val_type="string", default="Portfolio Bot <onboarding@resend.dev>"),
            EnvConfig(env_key="TO", val_type="string", default="logan.venter@outlook.com"),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {"Authorization": f"Bearer {self._api_key}"}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/domains"

    def _get_endpoint_send(self) -> str:
        return "/emails"

    ################ PAYLOAD BUILDER ##################
    def get_send_payload(self, to: list[str], subject: str, text: str) -> dict:
        return {"from": self._sender, "to": to, "subject": subject, "text": text}
