from shared.helper.HelperConfig import HelperConfig
from shared.helper.engine_loader import load_engine_class
from shared.clients.mail.MailClientInterface import MailClientInterface


class MailClientManager:
    """Instantiates the mail client selected by MAIL_ENGINE.

    Mail is optional: without MAIL_ENGINE, or when the engine is misconfigured,
    get_client() returns None and notifications are skipped.
    """

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client = self._initialize_client()

    def _initialize_client(self) -> MailClientInterface | None:
        engine = self.helper_config.get_optional_string_val("MAIL_ENGINE")
        if not engine:
            self.logging.info("MAIL_ENGINE not set, email notifications disabled.")
            return None
        try:
            client_class = load_engine_class("shared.clients.mail", "MailClient", engine)
            client = client_class(helper_config=self.helper_config)
        except ValueError as e:
            self.logging.warning("Email notifications disabled: %s", e)
            return None
        self.logging.debug("Instantiated mail client for engine: %s", client.get_engine_name())
        return client

    def get_client(self) -> MailClientInterface | None:
        return self.client
