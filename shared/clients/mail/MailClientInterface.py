from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig


class MailClientInterface(ClientInterface):
    """Outbound notification mail. Callers treat every send as best-effort."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    def _get_client_type(self) -> str:
        return "mail"

    @abstractmethod
    def get_owner_address(self) -> str:
        """Returns the address that receives admin notifications."""
        pass

    @abstractmethod
    def _get_endpoint_send(self) -> str:
        pass

    @abstractmethod
    def get_send_payload(self, to: list[str], subject: str, text: str) -> dict:
        """Build the backend request body for one plain-text mail."""
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_send(self, to: list[str], subject: str, text: str) -> None:
        """Send one plain-text mail.

        Raises:
            ClientRequestError: If the backend rejects the mail.
            httpx.HTTPError: On transport failures.
        """
        await self.do_request(
            method="POST",
            endpoint=self._get_endpoint_send(),
            json=self.get_send_payload(to=to, subject=subject, text=text),
            raise_on_error=True,
        )
        self.logging.debug("Sent mail '%s' to %d recipient(s)", subject, len(to))
