"""Typed access to the four session namespaces of the keyed store.

  pending         request id -> PendingRequest
  tokens          jti        -> TokenRecord   (absence means revoked)
  counts          jti        -> MessageCount
  auto_approvals  "ip:<ip>" | "dev:<device_id>" -> AutoApprovalCounter
"""

from shared.clients.store.StoreClientInterface import StoreClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.session import AutoApprovalCounter, MessageCount, PendingRequest, TokenRecord

NS_PENDING = "pending"
NS_TOKENS = "tokens"
NS_COUNTS = "counts"
NS_AUTO_APPROVALS = "auto_approvals"


def ip_key(ip: str) -> str:
    return f"ip:{ip}"


def device_key(device_id: str) -> str:
    return f"dev:{device_id}"


class SessionStore:
    def __init__(self, helper_config: HelperConfig, store: StoreClientInterface) -> None:
        self.logging = helper_config.get_logger()
        self._store = store

    ################ PENDING ##################
    async def get_pending(self, request_id: str) -> PendingRequest | None:
        data = await self._store.do_get(NS_PENDING, request_id)
        return PendingRequest.model_validate(data) if data else None

    async def put_pending(self, request: PendingRequest) -> None:
        await self._store.do_put(NS_PENDING, request.id, request.model_dump())

    async def delete_pending(self, request_id: str) -> bool:
        return await self._store.do_delete(NS_PENDING, request_id)

    async def list_pending(self) -> list[PendingRequest]:
        items = []
        for key in await self._store.do_list(NS_PENDING):
            request = await self.get_pending(key)
            if request is not None:
                items.append(request)
        return items

    ################ TOKENS ##################
    async def get_token(self, jti: str) -> TokenRecord | None:
        data = await self._store.do_get(NS_TOKENS, jti)
        return TokenRecord.model_validate(data) if data else None

    async def put_token(self, record: TokenRecord) -> None:
        await self._store.do_put(NS_TOKENS, record.jti, record.model_dump())

    async def delete_token(self, jti: str) -> bool:
        return await self._store.do_delete(NS_TOKENS, jti)

    async def list_tokens(self) -> list[TokenRecord]:
        items = []
        for key in await self._store.do_list(NS_TOKENS):
            record = await self.get_token(key)
            if record is not None:
                items.append(record)
        return items

    async def find_token_by_request(self, request_id: str) -> TokenRecord | None:
        for record in await self.list_tokens():
            if record.request_id == request_id:
                return record
        return None

    ################ COUNTS ##################
    async def get_count(self, jti: str) -> int:
        data = await self._store.do_get(NS_COUNTS, jti)
        return MessageCount.model_validate(data).count if data else 0

    async def put_count(self, jti: str, count: int) -> None:
        await self._store.do_put(NS_COUNTS, jti, MessageCount(count=count).model_dump())

    async def increment_count(self, jti: str) -> int:
        """Read-then-increment. Concurrent turns of one jti may lose an update."""
        count = await self.get_count(jti) + 1
        await self.put_count(jti, count)
        return count

    ################ AUTO APPROVALS ##################
    async def get_auto_approvals(self, key: str) -> int:
        data = await self._store.do_get(NS_AUTO_APPROVALS, key)
        return AutoApprovalCounter.model_validate(data).count if data else 0

    async def increment_auto_approvals(self, key: str) -> int:
        count = await self.get_auto_approvals(key) + 1
        await self._store.do_put(NS_AUTO_APPROVALS, key, AutoApprovalCounter(count=count).model_dump())
        return count
