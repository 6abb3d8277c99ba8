"""
Webhook event registry.

Maps a provider event type (e.g. ``"company.updated"``) to an async handler.
Event types without a handler go to a default no-op that only logs, so adding
a handler for a new type is a single ``register`` call.

Example:
    ```python
    registry = build_default_registry(store)

    async def on_order_created(event: WebhookEvent) -> None:
        ...

    registry.register(ORDER_CREATED, on_order_created)
    await registry.dispatch(event)
    ```
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from services.company_auth_service.services.interfaces import CompanyStore

COMPANY_UPDATED = "company.updated"
COMPANY_DELETED = "company.deleted"
ORDER_CREATED = "order.created"
ORDER_UPDATED = "order.updated"
PRODUCT_CREATED = "product.created"
PRODUCT_UPDATED = "product.updated"
SUBSCRIPTION_CREATED = "subscription.created"
SUBSCRIPTION_UPDATED = "subscription.updated"
SUBSCRIPTION_CANCELLED = "subscription.cancelled"
PAYMENT_SUCCEEDED = "payment.succeeded"
PAYMENT_FAILED = "payment.failed"


@dataclass
class WebhookEvent:
    type: str
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: int | None = None
    company_id: str | None = None


WebhookHandler = Callable[[WebhookEvent], Awaitable[None]]


async def ignore_event(event: WebhookEvent) -> None:
    logger.info(f"Unhandled webhook event type: {event.type}")


class WebhookRegistry:
    def __init__(self, default: WebhookHandler = ignore_event) -> None:
        self._handlers: dict[str, WebhookHandler] = {}
        self._default = default

    def register(self, event_type: str, handler: WebhookHandler) -> None:
        self._handlers[event_type] = handler

    def handler_for(self, event_type: str) -> WebhookHandler:
        return self._handlers.get(event_type, self._default)

    async def dispatch(self, event: WebhookEvent) -> None:
        logger.info(f"Webhook received: type={event.type} company={event.company_id} timestamp={event.timestamp}")
        await self.handler_for(event.type)(event)


def build_default_registry(store: CompanyStore) -> WebhookRegistry:
    """Registry with the company lifecycle handlers bound to ``store``."""

    async def company_updated(event: WebhookEvent) -> None:
        company_id = event.data.get("id") or event.company_id
        company = await store.find_by_company_id(company_id) if company_id else None
        if company is None:
            logger.info(f"Ignoring company.updated for unknown company {company_id}")
            return
        await store.update_profile(
            company_id,
            name=event.data.get("name") or company.name,
            description=event.data.get("description") or company.description,
        )
        logger.info(f"Company {company_id} updated from webhook")

    async def company_deleted(event: WebhookEvent) -> None:
        company_id = event.data.get("id") or event.company_id
        if not company_id or not await store.delete_by_id(company_id):
            logger.info(f"Company not found in database: {company_id}")
            return
        logger.info(f"Company {company_id} deleted from webhook")

    registry = WebhookRegistry()
    registry.register(COMPANY_UPDATED, company_updated)
    registry.register(COMPANY_DELETED, company_deleted)
    return registry
