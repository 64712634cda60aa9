"""
Envelope handling for service operations.

This module provides the `envelope` decorator applied to every public
service method. It converts:
- AppException subclasses into failure envelopes carrying their error_code
- Pydantic validation errors into INVALID_INPUT failure envelopes
- Any other exception into a generic failure envelope (logged with traceback)

The service's session is rolled back before a failure envelope is returned.
"""

import functools
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from pydantic import ValidationError as PydanticValidationError

from axiobank.exceptions import AppException
from axiobank.schemas.common import ApiResponse, ListResponse

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")


async def _rollback(service: Any) -> None:
    session = getattr(service, "session", None)
    if session is not None:
        await session.rollback()


def envelope(
    failure_message: str,
    response_cls: type[ApiResponse[Any]] | type[ListResponse[Any]] = ApiResponse,
    error_code: str = "INTERNAL_ERROR",
) -> Callable[[Callable[..., Awaitable[ResultT]]], Callable[..., Awaitable[ResultT]]]:
    """
    Wrap an async service method so it always returns an envelope.

    Args:
        failure_message: Prefix for the message of unexpected failures
        response_cls: Envelope class to build on failure (ApiResponse or ListResponse)
        error_code: Error code reported for unexpected failures

    Returns:
        Decorator for async service methods

    Example:
        @envelope("Failed to retrieve card")
        async def get_card(self, card_id: uuid.UUID) -> ApiResponse[CardResponse]:
            card = await self.card_repo.get_by_id(card_id)
            if card is None:
                raise NotFoundError("Card")
            return ApiResponse.ok(CardResponse.model_validate(card))
    """

    def decorator(
        func: Callable[..., Awaitable[ResultT]],
    ) -> Callable[..., Awaitable[ResultT]]:
        @functools.wraps(func)
        async def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
            try:
                return await func(self, *args, **kwargs)
            except AppException as exc:
                await _rollback(self)
                logger.warning(
                    f"{func.__qualname__} rejected: {exc.error_code} - {exc.message}"
                )
                return response_cls.fail(exc.message, error=exc.error_code)
            except PydanticValidationError as exc:
                await _rollback(self)
                logger.warning(f"{func.__qualname__} invalid input: {exc.errors()}")
                return response_cls.fail(
                    f"{failure_message}: invalid input", error="INVALID_INPUT"
                )
            except Exception as exc:
                await _rollback(self)
                logger.error(f"{failure_message}: {exc}", exc_info=True)
                return response_cls.fail(f"{failure_message}: {exc}", error=error_code)

        return wrapper

    return decorator
