"""
Live resource fetcher.

Reads the complete resource tree of a gateway, page by page.
"""

import logging
from typing import Any, List

from botocore.exceptions import BotoCoreError, ClientError

from shared_gateway.config import MAX_RESOURCE_PAGE_SIZE
from shared_gateway.core.exceptions import ConfigurationError, UpstreamError
from shared_gateway.models import LiveResource

logger = logging.getLogger(__name__)


def fetch_all(
    client: Any, gateway_id: str, page_size: int = MAX_RESOURCE_PAGE_SIZE
) -> List[LiveResource]:
    """
    Fetch every resource of `gateway_id`.

    Pages are requested sequentially; each position token depends on the
    previous page. Fetching stops on the first page that is shorter than
    `page_size` even if it carries a token, or when no token is returned.

    Args:
        client: object exposing list_resources(gateway_id, position, limit)
        gateway_id: REST API id
        page_size: items per request (1..500)

    Raises:
        ConfigurationError: page_size outside the API's accepted range
        UpstreamError: any page request failed; nothing is returned
    """
    if not 1 <= page_size <= MAX_RESOURCE_PAGE_SIZE:
        raise ConfigurationError(
            f"Resource page size must be between 1 and {MAX_RESOURCE_PAGE_SIZE}, got {page_size}"
        )

    resources: List[LiveResource] = []
    position = None
    pages = 0

    while True:
        try:
            page = client.list_resources(gateway_id, position=position, limit=page_size)
        except UpstreamError:
            raise
        except (ClientError, BotoCoreError) as e:
            raise UpstreamError("get_resources", e) from e

        pages += 1
        resources.extend(page.items)

        if not page.position or len(page.items) < page_size:
            break
        position = page.position

    logger.info(
        f"Loaded {len(resources)} resources for API {gateway_id} in {pages} page(s)",
        extra={"gateway_id": gateway_id},
    )
    return resources
