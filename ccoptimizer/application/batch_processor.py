"""Queueing and cost estimation for asynchronous batch submissions."""

import math
import random
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence, Union

from ..constants import (
    BATCH_DEFAULT_MAX_TOKENS,
    BATCH_DEFAULT_MODEL,
    BATCH_DISCOUNT,
    BATCH_PROCESSING_WINDOW,
    CHARS_PER_TOKEN_ESTIMATE,
    FALLBACK_MODEL_FAMILY,
    MODEL_PRICING_PER_MTOK,
)
from ..domain.exceptions import ValidationError
from ..domain.models import BatchMetrics, BatchRequest, BatchStatus
from ..enums import MessageRoles
from ..logging import debug, LogRecord, LogEvent
from .cache.keys import json_dumps_sorted

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_request_id() -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"req_{int(time.time() * 1000)}_{suffix}"


class BatchProcessor:
    """Collects requests for the provider's batch API."""

    def __init__(self):
        self.queue: List[BatchRequest] = []

    def add_request(
        self,
        message: Union[str, Sequence[Dict[str, Any]]],
        model: str = BATCH_DEFAULT_MODEL,
        max_tokens: int = BATCH_DEFAULT_MAX_TOKENS,
    ) -> str:
        """
        Queue a request and return its id.

        A plain string is wrapped as a single user message.

        Raises:
            ValidationError: If ``max_tokens`` is not positive
        """
        if max_tokens < 1:
            raise ValidationError(
                "max_tokens must be positive", details={"max_tokens": max_tokens}
            )

        if isinstance(message, str):
            messages = [{"role": MessageRoles.User.value, "content": message}]
        else:
            messages = [dict(m) for m in message]

        request = BatchRequest(
            id=generate_request_id(),
            model=model,
            messages=messages,
            max_tokens=max_tokens,
        )
        self.queue.append(request)

        debug(
            LogRecord(
                event=LogEvent.BATCH_EVENT.value,
                message=f"Queued batch request {request.id}",
                data={"id": request.id, "model": model, "queued": len(self.queue)},
            )
        )
        return request.id

    def estimate_metrics(self) -> BatchMetrics:
        """Estimate batch cost against the Sonnet input price."""
        tokens = sum(
            math.ceil(len(json_dumps_sorted(r.model_dump())) / CHARS_PER_TOKEN_ESTIMATE)
            for r in self.queue
        )
        input_price, _ = MODEL_PRICING_PER_MTOK[FALLBACK_MODEL_FAMILY]
        standard_cost = tokens / 1e6 * input_price
        batch_cost = standard_cost * (1 - BATCH_DISCOUNT)

        return BatchMetrics(
            total_requests=len(self.queue),
            estimated_tokens=tokens,
            standard_cost=standard_cost,
            batch_cost=batch_cost,
            savings=standard_cost - batch_cost,
            savings_percent=round(BATCH_DISCOUNT * 100),
            processing_time=BATCH_PROCESSING_WINDOW,
        )

    def format_for_submission(self) -> Dict[str, Any]:
        return {
            "requests": [
                {"custom_id": r.id, "params": r.model_dump()} for r in self.queue
            ],
            "metadata": {
                "created_at": datetime.now(timezone.utc).isoformat(),
                "total_requests": len(self.queue),
            },
        }

    def create_batch_file(self) -> str:
        """Render the queue as JSONL, one request per line."""
        return "\n".join(r.model_dump_json() for r in self.queue)

    def clear(self) -> None:
        self.queue = []

    def get_status(self) -> BatchStatus:
        return BatchStatus(queued=len(self.queue), metrics=self.estimate_metrics())
