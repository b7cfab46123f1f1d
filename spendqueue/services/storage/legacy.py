"""
Legacy State Schemas

Older versions of sq stored a single queue at the top level of the
document. Each legacy schema is a pydantic model that knows how to
upgrade itself to the current State.

DESIGN DECISION: Legacy models forbid unknown fields.
A document with fields we don't recognize is reported as corrupt
instead of being upgraded with those fields silently dropped.

No semantic changes are made in a migration.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from spendqueue.models.money import Money, Timestamp
from spendqueue.models.queue import DEFAULT_QUEUE_NAME, Income, Item, Queue, State


class SingleQueueState(BaseModel):
    """
    The single-queue document.

    {income, last_calculation, current_amount, future_purchases,
     past_purchases, paused?}
    The earliest files have no `paused` field.
    """
    model_config = ConfigDict(extra="forbid")

    income: Income
    last_calculation: Timestamp
    current_amount: Money
    future_purchases: list[Item] = Field(default_factory=list)
    past_purchases: list[Item] = Field(default_factory=list)
    paused: Optional[bool] = None

    def upgrade(self) -> State:
        queue = Queue(
            income=self.income,
            name=DEFAULT_QUEUE_NAME,
            last_calculation=self.last_calculation,
            current_balance=self.current_amount,
            future_purchases=self.future_purchases,
            past_purchases=self.past_purchases,
            paused=bool(self.paused),
        )
        return State(
            queues={queue.name: queue},
            currently_selected=DEFAULT_QUEUE_NAME,
            globally_paused=False,
        )


# Tried in order, newest schema first.
LEGACY_SCHEMAS: list[tuple[str, type[BaseModel]]] = [
    ("single-queue", SingleQueueState),
]


def decode_legacy(raw: str) -> Optional[tuple[str, State]]:
    """
    Try every legacy schema on `raw`.

    Returns:
        (schema_name, upgraded_state) for the first schema that decodes,
        or None if none does.
    """
    for schema_name, model in LEGACY_SCHEMAS:
        try:
            legacy = model.model_validate_json(raw)
        except ValidationError:
            continue
        return schema_name, legacy.upgrade()
    return None
