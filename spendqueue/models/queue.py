"""
Core Data Models for spendqueue

These models define the strict schema of the state document.
They are designed to:
1. Enforce type safety at load time (a bad document fails loudly)
2. Round-trip through JSON without losing a digit
3. Never drop fields they don't understand

DESIGN DECISION: The queue directory is a dict keyed by name in memory,
and a list on disk. Name uniqueness is then structural: two queues with
the same name can't both exist in a loaded State.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializationInfo,
    field_serializer,
    field_validator,
    model_validator,
)

from spendqueue.models.money import (
    MONEY_CONTEXT,
    SECONDS_PER_DAY,
    ZERO,
    Money,
    Timestamp,
    to_money,
)


DEFAULT_QUEUE_NAME = "default"


class Income(BaseModel):
    """
    How fast a queue's balance grows.

    `amount` is earned over `interval_in_days`, spread evenly per second.
    """
    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    amount: float = Field(
        default=1.0,
        allow_inf_nan=False,
        description="Money earned per interval"
    )
    interval_in_days: int = Field(
        default=1,
        ge=1,
        description="Length of the income interval in days"
    )

    @property
    def per_second(self) -> Decimal:
        """Accrual rate as an exact Decimal."""
        seconds = Decimal(SECONDS_PER_DAY * self.interval_in_days)
        return MONEY_CONTEXT.divide(to_money(self.amount), seconds)


class Item(BaseModel):
    """
    Something to buy.

    `time_purchased` is the discriminator: it is None while the item is
    pending and set at the moment it is bought.
    """
    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
    )

    name: str = Field(
        ...,
        min_length=1,
        description="What to buy"
    )
    amount: Money = Field(
        ...,
        ge=0,
        description="Listed price, or the price actually paid once bought"
    )
    purchase_link: Optional[str] = Field(
        default=None,
        description="Where to buy it"
    )
    time_purchased: Optional[Timestamp] = Field(
        default=None,
        description="When it was bought"
    )

    @field_validator('purchase_link')
    @classmethod
    def blank_link_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @property
    def is_purchased(self) -> bool:
        return self.time_purchased is not None


class Queue(BaseModel):
    """
    A named, independently budgeted FIFO of pending purchases
    plus the history of what was bought from it.
    """
    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    income: Income = Field(default_factory=Income)
    name: str = Field(
        ...,
        min_length=1,
        description="Unique key within a State"
    )
    last_calculation: Timestamp = Field(
        ...,
        description="When the balance was last brought up to date"
    )
    current_balance: Money = Field(
        default=ZERO,
        description="Accrued, unspent money (negative only after a forced purchase)"
    )
    future_purchases: list[Item] = Field(
        default_factory=list,
        description="Pending items; the head is the next purchase candidate"
    )
    past_purchases: list[Item] = Field(
        default_factory=list,
        description="Bought items, oldest first"
    )
    paused: bool = False

    @classmethod
    def new(cls, name: str, now: datetime) -> "Queue":
        """A fresh queue: 1 per day, nothing saved, nothing queued."""
        return cls(name=name, last_calculation=now)

    @property
    def head(self) -> Optional[Item]:
        if not self.future_purchases:
            return None
        return self.future_purchases[0]


class State(BaseModel):
    """
    The whole state document.

    CRITICAL: `currently_selected` is not checked here. A dangling
    selection is reported when a command resolves it, so the document
    can still be loaded and fixed by hand.
    """
    model_config = ConfigDict(extra="forbid")

    queues: dict[str, Queue] = Field(default_factory=dict)
    currently_selected: str = DEFAULT_QUEUE_NAME
    globally_paused: bool = False

    @field_validator('queues', mode='before')
    @classmethod
    def queues_from_list(cls, v: Any) -> Any:
        """Key the on-disk list by queue name, rejecting duplicates."""
        if not isinstance(v, (list, tuple)):
            return v

        keyed: dict[str, Any] = {}
        for entry in v:
            name = entry.name if isinstance(entry, Queue) else (
                entry.get("name") if isinstance(entry, dict) else None
            )
            if not isinstance(name, str):
                raise ValueError("Queue entry without a name")
            if name in keyed:
                raise ValueError(f"Duplicate queue name: {name}")
            keyed[name] = entry
        return keyed

    @model_validator(mode='after')
    def keys_match_names(self) -> 'State':
        for key, queue in self.queues.items():
            if key != queue.name:
                raise ValueError(
                    f"Queue stored under '{key}' is named '{queue.name}'"
                )
        return self

    @field_serializer('queues')
    def queues_to_list(self, queues: dict[str, Queue], info: SerializationInfo) -> list:
        return [queue.model_dump(mode=info.mode) for queue in queues.values()]

    @classmethod
    def default(cls, now: datetime) -> "State":
        """First-run state: a single queue named 'default', selected."""
        queue = Queue.new(DEFAULT_QUEUE_NAME, now)
        return cls(
            queues={queue.name: queue},
            currently_selected=queue.name,
            globally_paused=False,
        )
