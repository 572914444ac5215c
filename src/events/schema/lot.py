import typing as t
from datetime import date
from decimal import Decimal

from ninja import ModelSchema, Schema
from pydantic import Field, StringConstraints

from events.models import TicketLot

LotName = t.Annotated[str, StringConstraints(min_length=1, max_length=100, strip_whitespace=True)]
LotPrice = t.Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)]


class TicketLotSchema(ModelSchema):
    class Meta:
        model = TicketLot
        fields = ["id", "name", "price", "quantity", "start_date", "active"]


class TicketLotCreateSchema(Schema):
    name: LotName
    price: LotPrice
    quantity: int | None = Field(None, ge=0)
    start_date: date | None = None
    active: bool = True


class TicketLotUpdateSchema(Schema):
    name: LotName | None = None
    price: LotPrice | None = None
    quantity: int | None = Field(None, ge=0)
    start_date: date | None = None
    active: bool | None = None
