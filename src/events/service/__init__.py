import typing as t

from django.db import models, transaction
from pydantic import BaseModel

T = t.TypeVar("T", bound=models.Model)


@transaction.atomic
def update_db_instance(instance: T, payload: BaseModel | None = None, **fields: t.Any) -> T:
    """Apply the fields set on a payload (plus explicit overrides) to a row locked with select_for_update.

    Only the touched columns are written, so a concurrent update to another column is not clobbered.
    """
    instance = instance.__class__.objects.select_for_update().get(pk=instance.pk)  # type: ignore[attr-defined]
    data = payload.model_dump(exclude_unset=True) if payload else {}
    data.update(fields)
    if not data:
        return instance
    for key, value in data.items():
        setattr(instance, key, value)
    instance.save(update_fields=[*data, "updated_at"])
    return instance
