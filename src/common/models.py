import typing as t
import uuid

from django.db import models


class TimeStampedModel(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True, db_index=True)

    # Models whose Meta.constraints arbitrate concurrent inserts leave them to the database,
    # so a duplicate surfaces as IntegrityError instead of ValidationError.
    validate_constraints_on_save: t.ClassVar[bool] = True

    class Meta:
        abstract = True

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Override the save method to call full_clean before saving."""
        self.full_clean(validate_constraints=self.validate_constraints_on_save)
        super().save(*args, **kwargs)
