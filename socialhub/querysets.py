from django.db import models
from django.utils import timezone


class SoftDeleteQuerySet(models.QuerySet):
    """
    Queryset for models carrying an ``is_deleted`` flag. Nothing is hidden
    implicitly: read paths call ``visible()`` themselves.
    """

    def visible(self):
        return self.filter(is_deleted=False)

    def tombstoned(self):
        return self.filter(is_deleted=True)

    def soft_delete(self) -> int:
        return self.update(is_deleted=True, deleted_at=timezone.now())
