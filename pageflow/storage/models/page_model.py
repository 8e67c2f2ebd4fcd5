from tortoise import fields, models

from pageflow.records import PageStatus


class Page(models.Model):
    """
    A page moving through the SEO -> content -> review pipeline.
    """
    id = fields.UUIDField(pk=True)
    project_id = fields.UUIDField(index=True)
    name = fields.CharField(max_length=255)

    # stored lower-cased; unique per project
    slug = fields.CharField(max_length=255)

    status = fields.CharEnumField(PageStatus, max_length=32, default=PageStatus.DRAFT, index=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "pages"
        unique_together = (("project_id", "slug"),)
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.slug} [{self.status}]"
