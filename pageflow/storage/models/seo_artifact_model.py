from tortoise import fields, models


class SeoArtifact(models.Model):
    """
    One immutable version of a page's keyword set.
    """
    id = fields.UUIDField(pk=True)

    page = fields.ForeignKeyField(
        "models.Page",
        related_name="seo_artifacts",
        on_delete=fields.CASCADE,
    )

    primary_keywords = fields.JSONField(default=list)
    secondary_keywords = fields.JSONField(default=list)
    uploaded_by = fields.CharField(max_length=255)
    version = fields.IntField()
    uploaded_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "seo_artifacts"
        unique_together = (("page", "version"),)
        ordering = ["-version"]
