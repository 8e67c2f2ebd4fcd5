from tortoise import fields, models


class ContentArtifact(models.Model):
    """
    One immutable version of a page's content body.
    """
    id = fields.UUIDField(pk=True)

    page = fields.ForeignKeyField(
        "models.Page",
        related_name="content_artifacts",
        on_delete=fields.CASCADE,
    )

    # NormalizedContent.to_dict()
    parsed_content = fields.JSONField()
    source_document_url = fields.CharField(max_length=2048, null=True)
    uploaded_by = fields.CharField(max_length=255)
    version = fields.IntField()
    uploaded_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "content_artifacts"
        unique_together = (("page", "version"),)
        ordering = ["-version"]
