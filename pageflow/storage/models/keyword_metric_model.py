from tortoise import fields, models

from pageflow.records import KeywordType


class KeywordMetric(models.Model):
    """
    Market metrics for one keyword of one SEO artifact version.
    """
    id = fields.UUIDField(pk=True)

    seo_artifact = fields.ForeignKeyField(
        "models.SeoArtifact",
        related_name="keyword_metrics",
        on_delete=fields.CASCADE,
    )

    keyword = fields.CharField(max_length=512)
    keyword_type = fields.CharEnumField(KeywordType, max_length=16)
    search_volume = fields.IntField(null=True)
    cpc = fields.FloatField(null=True)
    competition = fields.CharField(max_length=32, null=True)
    competition_index = fields.IntField(null=True)
    low_bid = fields.FloatField(null=True)
    high_bid = fields.FloatField(null=True)
    fetched_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "keyword_metrics"
        unique_together = (("seo_artifact", "keyword"),)
