from tortoise import fields, models


class AnalysisResult(models.Model):
    """
    Written by the external analysis service; the engine only reads it.
    """
    id = fields.UUIDField(pk=True)

    page = fields.ForeignKeyField(
        "models.Page",
        related_name="analysis_results",
        on_delete=fields.CASCADE,
    )

    overall_score = fields.FloatField()
    seo_score = fields.FloatField(null=True)
    readability_score = fields.FloatField(null=True)
    keyword_density_score = fields.FloatField(null=True)
    grammar_score = fields.FloatField(null=True)
    content_intent_score = fields.FloatField(null=True)
    technical_health_score = fields.FloatField(null=True)
    detailed_feedback = fields.JSONField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "analysis_results"
        indexes = ("created_at",)
