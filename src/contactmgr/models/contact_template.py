from django.db import models


class ContactTemplate(models.Model):
    """A named, already normalized contact that can be applied to many domains."""

    name = models.CharField(
        max_length=100,
        unique=True,
        help_text="Template name. Letters, digits, hyphens and underscores only",
    )
    contact = models.JSONField(
        default=dict,
        help_text="Normalized contact record, keyed the way the registrar API expects",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name
