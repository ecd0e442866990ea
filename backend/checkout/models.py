from django.db import models


class GuestProfile(models.Model):
    """
    Contact details a guest registers with, keyed by the session guest id.

    Used to prefill checkout; forgetting the profile deletes the row.
    """

    session_id = models.CharField(
        max_length=100,
        unique=True,
        help_text='Guest identifier stored in the Django session'
    )
    email = models.EmailField()
    phone = models.CharField(max_length=32)
    zip_code = models.CharField(max_length=10)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-updated_at']

    def __str__(self):
        return f"{self.email} ({self.session_id[:8]}...)"
