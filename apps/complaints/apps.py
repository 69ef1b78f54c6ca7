from django.apps import AppConfig


class ComplaintsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.complaints'
    verbose_name = 'Complaints'

    def ready(self):
        from auditlog.registry import auditlog
        from .models import Complaint, ForwardRecord, Remark

        auditlog.register(Complaint)
        auditlog.register(ForwardRecord)
        auditlog.register(Remark)
