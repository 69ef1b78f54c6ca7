from django.http import JsonResponse
from django.views import View

from apps.accounts.permissions import ActorRequiredMixin
from apps.core.exceptions import ServiceError
from .messages import format_notification_date
from .services import NotificationService


def _serialize(n):
    return {
        'id': n.id,
        'category': n.category,
        'title': n.title,
        'message': n.message,
        'message_key': n.message_key,
        'params': n.params,
        'complaint_id': n.complaint_id,
        'is_read': n.is_read,
        'created_at': n.created_at.isoformat(),
        'created_at_display': format_notification_date(n.created_at),
    }


class NotificationListAPIView(ActorRequiredMixin, View):
    """Newest-first inbox for the logged-in user in their current role."""

    def get(self, request):
        notifications, unread_count = NotificationService.list_for_recipient(
            recipient=request.user,
            recipient_role=request.user.role,
        )
        return JsonResponse({
            'notifications': [_serialize(n) for n in notifications],
            'unread_count': unread_count,
        })


class NotificationMarkReadAPIView(ActorRequiredMixin, View):
    """Mark one notification (by id) or ``all`` of them as read."""

    def post(self, request, notification_id='all'):
        try:
            count = NotificationService.mark_read(
                recipient=request.user,
                recipient_role=request.user.role,
                notification_id=notification_id,
            )
        except ServiceError as exc:
            return JsonResponse(exc.as_dict(), status=exc.status_code)
        return JsonResponse({'success': True, 'marked_count': count})


class NotificationCountAPIView(ActorRequiredMixin, View):
    """Unread count only, for polling clients."""

    def get(self, request):
        count = NotificationService.get_unread_count(
            recipient=request.user,
            recipient_role=request.user.role,
        )
        return JsonResponse({'unread_count': count})
