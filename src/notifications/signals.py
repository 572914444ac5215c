from django.dispatch import Signal

# Signal for requesting notification dispatch
# Expected kwargs:
#   - notification_type: NotificationType enum value
#   - user: RoleHubUser instance
#   - context: JSON-serializable dict
notification_requested = Signal()
