from django.db.models import QuerySet
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from common.authentication import I18nJWTAuth
from common.controllers import UserAwareController
from events import models, schema


@api_controller("/tickets", auth=I18nJWTAuth(), tags=["Tickets"])
class TicketController(UserAwareController):
    @route.get("/mine", url_name="my_tickets", response=PaginatedResponseSchema[schema.TicketSchema])
    @paginate(PageNumberPaginationExtra, page_size=20)
    def my_tickets(self, status: models.Ticket.TicketStatus | None = None) -> QuerySet[models.Ticket]:
        """List the caller's tickets, newest first."""
        qs = models.Ticket.objects.full().filter(user=self.user())
        if status:
            qs = qs.filter(status=status)
        return qs.order_by("-created_at")
