"""Order payment outcome: commands and handler.

Both commands are conditional transitions: they apply only to a pending order
and report whether they did. Settled orders are left untouched.
"""

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class RecordPaymentSuccess:
    session_id = String(required=True, max_length=255)
    payment_ref = String(max_length=255)


@storefront.command(part_of="Order")
class RecordPaymentFailure:
    session_id = String(required=True, max_length=255)
    reason = String(max_length=500)


@storefront.command_handler(part_of=Order)
class RecordPaymentOutcomeHandler:
    @handle(RecordPaymentSuccess)
    def record_payment_success(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_by_session_id(command.session_id)
        if not order.mark_successful(payment_ref=command.payment_ref):
            return False
        repo.add(order)
        return True

    @handle(RecordPaymentFailure)
    def record_payment_failure(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_by_session_id(command.session_id)
        if not order.mark_failed(reason=command.reason):
            return False
        repo.add(order)
        return True
