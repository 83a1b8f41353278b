"""Repository for the Order aggregate.

Orders are looked up by the external session id, the only key the payment
gateway and the returning client know.
"""

from protean.exceptions import ObjectNotFoundError

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.repository(part_of=Order)
class OrderRepository:
    def find_by_session_id(self, session_id: str) -> Order | None:
        if not session_id:
            return None
        orders = self._dao.query.filter(external_session_ref=session_id).all().items
        return orders[0] if orders else None

    def get_by_session_id(self, session_id: str) -> Order:
        order = self.find_by_session_id(session_id)
        if order is None:
            raise ObjectNotFoundError({"session_id": [f"No order found for session {session_id}"]})
        return order
