# Import all models so SQLAlchemy can resolve relationships
from app.models.database import Base  # noqa: F401
from app.models.user import User, UserRole  # noqa: F401
from app.models.event import Event  # noqa: F401
from app.models.ticket_type import BookedSeat, TicketType  # noqa: F401
from app.models.offer import PromotionalOffer  # noqa: F401
from app.models.order import Order, OrderItem, OrderStatus  # noqa: F401
from app.models.waiting_list import WaitingListEntry  # noqa: F401
