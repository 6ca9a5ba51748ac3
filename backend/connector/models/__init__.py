# Import every model so SQLAlchemy's registry can resolve string relationships.
from .profile import Profile
from .item import Item
from .seller import Seller
from .claim import Claim
from .admin_notification import AdminNotification

__all__ = ["Profile", "Item", "Seller", "Claim", "AdminNotification"]
