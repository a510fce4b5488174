#import every model so SQLAlchemy registers it in Base.metadata

from foodorder.data.models.user import UserModel
from foodorder.data.models.restaurant import RestaurantModel
from foodorder.data.models.order import OrderModel
from foodorder.data.models.promotion import PromotionModel
from foodorder.data.models.notification import NotificationModel

__all__ = ["UserModel", "RestaurantModel", "OrderModel", "PromotionModel", "NotificationModel"]
