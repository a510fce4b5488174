# foodorder/domain/errors.py


class FoodOrderError(Exception):
    """Base for every failure the API reports to the user."""

    code = "error"
    message = "Islem basarisiz."

    def __init__(self, message: str | None = None, **details):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)


class ValidationError(FoodOrderError):
    code = "validation_error"
    message = "Gecersiz istek."


class NotFound(FoodOrderError):
    code = "not_found"
    message = "Kayit bulunamadi."


class NotAuthorized(FoodOrderError):
    code = "not_authorized"
    message = "Bu islem icin yetkiniz yok."


class CrossRestaurantConflict(FoodOrderError):
    """Cart holds lines of another restaurant; caller must confirm clear-and-replace."""

    code = "cross_restaurant_conflict"
    message = "Farkli bir restorandan urun ekliyorsun. Sepet temizlensin mi?"


class PromotionRejected(FoodOrderError):
    code = "promotion_rejected"
    message = "Indirim kodu uygulanamadi."


class InvalidPromotionCode(PromotionRejected):
    code = "invalid_promotion_code"
    message = "Gecersiz indirim kodu."


class PromotionExpired(PromotionRejected):
    code = "promotion_expired"
    message = "Indirim kodunun suresi doldu."


class MinOrderNotMet(PromotionRejected):
    code = "min_order_not_met"
    message = "Sepet tutari indirim icin yetersiz."


class InvalidTransition(FoodOrderError):
    code = "invalid_transition"
    message = "Siparis durumu bu sekilde degistirilemez."


class CancelWindowExpired(FoodOrderError):
    code = "cancel_window_expired"
    message = "Siparis iptal suresi doldu."


class ConcurrencyConflict(FoodOrderError):
    code = "concurrency_conflict"
    message = "Siparis baska bir islem tarafindan guncellendi."


class PersistenceError(FoodOrderError):
    code = "persistence_error"
    message = "Kayit islemi basarisiz. Lutfen tekrar deneyin."


class PushDeliveryError(FoodOrderError):
    code = "push_delivery_error"
    message = "Bildirim gonderilemedi."
