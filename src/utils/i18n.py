# storefront locale: Turkish labels and messages, prices in lira
from decimal import Decimal
from typing import Dict

CURRENCY_SYMBOL = "₺"

CATEGORY_LABELS: Dict[str, str] = {
    "ebook": "E-Kitap",
    "course": "Kurs",
    "software": "Yazılım",
    "template": "Şablon",
    "other": "Diğer",
}

CATEGORY_ICONS: Dict[str, str] = {
    "ebook": "📚",
    "course": "🎓",
    "software": "💻",
    "template": "🎨",
    "other": "📦",
}

MESSAGES: Dict[str, str] = {
    # auth
    "fields_required": "Lütfen tüm alanları doldurun.",
    "invalid_email": "Geçersiz e-posta adresi.",
    "weak_password": "Şifre en az 6 karakter olmalıdır.",
    "username_taken": "Bu kullanıcı adı zaten alınmış.",
    "email_taken": "Bu e-posta adresi zaten kayıtlı.",
    "invalid_credentials": "Hatalı e-posta veya şifre.",
    "login_failed": "Giriş sırasında bir hata oluştu.",
    "register_failed": "Kayıt sırasında bir hata oluştu.",
    "logout_failed": "Çıkış sırasında bir hata oluştu.",
    "user_info_missing": "Kullanıcı bilgileri bulunamadı.",
    "welcome": "Hoşgeldin, {name}!",
    "registered": "Hesap oluşturuldu!",
    "registered_admin": "Yönetici hesabı oluşturuldu!",
    "logged_out": "Çıkış yapıldı.",
    # cart
    "cart_added": "Ürün sepete eklendi!",
    "cart_duplicate": "Bu ürün zaten sepetinizde!",
    "cart_removed": "Ürün sepetten çıkarıldı",
    "cart_empty": "Sepetiniz boş.",
    "cart_save_failed": "Sepet kaydedilemedi.",
    "product_not_found": "Ürün bulunamadı.",
    # favorites
    "favorites_login": "Favorilere eklemek için giriş yapın.",
    "favorite_added": "Favorilere eklendi! ❤️",
    "favorite_removed": "Favorilerden çıkarıldı.",
    "favorites_failed": "Favoriler güncellenemedi.",
    # checkout
    "order_placed": "Siparişiniz alındı. Teşekkürler!",
    "order_failed": "Sipariş kaydedilemedi.",
    "card_invalid": "Kart bilgilerini kontrol edin.",
    # admin
    "unauthorized": "Yetkisiz erişim!",
    "product_added": "Ürün başarıyla eklendi!",
    "product_updated": "Ürün güncellendi!",
    "product_deleted": "Ürün silindi",
    "product_save_failed": "Ürün kaydedilemedi.",
    "product_delete_failed": "Ürün silinemedi.",
    "product_cascade_failed": "Ürün silindi ancak bazı sepetlerden çıkarılamadı.",
    "invalid_product": "Ürün bilgilerini kontrol edin.",
    "invalid_price": "Fiyat sıfır veya pozitif bir sayı olmalıdır.",
    "invalid_category": "Geçersiz kategori.",
    "invite_created": "Yönetici davet kodu: {code}",
    "invite_failed": "Davet kodu oluşturulamadı.",
    # reviews
    "review_login": "Yorum yapmak için giriş yapın.",
    "review_empty": "Yorum boş olamaz.",
    "review_added": "Yorumunuz eklendi!",
    "review_deleted": "Yorum silindi.",
    "review_failed": "Yorum kaydedilemedi.",
    "review_forbidden": "Bu yorumu silme yetkiniz yok.",
    # generic
    "load_failed": "Veriler yüklenemedi.",
    "theme_changed": "Tema değiştirildi: {theme}",
}


def format_price(amount: Decimal) -> str:
    """₺299.99"""
    return f"{CURRENCY_SYMBOL}{amount:.2f}"


def category_label(category: str) -> str:
    return CATEGORY_LABELS.get(category, CATEGORY_LABELS["other"])


def category_icon(category: str) -> str:
    return CATEGORY_ICONS.get(category, CATEGORY_ICONS["other"])
