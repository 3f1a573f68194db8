# storefront/core/i18n.py
"""
Bilingual Messages
==================

Arabic/English catalog for every user-facing message (toasts, validation
errors, HTTP error details). Keys are stable; services return keys and the
routes resolve them for the request language.
"""

import enum
from typing import Optional

from fastapi import HTTPException


class Language(str, enum.Enum):
    AR = "ar"
    EN = "en"


# key -> (english, arabic)
MESSAGES: dict[str, tuple[str, str]] = {
    # ═══════════════════════════════════════════════════════════
    # 🛒 CART
    # ═══════════════════════════════════════════════════════════
    "added_to_cart": ("Product added to cart!", "تم إضافة المنتج للسلة!"),
    "added_many_to_cart": (
        "Successfully added {count} items to cart!",
        "تم إضافة {count} منتج للسلة بنجاح!",
    ),
    "no_items_in_stock": ("No products available in stock", "لا توجد منتجات متوفرة في المخزون"),
    "select_options": ("Please select size and color", "يرجى اختيار المقاس واللون"),
    "out_of_stock": ("Product is out of stock", "المنتج غير متوفر في المخزون"),
    "only_n_available": (
        "Only {count} items available in stock",
        "متوفر {count} قطعة فقط في المخزون",
    ),
    "option_unavailable": ("This option is out of stock", "هذا الخيار غير متوفر"),
    "cart_item_not_found": ("Cart item not found", "المنتج غير موجود في السلة"),
    "product_not_found": ("Product not found", "المنتج غير موجود"),

    # ═══════════════════════════════════════════════════════════
    # 🔐 SESSION / SECURITY
    # ═══════════════════════════════════════════════════════════
    "session_expired": (
        "Your session has expired. Please sign in again.",
        "انتهت صلاحية الجلسة. يرجى تسجيل الدخول مرة أخرى.",
    ),
    "csrf_invalid": (
        "Your session has expired. Please refresh the page and try again.",
        "انتهت صلاحية الجلسة. يرجى تحديث الصفحة والمحاولة مرة أخرى.",
    ),
    "too_many_requests": (
        "Too many attempts. Please try again later.",
        "محاولات كثيرة جداً. يرجى المحاولة لاحقاً.",
    ),

    # ═══════════════════════════════════════════════════════════
    # 🔑 PASSWORD / MFA
    # ═══════════════════════════════════════════════════════════
    "password_required": ("Password is required", "كلمة المرور مطلوبة"),
    "password_too_short": (
        "Password must be at least {min} characters long",
        "كلمة المرور يجب أن تكون {min} أحرف على الأقل",
    ),
    "password_too_long": (
        "Password must be less than {max} characters",
        "كلمة المرور يجب أن تكون أقل من {max} حرف",
    ),
    "password_forbidden_chars": ("Password contains invalid characters", "كلمة المرور تحتوي على أحرف غير مسموحة"),
    "password_alphabet": (
        "Password contains invalid characters (allowed: letters, numbers, @#-_!$%^&*()+=)",
        "كلمة المرور تحتوي على أحرف غير مسموحة (المسموح: حروف، أرقام، @#-_!$%^&*()+=)",
    ),
    "passwords_mismatch": ("Passwords do not match", "كلمات المرور غير متطابقة"),
    "password_must_differ": (
        "New password must be different from the current password",
        "كلمة المرور الجديدة يجب أن تكون مختلفة عن كلمة المرور الحالية",
    ),
    "password_changed": (
        "Password changed successfully! You will be logged out now.",
        "تم تغيير كلمة المرور بنجاح! سيتم تسجيل الخروج الآن.",
    ),
    "mfa_code_invalid": ("Please enter a valid 6-digit code", "يرجى إدخال كود مكون من 6 أرقام"),
    "mfa_verification_failed": ("Invalid verification code", "كود التحقق غير صحيح"),
    "mfa_enabled": ("Two-factor authentication enabled", "تم تفعيل المصادقة الثنائية"),
    "mfa_disabled": ("Two-factor authentication disabled", "تم إيقاف المصادقة الثنائية"),
    "strength_very_weak": ("Very Weak", "ضعيف جداً"),
    "strength_weak": ("Weak", "ضعيف"),
    "strength_fair": ("Fair", "متوسط"),
    "strength_good": ("Good", "جيد"),
    "strength_excellent": ("Excellent", "ممتاز"),

    # ═══════════════════════════════════════════════════════════
    # 👤 PROFILE FIELDS
    # ═══════════════════════════════════════════════════════════
    "email_required": ("Email is required", "البريد الإلكتروني مطلوب"),
    "email_forbidden_chars": ("Email contains invalid characters", "البريد الإلكتروني يحتوي على أحرف غير مسموحة"),
    "email_invalid": ("Invalid email format", "صيغة البريد الإلكتروني غير صحيحة"),
    "username_required": ("Username is required", "اسم المستخدم مطلوب"),
    "username_forbidden_chars": ("Username contains invalid characters", "اسم المستخدم يحتوي على أحرف غير مسموحة"),
    "username_length": (
        "Username must be {min}-{max} characters",
        "اسم المستخدم يجب أن يكون بين {min} و {max} حرف",
    ),
    "username_format": (
        "Username may contain letters, numbers, underscores, hyphens, or Arabic characters",
        "اسم المستخدم يمكن أن يحتوي على حروف وأرقام وشرطات أو حروف عربية",
    ),
    "profile_updated": ("Profile updated successfully", "تم تحديث الملف الشخصي بنجاح"),

    # ═══════════════════════════════════════════════════════════
    # ⭐ REVIEWS
    # ═══════════════════════════════════════════════════════════
    "login_required_review": ("Please login to add a review", "يجب تسجيل الدخول لإضافة رأي"),
    "review_added": ("Your review has been added successfully!", "تم إضافة رأيك بنجاح!"),
    "comment_empty": ("Comment cannot be empty", "التعليق لا يمكن أن يكون فارغاً"),
    "comment_invalid_chars": (
        "Comment can only contain Arabic letters, English letters, numbers, spaces, and basic punctuation",
        "التعليق يمكن أن يحتوي فقط على حروف عربية وإنجليزية وأرقام وعلامات ترقيم أساسية",
    ),
    "comment_too_short": (
        "Comment must be at least {min} characters long",
        "التعليق يجب أن يكون على الأقل {min} أحرف",
    ),
    "comment_too_long": (
        "Comment must not exceed {max} characters",
        "التعليق يجب ألا يتجاوز {max} حرف",
    ),
    "just_now": ("Just now", "الآن"),
    "years_ago": ("{n} year(s) ago", "منذ {n} سنة"),
    "months_ago": ("{n} month(s) ago", "منذ {n} شهر"),
    "days_ago": ("{n} day(s) ago", "منذ {n} يوم"),
    "hours_ago": ("{n} hour(s) ago", "منذ {n} ساعة"),
    "minutes_ago": ("{n} minute(s) ago", "منذ {n} دقيقة"),

    # ═══════════════════════════════════════════════════════════
    # 🌐 GENERIC
    # ═══════════════════════════════════════════════════════════
    "server_unreachable": ("Failed to connect to server", "فشل الاتصال بالخادم"),
    "not_found": ("The requested resource was not found", "المورد المطلوب غير موجود"),
    "internal_error": (
        "An internal error occurred. Please try again later.",
        "حدث خطأ داخلي. يرجى المحاولة لاحقاً.",
    ),
    "request_failed": ("The request could not be completed", "تعذر إتمام الطلب"),
}


def resolve_language(value: Optional[str], default: str = Language.AR.value) -> Language:
    """
    Resolves a language from a query param or an Accept-Language header.

    Examples:
        >>> resolve_language("en-US,en;q=0.9")
        <Language.EN: 'en'>
        >>> resolve_language(None, "ar")
        <Language.AR: 'ar'>
    """
    if value:
        for part in value.split(","):
            tag = part.split(";")[0].strip().lower()[:2]
            if tag in (Language.AR.value, Language.EN.value):
                return Language(tag)
    return Language(default)


def translate(key: str, language: Language = Language.AR, **params) -> str:
    """Returns the message for the given key in the requested language"""
    english, arabic = MESSAGES.get(key, MESSAGES["request_failed"])
    template = arabic if language == Language.AR else english
    return template.format(**params) if params else template


def localized_http_exception(
        status_code: int,
        key: str,
        language: Language,
        headers: Optional[dict] = None,
        **params,
) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail=translate(key, language, **params),
        headers=headers,
    )
