import math
from dataclasses import dataclass, asdict

from woodzire.core.config import settings


def round_half_up(amount: float) -> int:
    """Round to the nearest whole currency unit, halves going up (no paise)."""
    return int(math.floor(amount + 0.5))


@dataclass(frozen=True)
class Quote:
    subtotal: float
    shipping_cost: float
    tax: int
    gift_card_discount: float
    grand_total: float
    is_international: bool

    def to_dict(self):
        return asdict(self)


def is_international(country: str, domestic_country: str = None) -> bool:
    domestic = (domestic_country or settings.DOMESTIC_COUNTRY).strip().lower()
    return (country or "").strip().lower() != domestic


def compute_subtotal(lines) -> float:
    """
    FORMULA 1: Subtotal
    ===================
    subtotal = sum(unit_price × quantity)

    unit_price already carries any per-product or scheduled-sale discount;
    it is never recomputed here.
    """
    return sum(float(l["unit_price"]) * int(l["quantity"]) for l in lines)


def compute_shipping(subtotal: float, international: bool, pay: dict) -> float:
    """
    FORMULA 2: Shipping
    ===================
    international            -> international_shipping_charge
    subtotal >= threshold    -> 0
    otherwise                -> domestic_shipping_charge
    """
    if international:
        return float(pay.get("international_shipping_charge", 999))
    if subtotal >= float(pay.get("domestic_shipping_threshold", 2000)):
        return 0.0
    return float(pay.get("domestic_shipping_charge", 99))


def compute_tax(subtotal: float, gst_percentage: float) -> int:
    """
    FORMULA 3: GST
    ==============
    tax = round_half_up(subtotal × gst / 100)

    Charged on the pre-gift-card subtotal.
    Example: subtotal=1800, gst=18 -> tax = 324
    """
    return round_half_up(subtotal * float(gst_percentage) / 100)


def compute_quote(lines, country: str, pay: dict, gift_card_balance: float = 0) -> Quote:
    """
    FORMULAS 1-5: Checkout totals
    =============================
    gift_card_discount = min(balance, subtotal)
    grand_total = max(0, subtotal - gift_card_discount) + shipping + tax

    The gift card never pays for shipping or tax. Pure: no card balance or
    stock is touched here.
    Example: subtotal=3000 international (999), gst=18, card=500
             -> (3000-500) + 999 + 540 = 4039
    """
    subtotal = compute_subtotal(lines)
    international = is_international(country, pay.get("domestic_country"))
    shipping = compute_shipping(subtotal, international, pay)
    tax = compute_tax(subtotal, pay.get("gst_percentage", 18))
    discount = min(max(float(gift_card_balance or 0), 0.0), subtotal)
    grand_total = max(0.0, subtotal - discount) + shipping + tax
    return Quote(subtotal=subtotal, shipping_cost=shipping, tax=tax,
                 gift_card_discount=discount, grand_total=grand_total,
                 is_international=international)


def order_total(subtotal: float, shipping_cost: float, tax: float, gift_card_discount: float = 0) -> float:
    """Total of a stored order; used when an admin edits shipping after checkout."""
    return max(0.0, float(subtotal) - float(gift_card_discount or 0)) + float(shipping_cost or 0) + float(tax or 0)
