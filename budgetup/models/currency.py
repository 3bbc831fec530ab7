"""
Currency Models for BudgetUp

The set of currencies is CLOSED: every code the system accepts is listed
in the catalogue below. Anything else is rejected at the boundary
(parse_currency) rather than deep inside conversion or formatting.

DESIGN DECISION: Conversion outcomes are returned as an explicit
ConversionResult instead of raising. A missing rate is a normal condition,
and callers must be able to see when an identity fallback was substituted.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class CurrencyCode(str, Enum):
    """Supported ISO 4217 currency codes."""
    # Major currencies
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    JPY = "JPY"
    AUD = "AUD"
    CAD = "CAD"
    CHF = "CHF"
    CNY = "CNY"
    SEK = "SEK"
    NZD = "NZD"

    # African currencies
    GHS = "GHS"
    NGN = "NGN"
    ZAR = "ZAR"
    KES = "KES"
    UGX = "UGX"
    TZS = "TZS"
    EGP = "EGP"
    MAD = "MAD"
    ETB = "ETB"
    XOF = "XOF"

    # Asian currencies
    INR = "INR"
    KRW = "KRW"
    SGD = "SGD"
    HKD = "HKD"
    MYR = "MYR"
    THB = "THB"
    PHP = "PHP"
    IDR = "IDR"
    VND = "VND"
    PKR = "PKR"
    BDT = "BDT"
    LKR = "LKR"

    # Middle Eastern currencies
    AED = "AED"
    SAR = "SAR"
    QAR = "QAR"
    KWD = "KWD"
    BHD = "BHD"
    OMR = "OMR"
    JOD = "JOD"
    ILS = "ILS"
    TRY = "TRY"

    # Latin American currencies
    BRL = "BRL"
    MXN = "MXN"
    ARS = "ARS"
    CLP = "CLP"
    COP = "COP"
    PEN = "PEN"
    UYU = "UYU"
    VES = "VES"

    # European currencies (non-euro)
    NOK = "NOK"
    DKK = "DKK"
    PLN = "PLN"
    CZK = "CZK"
    HUF = "HUF"
    RON = "RON"
    BGN = "BGN"
    HRK = "HRK"
    RSD = "RSD"
    RUB = "RUB"
    UAH = "UAH"

    # Other currencies
    ISK = "ISK"
    NIO = "NIO"
    CRC = "CRC"
    GTQ = "GTQ"
    HNL = "HNL"
    PAB = "PAB"
    DOP = "DOP"
    JMD = "JMD"
    TTD = "TTD"
    BBD = "BBD"


class ConversionPath(str, Enum):
    """How a conversion rate was obtained."""
    SAME = "same"           # Source and target are identical
    DIRECT = "direct"       # Direct rate table entry
    PIVOT = "pivot"         # Two hops through the pivot currency
    FALLBACK = "fallback"   # No rate available, identity substituted


class InvalidCurrencyError(ValueError):
    """Raised when a value is not a supported currency code."""


# =============================================================================
# CATALOGUE
# =============================================================================

class CurrencyInfo(BaseModel):
    """Display metadata for a currency."""
    model_config = ConfigDict(frozen=True)

    code: CurrencyCode
    name: str
    symbol: str
    country: str


def _info(code: str, name: str, symbol: str, country: str) -> CurrencyInfo:
    return CurrencyInfo(code=CurrencyCode(code), name=name, symbol=symbol, country=country)


WORLD_CURRENCIES: tuple[CurrencyInfo, ...] = (
    _info("USD", "US Dollar", "$", "United States"),
    _info("EUR", "Euro", "€", "European Union"),
    _info("GBP", "British Pound", "£", "United Kingdom"),
    _info("JPY", "Japanese Yen", "¥", "Japan"),
    _info("AUD", "Australian Dollar", "A$", "Australia"),
    _info("CAD", "Canadian Dollar", "C$", "Canada"),
    _info("CHF", "Swiss Franc", "CHF", "Switzerland"),
    _info("CNY", "Chinese Yuan", "¥", "China"),
    _info("SEK", "Swedish Krona", "kr", "Sweden"),
    _info("NZD", "New Zealand Dollar", "NZ$", "New Zealand"),
    _info("GHS", "Ghanaian Cedi", "₵", "Ghana"),
    _info("NGN", "Nigerian Naira", "₦", "Nigeria"),
    _info("ZAR", "South African Rand", "R", "South Africa"),
    _info("KES", "Kenyan Shilling", "KSh", "Kenya"),
    _info("UGX", "Ugandan Shilling", "USh", "Uganda"),
    _info("TZS", "Tanzanian Shilling", "TSh", "Tanzania"),
    _info("EGP", "Egyptian Pound", "£", "Egypt"),
    _info("MAD", "Moroccan Dirham", "DH", "Morocco"),
    _info("ETB", "Ethiopian Birr", "Br", "Ethiopia"),
    _info("XOF", "West African CFA Franc", "CFA", "West Africa"),
    _info("INR", "Indian Rupee", "₹", "India"),
    _info("KRW", "South Korean Won", "₩", "South Korea"),
    _info("SGD", "Singapore Dollar", "S$", "Singapore"),
    _info("HKD", "Hong Kong Dollar", "HK$", "Hong Kong"),
    _info("MYR", "Malaysian Ringgit", "RM", "Malaysia"),
    _info("THB", "Thai Baht", "฿", "Thailand"),
    _info("PHP", "Philippine Peso", "₱", "Philippines"),
    _info("IDR", "Indonesian Rupiah", "Rp", "Indonesia"),
    _info("VND", "Vietnamese Dong", "₫", "Vietnam"),
    _info("PKR", "Pakistani Rupee", "₨", "Pakistan"),
    _info("BDT", "Bangladeshi Taka", "৳", "Bangladesh"),
    _info("LKR", "Sri Lankan Rupee", "₨", "Sri Lanka"),
    _info("AED", "UAE Dirham", "د.إ", "United Arab Emirates"),
    _info("SAR", "Saudi Riyal", "﷼", "Saudi Arabia"),
    _info("QAR", "Qatari Riyal", "﷼", "Qatar"),
    _info("KWD", "Kuwaiti Dinar", "د.ك", "Kuwait"),
    _info("BHD", "Bahraini Dinar", ".د.ب", "Bahrain"),
    _info("OMR", "Omani Rial", "﷼", "Oman"),
    _info("JOD", "Jordanian Dinar", "د.ا", "Jordan"),
    _info("ILS", "Israeli Shekel", "₪", "Israel"),
    _info("TRY", "Turkish Lira", "₺", "Turkey"),
    _info("BRL", "Brazilian Real", "R$", "Brazil"),
    _info("MXN", "Mexican Peso", "$", "Mexico"),
    _info("ARS", "Argentine Peso", "$", "Argentina"),
    _info("CLP", "Chilean Peso", "$", "Chile"),
    _info("COP", "Colombian Peso", "$", "Colombia"),
    _info("PEN", "Peruvian Sol", "S/", "Peru"),
    _info("UYU", "Uruguayan Peso", "$U", "Uruguay"),
    _info("VES", "Venezuelan Bolívar", "Bs.S", "Venezuela"),
    _info("NOK", "Norwegian Krone", "kr", "Norway"),
    _info("DKK", "Danish Krone", "kr", "Denmark"),
    _info("PLN", "Polish Zloty", "zł", "Poland"),
    _info("CZK", "Czech Koruna", "Kč", "Czech Republic"),
    _info("HUF", "Hungarian Forint", "Ft", "Hungary"),
    _info("RON", "Romanian Leu", "lei", "Romania"),
    _info("BGN", "Bulgarian Lev", "лв", "Bulgaria"),
    _info("HRK", "Croatian Kuna", "kn", "Croatia"),
    _info("RSD", "Serbian Dinar", "дин", "Serbia"),
    _info("RUB", "Russian Ruble", "₽", "Russia"),
    _info("UAH", "Ukrainian Hryvnia", "₴", "Ukraine"),
    _info("ISK", "Icelandic Krona", "kr", "Iceland"),
    _info("NIO", "Nicaraguan Córdoba", "C$", "Nicaragua"),
    _info("CRC", "Costa Rican Colón", "₡", "Costa Rica"),
    _info("GTQ", "Guatemalan Quetzal", "Q", "Guatemala"),
    _info("HNL", "Honduran Lempira", "L", "Honduras"),
    _info("PAB", "Panamanian Balboa", "B/.", "Panama"),
    _info("DOP", "Dominican Peso", "RD$", "Dominican Republic"),
    _info("JMD", "Jamaican Dollar", "J$", "Jamaica"),
    _info("TTD", "Trinidad Dollar", "TT$", "Trinidad and Tobago"),
    _info("BBD", "Barbadian Dollar", "Bds$", "Barbados"),
)

_CATALOGUE: dict[CurrencyCode, CurrencyInfo] = {info.code: info for info in WORLD_CURRENCIES}

SUPPORTED_CURRENCIES: tuple[CurrencyCode, ...] = tuple(info.code for info in WORLD_CURRENCIES)


def parse_currency(value: object) -> CurrencyCode:
    """
    Parse a value into a supported CurrencyCode.

    Accepts CurrencyCode members and case/whitespace-insensitive strings.

    Raises:
        InvalidCurrencyError: If the value is empty, not a string,
            or not in the catalogue.
    """
    if isinstance(value, CurrencyCode):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidCurrencyError("Invalid currency provided")
    normalized = value.strip().upper()
    try:
        return CurrencyCode(normalized)
    except ValueError:
        raise InvalidCurrencyError(f"Unsupported currency: {normalized}")


def is_supported_currency(value: object) -> bool:
    """Check whether a value names a supported currency."""
    try:
        parse_currency(value)
    except InvalidCurrencyError:
        return False
    return True


def get_currency_info(code: object) -> Optional[CurrencyInfo]:
    """Catalogue entry for a code, or None if unknown."""
    try:
        return _CATALOGUE[parse_currency(code)]
    except InvalidCurrencyError:
        return None


# =============================================================================
# CONVERSION RESULT
# =============================================================================

class ConversionResult(BaseModel):
    """
    Outcome of resolving a rate or converting an amount.

    amount is only set by convert; a bare rate lookup leaves it None.
    When path is FALLBACK the rate is 1.0 and amount is the input amount
    unconverted; warning explains which rate was missing.
    """
    model_config = ConfigDict(frozen=True)

    from_currency: CurrencyCode
    to_currency: CurrencyCode
    rate: float = Field(
        ...,
        description="Multiplicative rate applied"
    )
    amount: Optional[float] = Field(
        default=None,
        description="Converted amount, when an amount was converted"
    )
    path: ConversionPath
    warning: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.path == ConversionPath.FALLBACK
