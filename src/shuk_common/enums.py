"""Global enums shared by the catalog, ledgers and discovery engine.

Values are the wire strings used by the listing API and stored on ledger rows.
"""

from enum import Enum


class ListingType(str, Enum):
    DIRECT_SALE = "DIRECT_SALE"
    AUCTION = "AUCTION"
    TIMED_BREAK = "TIMED_BREAK"


class ProductCategory(str, Enum):
    RAW_CARD = "RAW_CARD"
    GRADED_CARD = "GRADED_CARD"
    SEALED_PRODUCT = "SEALED_PRODUCT"


class Condition(str, Enum):
    DAMAGED = "Damaged"
    PLAYED = "Played"
    EXCELLENT = "Excellent"
    NEAR_MINT = "Near Mint"
    MINT = "Mint"


class Language(str, Enum):
    ENGLISH = "English"
    JAPANESE = "Japanese"


class GradingCompany(str, Enum):
    PSA = "PSA"
    BGS = "BGS"
    CGC = "CGC"
    ACE = "ACE"
    OTHER = "Other"


class SealedProductType(str, Enum):
    BOOSTER_BOX = "Booster Box"
    ETB = "ETB"
    BOOSTER_BUNDLE = "Booster Bundle"
    COLLECTION_BOX = "Collection Box"
    UPC = "UPC"
    TIN = "Tin"
    SINGLE_PACKS = "Single Packs"
    OTHER = "Other"


class PokemonType(str, Enum):
    COLORLESS = "Colorless"
    FIRE = "Fire"
    WATER = "Water"
    GRASS = "Grass"
    LIGHTNING = "Lightning"
    PSYCHIC = "Psychic"
    FIGHTING = "Fighting"
    DARKNESS = "Darkness"
    METAL = "Metal"
    FAIRY = "Fairy"
    DRAGON = "Dragon"


class CardCategory(str, Enum):
    POKEMON = "Pokemon"
    TRAINER = "Trainer"
    ENERGY = "Energy"


class VariantTag(str, Enum):
    FULL_ART = "FULL_ART"
    ALT_ART = "ALT_ART"
    IR = "IR"
    SAR = "SAR"
    TRAINER_GALLERY = "TRAINER_GALLERY"
    VINTAGE = "VINTAGE"
    PROMO = "PROMO"
    SHADOWLESS = "SHADOWLESS"
    FIRST_EDITION = "FIRST_EDITION"
    SECRET_RARE = "SECRET_RARE"


class BreakStatus(str, Enum):
    OPEN = "OPEN"
    FULL_PENDING_SCHEDULE = "FULL_PENDING_SCHEDULE"
    SCHEDULED = "SCHEDULED"
    LIVE = "LIVE"
    COMPLETED = "COMPLETED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (BreakStatus.COMPLETED, BreakStatus.CANCELLED, BreakStatus.EXPIRED)


class BreakEntryStatus(str, Enum):
    AUTHORIZED = "AUTHORIZED"
    CHARGED = "CHARGED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"

    @property
    def holds_spot(self) -> bool:
        return self in (BreakEntryStatus.AUTHORIZED, BreakEntryStatus.CHARGED)


class WaitlistStatus(str, Enum):
    WAITING = "WAITING"
    JOINED = "JOINED"
    CANCELLED = "CANCELLED"


class TransactionType(str, Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    PURCHASE = "PURCHASE"
    RELEASE = "RELEASE"
    REFUND = "REFUND"


class NotificationType(str, Enum):
    INFO = "INFO"
    NEW_BID = "NEW_BID"
    OUTBID = "OUTBID"
    BID_WON = "BID_WON"
    SALE = "SALE"
    BREAK_FULL = "BREAK_FULL"
    BREAK_LIVE = "BREAK_LIVE"


class LiveEventType(str, Enum):
    WHEEL_SPIN = "WHEEL_SPIN"
    CARD_REVEAL = "CARD_REVEAL"
    RANDOMIZE_LIST = "RANDOMIZE_LIST"
    BREAK_START = "BREAK_START"
    BREAK_END = "BREAK_END"
    SYSTEM_MSG = "SYSTEM_MSG"


class AppScope(str, Enum):
    MARKETPLACE = "MARKETPLACE"
    BREAKS = "BREAKS"
    COMBINED = "COMBINED"


class SearchScope(str, Enum):
    ALL = "ALL"
    TITLE = "TITLE"
    POKEMON = "POKEMON"
    SET = "SET"
    SELLER = "SELLER"
    BOOSTER = "BOOSTER"


class SortOption(str, Enum):
    NEWEST = "NEWEST"
    ENDING_SOON = "ENDING_SOON"
    PRICE_ASC = "PRICE_ASC"
    PRICE_DESC = "PRICE_DESC"
    MOST_BIDS = "MOST_BIDS"


class UserRole(str, Enum):
    BUYER = "BUYER"
    SELLER = "SELLER"
